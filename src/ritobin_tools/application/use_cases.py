"""Application use-cases orchestrating conversion and diff workflows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from ritobin_tools.adapters.codec import RitobinCodec
from ritobin_tools.adapters.resolvers import select_resolver
from ritobin_tools.application.ports import BinCodec, HashResolver
from ritobin_tools.application.results import (
    BatchResult,
    ConversionOutcome,
    Converted,
    DiffResult,
    Failed,
)
from ritobin_tools.diffing import compute_diff
from ritobin_tools.errors import (
    BatchConversionError,
    BinParseError,
    FileAccessError,
    RitobinToolsError,
    UnsupportedExtensionError,
)
from ritobin_tools.schemas import AppConfig
from ritobin_tools.types import (
    BIN_EXTENSION,
    DEFAULT_CONTEXT_RADIUS,
    DEFAULT_TEXT_EXTENSION,
    SUPPORTED_EXTENSIONS,
    TEXT_EXTENSIONS,
    extension_of,
)

logger = logging.getLogger(__name__)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileAccessError("open", path, exc) from exc


def _read_text(path: Path) -> str:
    data = _read_bytes(path)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BinParseError(f"Failed to read ritobin file {path}: {exc}") from exc


def _write_bytes(path: Path, data: bytes) -> None:
    try:
        with path.open("wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise FileAccessError("create", path, exc) from exc


def _require_supported(path: Path) -> str:
    extension = extension_of(path)
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedExtensionError(extension, SUPPORTED_EXTENSIONS)
    return extension


def _bin_to_text(
    path: Path, config: AppConfig, codec: BinCodec, resolver: HashResolver | None
) -> str:
    tree = codec.parse(_read_bytes(path))
    resolver = resolver if resolver is not None else select_resolver(config)
    return codec.render_text(tree, resolver)


def convert_file(
    input_path: Path,
    output_path: Path | None = None,
    *,
    config: AppConfig,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> Converted:
    """Use-case: convert one file in the direction its extension selects.

    Parameters
    ----------
    input_path : Path
        ``.bin`` converts to text; ``.py``/``.ritobin`` converts to binary.
    output_path : Path | None
        Destination. Defaults to the input path with the extension swapped
        to ``.py`` or ``.bin``.
    config : AppConfig
        Active configuration; selects the hash resolver for ``.bin`` input.
    codec : BinCodec | None
        Binary/text codec. Defaults to :class:`RitobinCodec`.
    resolver : HashResolver | None
        Overrides the resolver selected from ``config``.

    Returns
    -------
    Converted
        Source and destination paths.

    Raises
    ------
    UnsupportedExtensionError
        If the extension is not ``bin``, ``py`` or ``ritobin``.
    FileAccessError
        If reading the input or creating the output fails.
    BinParseError
        If the input cannot be parsed.
    """
    extension = _require_supported(input_path)
    codec = codec or RitobinCodec()

    if extension == BIN_EXTENSION:
        text = _bin_to_text(input_path, config, codec, resolver)
        destination = output_path or input_path.with_suffix(f".{DEFAULT_TEXT_EXTENSION}")
        _write_bytes(destination, text.encode("utf-8"))
    else:
        tree = codec.parse_text(_read_text(input_path))
        data = codec.serialize(tree)
        destination = output_path or input_path.with_suffix(f".{BIN_EXTENSION}")
        _write_bytes(destination, data)

    logger.info("Converted %s -> %s", input_path, destination)
    return Converted(source=input_path, destination=destination)


def walk_convertible(directory: Path, recursive: bool = False) -> Iterator[Path]:
    """Yield files under ``directory`` with a supported extension.

    Entries are visited in name order. Subdirectories are only entered when
    ``recursive`` is set; symlinked directories are never entered. Paths
    that cannot be represented as UTF-8 are skipped with a warning.
    """
    try:
        children = sorted(directory.iterdir())
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", directory, exc)
        return

    for child in children:
        try:
            str(child).encode("utf-8")
        except UnicodeEncodeError:
            logger.warning("Skipping non-UTF8 path: %r", child)
            continue
        if child.is_dir():
            if recursive and not child.is_symlink():
                yield from walk_convertible(child, recursive=True)
            continue
        if extension_of(child) in SUPPORTED_EXTENSIONS:
            yield child


def fold_outcomes(outcomes: Iterable[ConversionOutcome]) -> BatchResult:
    """Aggregate per-file outcomes into a :class:`BatchResult`."""
    converted: list[Converted] = []
    failed: list[Failed] = []
    for outcome in outcomes:
        if isinstance(outcome, Converted):
            converted.append(outcome)
        else:
            failed.append(outcome)
    return BatchResult(converted=tuple(converted), failed=tuple(failed))


def convert_directory(
    directory: Path,
    recursive: bool = False,
    *,
    config: AppConfig,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> BatchResult:
    """Use-case: convert every supported file in ``directory``.

    A failing file is logged and counted; the walk continues.

    Raises
    ------
    BatchConversionError
        After the walk, when at least one file failed.
    """
    codec = codec or RitobinCodec()
    resolver = resolver if resolver is not None else select_resolver(config)

    def outcomes() -> Iterator[ConversionOutcome]:
        for path in walk_convertible(directory, recursive):
            try:
                yield convert_file(path, config=config, codec=codec, resolver=resolver)
            except RitobinToolsError as exc:
                logger.error("Failed to convert %s: %s", path, exc)
                yield Failed(source=path, error=exc)

    result = fold_outcomes(outcomes())
    logger.info(
        "Conversion complete: %d files converted, %d errors",
        result.converted_count,
        result.error_count,
    )
    if not result.ok:
        raise BatchConversionError(result)
    return result


def convert(
    input_path: Path,
    output_path: Path | None = None,
    recursive: bool = False,
    *,
    config: AppConfig,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> Converted | BatchResult:
    """Use-case: convert a file, or every file in a directory.

    ``output_path`` only applies to single files; ``recursive`` only to
    directories.
    """
    if input_path.is_dir():
        return convert_directory(
            input_path, recursive, config=config, codec=codec, resolver=resolver
        )
    return convert_file(
        input_path, output_path, config=config, codec=codec, resolver=resolver
    )


def to_canonical_text(
    path: Path,
    config: AppConfig,
    *,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> str:
    """Return the ritobin text for ``path``.

    Binary files are parsed and rendered; text files are returned as read.
    """
    extension = _require_supported(path)
    if extension in TEXT_EXTENSIONS:
        return _read_text(path)
    return _bin_to_text(path, config, codec or RitobinCodec(), resolver)


def diff_files(
    path_a: Path,
    path_b: Path,
    *,
    config: AppConfig,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> DiffResult:
    """Use-case: diff two files after normalizing both to ritobin text.

    Both extensions are checked before either file is read.
    """
    extensions = (_require_supported(path_a), _require_supported(path_b))
    codec = codec or RitobinCodec()
    if resolver is None and BIN_EXTENSION in extensions:
        resolver = select_resolver(config)
    text_a = to_canonical_text(path_a, config, codec=codec, resolver=resolver)
    text_b = to_canonical_text(path_b, config, codec=codec, resolver=resolver)
    return compute_diff(text_a, text_b, context_radius)
