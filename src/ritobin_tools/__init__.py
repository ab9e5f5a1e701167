"""Top-level API for League property-bin conversion and diffing."""

from __future__ import annotations

from pathlib import Path

from ritobin_tools.application.results import BatchResult, Converted, DiffResult

__version__ = "0.1.0"


def convert_path(
    input_path: Path,
    output_path: Path | None = None,
    recursive: bool = False,
    *,
    config_path: Path | None = None,
    hashtable_dir: Path | str | None = None,
) -> Converted | BatchResult:
    """Convert a file or directory between binary and ritobin text.

    Parameters
    ----------
    input_path : Path
        ``.bin``, ``.py`` or ``.ritobin`` file, or a directory of them.
    output_path : Path | None, default=None
        Destination for single-file input; defaults to the input path with
        the extension swapped.
    recursive : bool, default=False
        Descend into subdirectories when ``input_path`` is a directory.
    config_path : Path | None, default=None
        Explicit config file.
    hashtable_dir : Path | str | None, default=None
        Hashtable directory overriding the configured one.
    """
    from .api import convert_path as _impl

    return _impl(
        input_path,
        output_path,
        recursive,
        config_path=config_path,
        hashtable_dir=hashtable_dir,
    )


def diff_paths(
    path_a: Path,
    path_b: Path,
    *,
    context_radius: int = 3,
    config_path: Path | None = None,
    hashtable_dir: Path | str | None = None,
) -> DiffResult:
    """Diff two files of either encoding as ritobin text."""
    from .api import diff_paths as _impl

    return _impl(
        path_a,
        path_b,
        context_radius=context_radius,
        config_path=config_path,
        hashtable_dir=hashtable_dir,
    )


__all__ = ["__version__", "convert_path", "diff_paths"]
