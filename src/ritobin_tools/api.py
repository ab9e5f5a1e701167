"""Public file-based API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path

from ritobin_tools.application.results import BatchResult, Converted, DiffResult
from ritobin_tools.application.use_cases import convert, diff_files
from ritobin_tools.infrastructure.config_store import ConfigLocator, ConfigStore
from ritobin_tools.schemas import AppConfig
from ritobin_tools.types import DEFAULT_CONTEXT_RADIUS


def load_config(
    config_path: Path | None = None, hashtable_dir: Path | str | None = None
) -> AppConfig:
    """Load (or create) the config, applying a one-off hashtable dir override.

    Parameters
    ----------
    config_path : Path | None
        Explicit config file. Defaults to ``config.toml`` beside the
        running interpreter.
    hashtable_dir : Path | str | None
        Used instead of the configured directory for this call only.
    """
    locator = ConfigLocator(config_path) if config_path is not None else ConfigLocator.default()
    config, _ = ConfigStore(locator).load_or_create()
    if hashtable_dir is not None:
        config = config.model_copy(update={"hashtable_dir": str(hashtable_dir)})
    return config


def convert_path(
    input_path: Path,
    output_path: Path | None = None,
    recursive: bool = False,
    *,
    config_path: Path | None = None,
    hashtable_dir: Path | str | None = None,
) -> Converted | BatchResult:
    """Convert a ``.bin``/``.py``/``.ritobin`` file, or a directory of them."""
    config = load_config(config_path, hashtable_dir)
    return convert(Path(input_path), output_path, recursive, config=config)


def diff_paths(
    path_a: Path,
    path_b: Path,
    *,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    config_path: Path | None = None,
    hashtable_dir: Path | str | None = None,
) -> DiffResult:
    """Diff two files of either encoding as ritobin text."""
    config = load_config(config_path, hashtable_dir)
    return diff_files(
        Path(path_a), Path(path_b), config=config, context_radius=context_radius
    )


__all__ = ["convert_path", "diff_paths", "load_config"]
