"""Application-layer use-cases and result objects."""

from __future__ import annotations

from pathlib import Path

from ritobin_tools.application.ports import BinCodec, HashResolver
from ritobin_tools.application.results import (
    BatchResult,
    Converted,
    DiffLine,
    DiffResult,
    DiffTag,
    Failed,
    Hunk,
)
from ritobin_tools.schemas import AppConfig
from ritobin_tools.types import DEFAULT_CONTEXT_RADIUS


def convert(
    input_path: Path,
    output_path: Path | None = None,
    recursive: bool = False,
    *,
    config: AppConfig,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> Converted | BatchResult:
    """Convert a file or directory via lazy use-case import."""
    from ritobin_tools.application.use_cases import convert as _impl

    return _impl(
        input_path,
        output_path,
        recursive,
        config=config,
        codec=codec,
        resolver=resolver,
    )


def diff_files(
    path_a: Path,
    path_b: Path,
    *,
    config: AppConfig,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    codec: BinCodec | None = None,
    resolver: HashResolver | None = None,
) -> DiffResult:
    """Diff two files via lazy use-case import."""
    from ritobin_tools.application.use_cases import diff_files as _impl

    return _impl(
        path_a,
        path_b,
        config=config,
        context_radius=context_radius,
        codec=codec,
        resolver=resolver,
    )


__all__ = [
    "BatchResult",
    "Converted",
    "DiffLine",
    "DiffResult",
    "DiffTag",
    "Failed",
    "Hunk",
    "convert",
    "diff_files",
]
