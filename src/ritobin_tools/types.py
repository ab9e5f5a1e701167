"""Shared type aliases and enums for conversion modules."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal, TypeAlias

Extension: TypeAlias = Literal["bin", "py", "ritobin"]
HashValue: TypeAlias = int
PathLike: TypeAlias = str | Path
ConfigScalar: TypeAlias = str | int | float | bool
ConfigTable: TypeAlias = dict[str, ConfigScalar]

BIN_EXTENSION = "bin"
TEXT_EXTENSIONS: tuple[str, ...] = ("py", "ritobin")
SUPPORTED_EXTENSIONS: tuple[str, ...] = (BIN_EXTENSION, *TEXT_EXTENSIONS)
DEFAULT_TEXT_EXTENSION = "py"
DEFAULT_CONTEXT_RADIUS = 3


class HashKind(Enum):
    """Mapping table a hash is looked up in."""

    ENTRY = "entry"
    FIELD = "field"
    HASH = "hash"
    TYPE = "type"


def extension_of(path: Path) -> str:
    """Return the file extension without its dot, case preserved."""
    return path.suffix[1:] if path.suffix else ""
