"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeAlias


@dataclass(frozen=True)
class Converted:
    """A file that was converted and written."""

    source: Path
    destination: Path


@dataclass(frozen=True)
class Failed:
    """A file whose conversion raised."""

    source: Path
    error: Exception


ConversionOutcome: TypeAlias = Converted | Failed


@dataclass(frozen=True)
class BatchResult:
    """Folded outcome of a directory conversion."""

    converted: tuple[Converted, ...] = ()
    failed: tuple[Failed, ...] = ()

    @property
    def converted_count(self) -> int:
        return len(self.converted)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return self.error_count == 0


class DiffTag(Enum):
    EQUAL = " "
    INSERT = "+"
    DELETE = "-"


@dataclass(frozen=True)
class DiffLine:
    """One line of a hunk; ``text`` excludes its newline."""

    tag: DiffTag
    text: str
    missing_newline: bool = False


@dataclass(frozen=True)
class Hunk:
    header: str
    lines: tuple[DiffLine, ...] = ()


@dataclass(frozen=True)
class DiffResult:
    """Line-level comparison of two texts."""

    insertions: int = 0
    deletions: int = 0
    hunks: tuple[Hunk, ...] = field(default_factory=tuple)

    @property
    def identical(self) -> bool:
        return self.insertions == 0 and self.deletions == 0
