"""In-memory property-bin tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TypeAlias


class BinType(IntEnum):
    """Property kinds with their binary type ids."""

    NONE = 0
    BOOL = 1
    I8 = 2
    U8 = 3
    I16 = 4
    U16 = 5
    I32 = 6
    U32 = 7
    I64 = 8
    U64 = 9
    F32 = 10
    VEC2 = 11
    VEC3 = 12
    VEC4 = 13
    MTX44 = 14
    RGBA = 15
    STRING = 16
    HASH = 17
    FILE = 18
    LIST = 0x80
    LIST2 = 0x81
    POINTER = 0x82
    EMBED = 0x83
    LINK = 0x84
    OPTION = 0x85
    MAP = 0x86
    FLAG = 0x87

    @property
    def text_name(self) -> str:
        return self.name.lower()

    @classmethod
    def from_text_name(cls, name: str) -> BinType:
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"unknown type name '{name}'") from None

    @property
    def is_container(self) -> bool:
        return self in _NESTING_KINDS

    @property
    def is_primitive(self) -> bool:
        return self not in _COMPLEX_KINDS


_NESTING_KINDS = frozenset({BinType.LIST, BinType.LIST2, BinType.OPTION, BinType.MAP})
_COMPLEX_KINDS = _NESTING_KINDS | {BinType.POINTER, BinType.EMBED}


@dataclass(frozen=True)
class Scalar:
    """Primitive value: numbers, vectors, strings, hashes, links, flags."""

    kind: BinType
    value: bool | int | float | str | tuple[float, ...] | tuple[int, ...] | None


@dataclass(frozen=True)
class Struct:
    """Pointer or embedded struct. A pointer with class hash 0 is null."""

    kind: BinType
    class_hash: int
    fields: tuple[BinField, ...] = ()

    @property
    def is_null(self) -> bool:
        return self.kind is BinType.POINTER and self.class_hash == 0


@dataclass(frozen=True)
class Container:
    """Ordered (``list``) or unordered (``list2``) homogeneous sequence."""

    kind: BinType
    item_kind: BinType
    items: tuple[BinValue, ...] = ()


@dataclass(frozen=True)
class Option:
    item_kind: BinType
    item: BinValue | None = None

    kind = BinType.OPTION


@dataclass(frozen=True)
class Map:
    key_kind: BinType
    value_kind: BinType
    items: tuple[tuple[BinValue, BinValue], ...] = ()

    kind = BinType.MAP


BinValue: TypeAlias = Scalar | Struct | Container | Option | Map


@dataclass(frozen=True)
class BinField:
    name_hash: int
    value: BinValue


@dataclass(frozen=True)
class BinEntry:
    """Top-level object keyed by the hash of its path."""

    path_hash: int
    class_hash: int
    fields: tuple[BinField, ...] = ()


@dataclass(frozen=True)
class BinPatch:
    """Patch override targeting ``path`` inside the entry ``path_hash``."""

    path_hash: int
    path: str
    value: BinValue


@dataclass(frozen=True)
class BinTree:
    """Parsed contents of one property-bin file."""

    is_patch: bool = False
    version: int = 3
    linked: tuple[str, ...] = ()
    entries: tuple[BinEntry, ...] = ()
    patches: tuple[BinPatch, ...] = field(default_factory=tuple)
