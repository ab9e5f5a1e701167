"""Ritobin text rendering."""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Callable
from typing import TypeAlias

from ritobin_tools.bintree.hashing import fnv1a32, hex_literal
from ritobin_tools.bintree.model import (
    BinField,
    BinTree,
    BinType,
    BinValue,
    Container,
    Map,
    Option,
    Scalar,
    Struct,
)
from ritobin_tools.types import HashKind

NameLookup: TypeAlias = Callable[[int, HashKind], str | None]

INDENT = "    "
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_RESERVED_WORDS = frozenset({"null", "true", "false"})
_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_F32 = struct.Struct("<f")


def quote(text: str) -> str:
    """Quote a string literal, escaping control characters."""
    out = ['"']
    for char in text:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def format_f32(value: float) -> str:
    """Shortest decimal text that reads back to the same 32-bit float."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    packed = _F32.pack(value)
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        try:
            if _F32.pack(float(text)) == packed:
                return text
        except OverflowError:
            continue
    return repr(value)


def format_type(kind: BinType, *args: BinType) -> str:
    if not args:
        return kind.text_name
    return f"{kind.text_name}[{','.join(arg.text_name for arg in args)}]"


def value_type(value: BinValue) -> str:
    if isinstance(value, Container):
        return format_type(value.kind, value.item_kind)
    if isinstance(value, Option):
        return format_type(value.kind, value.item_kind)
    if isinstance(value, Map):
        return format_type(value.kind, value.key_kind, value.value_kind)
    return value.kind.text_name


class TextWriter:
    """Render a :class:`BinTree` as ritobin text.

    Parameters
    ----------
    lookup : NameLookup
        Called with ``(hash, kind)``; a returned name is only used when it
        hashes back to the same value, otherwise the hex literal is printed.
    """

    def __init__(self, lookup: NameLookup) -> None:
        self._lookup = lookup
        self._lines: list[str] = []

    def _name(self, value: int, kind: HashKind) -> str | None:
        name = self._lookup(value, kind)
        if name is None or fnv1a32(name) != value:
            return None
        return name

    def _quoted_hash(self, value: int, kind: HashKind) -> str:
        name = self._name(value, kind)
        return quote(name) if name is not None else hex_literal(value)

    def _bare_hash(self, value: int, kind: HashKind) -> str:
        name = self._name(value, kind)
        if name is None or not _IDENTIFIER.fullmatch(name) or name in _RESERVED_WORDS:
            return hex_literal(value)
        return name

    def render(self, tree: BinTree) -> str:
        self._lines = ["#PROP_text"]
        self._lines.append(f'type: string = {quote("PTCH" if tree.is_patch else "PROP")}')
        self._lines.append(f"version: u32 = {tree.version}")
        self._open("linked: list[string] = ", not tree.linked)
        for path in tree.linked:
            self._lines.append(INDENT + quote(path))
        self._close(not tree.linked, 0)

        self._open("entries: map[hash,embed] = ", not tree.entries)
        for entry in tree.entries:
            key = self._quoted_hash(entry.path_hash, HashKind.ENTRY)
            self._struct(f"{INDENT}{key} = ", entry.class_hash, entry.fields, 1)
        self._close(not tree.entries, 0)

        if tree.is_patch:
            self._open("patches: map[hash,embed] = ", not tree.patches)
            for patch in tree.patches:
                key = self._quoted_hash(patch.path_hash, HashKind.ENTRY)
                self._lines.append(f"{INDENT}{key} = patch {{")
                self._lines.append(f"{INDENT * 2}path: string = {quote(patch.path)}")
                self._value(
                    f"{INDENT * 2}value: {value_type(patch.value)} = ", patch.value, 2
                )
                self._lines.append(f"{INDENT}}}")
            self._close(not tree.patches, 0)
        return "\n".join(self._lines) + "\n"

    def _open(self, prefix: str, empty: bool) -> None:
        self._lines.append(prefix + ("{}" if empty else "{"))

    def _close(self, empty: bool, depth: int) -> None:
        if not empty:
            self._lines.append(INDENT * depth + "}")

    def _struct(
        self, prefix: str, class_hash: int, fields: tuple[BinField, ...], depth: int
    ) -> None:
        name = self._bare_hash(class_hash, HashKind.TYPE)
        self._open(f"{prefix}{name} ", not fields)
        for item in fields:
            self._field(item, depth + 1)
        self._close(not fields, depth)

    def _field(self, item: BinField, depth: int) -> None:
        name = self._bare_hash(item.name_hash, HashKind.FIELD)
        self._value(
            f"{INDENT * depth}{name}: {value_type(item.value)} = ", item.value, depth
        )

    def _value(self, prefix: str, value: BinValue, depth: int) -> None:
        inner = INDENT * (depth + 1)
        if isinstance(value, Struct):
            if value.is_null:
                self._lines.append(prefix + "null")
            else:
                self._struct(prefix, value.class_hash, value.fields, depth)
        elif isinstance(value, Container):
            self._open(prefix, not value.items)
            for item in value.items:
                self._value(inner, item, depth + 1)
            self._close(not value.items, depth)
        elif isinstance(value, Option):
            self._open(prefix, value.item is None)
            if value.item is not None:
                self._value(inner, value.item, depth + 1)
            self._close(value.item is None, depth)
        elif isinstance(value, Map):
            self._open(prefix, not value.items)
            for key, item in value.items:
                self._value(f"{inner}{self._scalar(key)} = ", item, depth + 1)
            self._close(not value.items, depth)
        elif value.kind is BinType.MTX44:
            rows = value.value
            self._lines.append(prefix + "{")
            for row in range(4):
                cells = rows[row * 4 : row * 4 + 4]  # type: ignore[index]
                self._lines.append(inner + ", ".join(format_f32(cell) for cell in cells))
            self._lines.append(INDENT * depth + "}")
        else:
            self._lines.append(prefix + self._scalar(value))

    def _scalar(self, value: BinValue) -> str:
        if not isinstance(value, Scalar):
            raise ValueError(f"{value_type(value)} cannot be used as a map key")
        kind, raw = value.kind, value.value
        if kind is BinType.NONE:
            return "null"
        if kind in (BinType.BOOL, BinType.FLAG):
            return "true" if raw else "false"
        if kind is BinType.F32:
            return format_f32(raw)  # type: ignore[arg-type]
        if kind in (BinType.VEC2, BinType.VEC3, BinType.VEC4, BinType.MTX44):
            return "{ " + ", ".join(format_f32(cell) for cell in raw) + " }"  # type: ignore[union-attr]
        if kind is BinType.RGBA:
            return "{ " + ", ".join(str(cell) for cell in raw) + " }"  # type: ignore[union-attr]
        if kind is BinType.STRING:
            return quote(str(raw))
        if kind is BinType.HASH:
            return self._quoted_hash(int(raw), HashKind.HASH)  # type: ignore[arg-type]
        if kind is BinType.LINK:
            return self._quoted_hash(int(raw), HashKind.ENTRY)  # type: ignore[arg-type]
        if kind is BinType.FILE:
            return hex_literal(int(raw), 16)  # type: ignore[arg-type]
        return str(int(raw))  # type: ignore[arg-type]


def render_text(tree: BinTree, lookup: NameLookup) -> str:
    """Render ``tree`` to ritobin text, naming hashes through ``lookup``."""
    return TextWriter(lookup).render(tree)
