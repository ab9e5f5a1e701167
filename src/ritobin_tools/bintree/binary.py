"""Binary PROP/PTCH reader and writer.

Layout (little endian)::

    ["PTCH" u64] "PROP" u32 version
    [u32 linked_count, (u16 len, utf8)*]            version >= 2
    u32 entry_count, u32 class_hash * entry_count
    (u32 size, u32 path_hash, u16 field_count, field*) * entry_count
    [u32 patch_count, (u32 path_hash, u32 size, u8 type, u16 len, utf8, value)*]
                                                     PTCH and version >= 3

Every size counts the bytes that follow it, so the writer reserves the size
slot, writes the body, then seeks back to fill it in.
"""

from __future__ import annotations

import io
import struct
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

from ritobin_tools.bintree.model import (
    BinEntry,
    BinField,
    BinPatch,
    BinTree,
    BinType,
    BinValue,
    Container,
    Map,
    Option,
    Scalar,
    Struct,
)

PROP_MAGIC = b"PROP"
PTCH_MAGIC = b"PTCH"
_PTCH_HEADER = 1
MAX_VERSION = 3

_SCALAR_FORMATS: dict[BinType, struct.Struct] = {
    BinType.BOOL: struct.Struct("<?"),
    BinType.I8: struct.Struct("<b"),
    BinType.U8: struct.Struct("<B"),
    BinType.I16: struct.Struct("<h"),
    BinType.U16: struct.Struct("<H"),
    BinType.I32: struct.Struct("<i"),
    BinType.U32: struct.Struct("<I"),
    BinType.I64: struct.Struct("<q"),
    BinType.U64: struct.Struct("<Q"),
    BinType.F32: struct.Struct("<f"),
    BinType.VEC2: struct.Struct("<2f"),
    BinType.VEC3: struct.Struct("<3f"),
    BinType.VEC4: struct.Struct("<4f"),
    BinType.MTX44: struct.Struct("<16f"),
    BinType.RGBA: struct.Struct("<4B"),
    BinType.HASH: struct.Struct("<I"),
    BinType.FILE: struct.Struct("<Q"),
    BinType.LINK: struct.Struct("<I"),
    BinType.FLAG: struct.Struct("<?"),
}
_TUPLE_KINDS = frozenset({BinType.VEC2, BinType.VEC3, BinType.VEC4, BinType.MTX44, BinType.RGBA})

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")

# Fewest bytes a value of each kind can occupy.
_MIN_WIDTHS: dict[BinType, int] = {
    **{kind: fmt.size for kind, fmt in _SCALAR_FORMATS.items()},
    BinType.NONE: 0,
    BinType.STRING: _U16.size,
    BinType.LIST: 9,
    BinType.LIST2: 9,
    BinType.POINTER: 4,
    BinType.EMBED: 10,
    BinType.OPTION: 2,
    BinType.MAP: 10,
}


class BinFormatError(ValueError):
    """Raised when bytes or text do not describe a valid bin tree."""


# -----------------------------
# Reading
# -----------------------------
class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    def take(self, count: int) -> bytes:
        end = self.pos + count
        if end > len(self._data):
            raise BinFormatError(
                f"unexpected end of data at offset {self.pos} (wanted {count} bytes)"
            )
        chunk = self._data[self.pos : end]
        self.pos = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.take(fmt.size))

    def u8(self) -> int:
        return self.unpack(_U8)[0]

    def u16(self) -> int:
        return self.unpack(_U16)[0]

    def u32(self) -> int:
        return self.unpack(_U32)[0]

    def string(self) -> str:
        raw = self.take(self.u16())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BinFormatError(f"invalid utf-8 string at offset {self.pos}: {exc}") from exc

    def kind(self) -> BinType:
        raw = self.u8()
        try:
            return BinType(raw)
        except ValueError:
            raise BinFormatError(f"unknown type id {raw:#04x} at offset {self.pos - 1}") from None

    def count(self, what: str, width: int, size: int) -> int:
        """Read a u32 item count and check it against the bytes left for items."""
        count = self.u32()
        if width == 0 and count:
            raise BinFormatError(
                f"{what} of zero-width items declares {count} items at offset {self.pos - 4}"
            )
        available = min(size - _U32.size, len(self._data) - self.pos)
        if count * width > available:
            raise BinFormatError(
                f"{what} declares {count} items at offset {self.pos - 4},"
                f" more than its {max(available, 0)} remaining bytes can hold"
            )
        return count

    @contextmanager
    def sized(self, what: str) -> Iterator[int]:
        size = self.u32()
        start = self.pos
        yield size
        if self.pos - start != size:
            raise BinFormatError(
                f"{what} size mismatch at offset {start}: declared {size}, read {self.pos - start}"
            )


def _read_value(reader: _Reader, kind: BinType) -> BinValue:
    if kind is BinType.NONE:
        return Scalar(kind, None)
    if kind is BinType.STRING:
        return Scalar(kind, reader.string())
    fmt = _SCALAR_FORMATS.get(kind)
    if fmt is not None:
        values = reader.unpack(fmt)
        return Scalar(kind, tuple(values) if kind in _TUPLE_KINDS else values[0])
    if kind in (BinType.LIST, BinType.LIST2):
        item_kind = reader.kind()
        with reader.sized(kind.text_name) as size:
            count = reader.count(kind.text_name, _MIN_WIDTHS[item_kind], size)
            items = tuple(_read_value(reader, item_kind) for _ in range(count))
        return Container(kind, item_kind, items)
    if kind in (BinType.POINTER, BinType.EMBED):
        class_hash = reader.u32()
        if kind is BinType.POINTER and class_hash == 0:
            return Struct(kind, 0)
        with reader.sized(kind.text_name):
            count = reader.u16()
            fields = tuple(_read_field(reader) for _ in range(count))
        return Struct(kind, class_hash, fields)
    if kind is BinType.OPTION:
        item_kind = reader.kind()
        count = reader.u8()
        if count > 1:
            raise BinFormatError(f"option holds {count} values at offset {reader.pos - 1}")
        return Option(item_kind, _read_value(reader, item_kind) if count else None)
    if kind is BinType.MAP:
        key_kind = reader.kind()
        value_kind = reader.kind()
        with reader.sized("map") as size:
            count = reader.count("map", _MIN_WIDTHS[key_kind] + _MIN_WIDTHS[value_kind], size)
            pairs = tuple(
                (_read_value(reader, key_kind), _read_value(reader, value_kind))
                for _ in range(count)
            )
        return Map(key_kind, value_kind, pairs)
    raise BinFormatError(f"unhandled type {kind.text_name}")


def _read_field(reader: _Reader) -> BinField:
    name_hash = reader.u32()
    kind = reader.kind()
    return BinField(name_hash, _read_value(reader, kind))


def read_tree(data: bytes) -> BinTree:
    """Parse a complete binary bin file.

    Parameters
    ----------
    data : bytes
        Raw file contents.

    Returns
    -------
    BinTree
        Parsed tree.

    Raises
    ------
    BinFormatError
        If the data is truncated, carries an unknown magic/type id, or a
        declared size disagrees with its contents.
    """
    reader = _Reader(data)
    magic = reader.take(4)
    is_patch = magic == PTCH_MAGIC
    if is_patch:
        reader.unpack(_U64)
        magic = reader.take(4)
    if magic != PROP_MAGIC:
        raise BinFormatError(f"bad magic {magic!r}, expected {PROP_MAGIC!r}")

    version = reader.u32()
    if not 1 <= version <= MAX_VERSION:
        raise BinFormatError(f"unsupported bin version {version}")

    linked: tuple[str, ...] = ()
    if version >= 2:
        linked = tuple(reader.string() for _ in range(reader.u32()))

    entry_count = reader.u32()
    class_hashes = [reader.u32() for _ in range(entry_count)]
    entries = []
    for class_hash in class_hashes:
        with reader.sized("entry"):
            path_hash = reader.u32()
            field_count = reader.u16()
            fields = tuple(_read_field(reader) for _ in range(field_count))
        entries.append(BinEntry(path_hash, class_hash, fields))

    patches = []
    if is_patch and version >= 3:
        for _ in range(reader.u32()):
            path_hash = reader.u32()
            with reader.sized("patch"):
                kind = reader.kind()
                path = reader.string()
                value = _read_value(reader, kind)
            patches.append(BinPatch(path_hash, path, value))

    return BinTree(
        is_patch=is_patch,
        version=version,
        linked=linked,
        entries=tuple(entries),
        patches=tuple(patches),
    )


# -----------------------------
# Writing
# -----------------------------
class _Writer:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def pack(self, fmt: struct.Struct, *values: object) -> None:
        try:
            self._stream.write(fmt.pack(*values))
        except struct.error as exc:
            raise BinFormatError(f"value {values!r} does not fit '{fmt.format}': {exc}") from exc

    def string(self, text: str) -> None:
        raw = text.encode("utf-8")
        if len(raw) > 0xFFFF:
            raise BinFormatError(f"string of {len(raw)} bytes exceeds the u16 length limit")
        self.pack(_U16, len(raw))
        self._stream.write(raw)

    @contextmanager
    def sized(self) -> Iterator[None]:
        slot = self._stream.tell()
        self._stream.write(b"\x00" * _U32.size)
        start = self._stream.tell()
        yield
        end = self._stream.tell()
        self._stream.seek(slot)
        self._stream.write(_U32.pack(end - start))
        self._stream.seek(end)


def _write_value(writer: _Writer, value: BinValue) -> None:
    kind = value.kind
    if isinstance(value, Scalar):
        if kind is BinType.NONE:
            return
        if kind is BinType.STRING:
            writer.string(str(value.value))
            return
        fmt = _SCALAR_FORMATS[kind]
        if kind in _TUPLE_KINDS:
            writer.pack(fmt, *value.value)  # type: ignore[misc]
        else:
            writer.pack(fmt, value.value)
    elif isinstance(value, Container):
        if value.items and _MIN_WIDTHS[value.item_kind] == 0:
            raise BinFormatError(
                f"{kind.text_name}[{value.item_kind.text_name}] cannot hold items"
            )
        writer.pack(_U8, value.item_kind)
        with writer.sized():
            writer.pack(_U32, len(value.items))
            for item in value.items:
                _write_value(writer, item)
    elif isinstance(value, Struct):
        writer.pack(_U32, value.class_hash)
        if value.is_null:
            return
        with writer.sized():
            writer.pack(_U16, len(value.fields))
            for item in value.fields:
                _write_field(writer, item)
    elif isinstance(value, Option):
        writer.pack(_U8, value.item_kind)
        writer.pack(_U8, 0 if value.item is None else 1)
        if value.item is not None:
            _write_value(writer, value.item)
    elif isinstance(value, Map):
        if value.items and _MIN_WIDTHS[value.key_kind] + _MIN_WIDTHS[value.value_kind] == 0:
            raise BinFormatError("map[none,none] cannot hold items")
        writer.pack(_U8, value.key_kind)
        writer.pack(_U8, value.value_kind)
        with writer.sized():
            writer.pack(_U32, len(value.items))
            for key, item in value.items:
                _write_value(writer, key)
                _write_value(writer, item)
    else:
        raise BinFormatError(f"cannot serialize {type(value).__name__}")


def _write_field(writer: _Writer, item: BinField) -> None:
    writer.pack(_U32, item.name_hash)
    writer.pack(_U8, item.value.kind)
    _write_value(writer, item.value)


def write_tree(tree: BinTree, stream: BinaryIO) -> None:
    """Serialize ``tree`` into a seekable binary stream.

    Raises
    ------
    ValueError
        If ``stream`` cannot seek; section sizes are back-patched.
    BinFormatError
        If a value does not fit its declared type.
    """
    if not stream.seekable():
        raise ValueError("bin serialization requires a seekable stream")
    writer = _Writer(stream)
    if tree.is_patch:
        stream.write(PTCH_MAGIC)
        writer.pack(_U64, _PTCH_HEADER)
    stream.write(PROP_MAGIC)
    writer.pack(_U32, tree.version)
    if tree.version >= 2:
        writer.pack(_U32, len(tree.linked))
        for path in tree.linked:
            writer.string(path)
    elif tree.linked:
        raise BinFormatError("bin version 1 cannot carry linked files")

    writer.pack(_U32, len(tree.entries))
    for entry in tree.entries:
        writer.pack(_U32, entry.class_hash)
    for entry in tree.entries:
        with writer.sized():
            writer.pack(_U32, entry.path_hash)
            writer.pack(_U16, len(entry.fields))
            for item in entry.fields:
                _write_field(writer, item)

    if tree.is_patch and tree.version >= 3:
        writer.pack(_U32, len(tree.patches))
        for patch in tree.patches:
            writer.pack(_U32, patch.path_hash)
            with writer.sized():
                writer.pack(_U8, patch.value.kind)
                writer.string(patch.path)
                _write_value(writer, patch.value)
    elif tree.patches:
        raise BinFormatError("patches require a PTCH tree of version 3")


def dump_bytes(tree: BinTree) -> bytes:
    """Serialize ``tree`` through an in-memory buffer and return the bytes."""
    buffer = io.BytesIO()
    write_tree(tree, buffer)
    return buffer.getvalue()
