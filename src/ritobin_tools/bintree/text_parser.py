"""Ritobin text parsing."""

from __future__ import annotations

import re
import struct
from collections.abc import Callable
from dataclasses import dataclass

from ritobin_tools.bintree.binary import BinFormatError
from ritobin_tools.bintree.hashing import fnv1a32
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

_TOKEN = re.compile(
    r"""
    (?P<skip>[ \t\r\n,]+|\#[^\n]*)
  | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
  | (?P<punct>[{}\[\]=:])
  | (?P<word>[A-Za-z0-9_.+\-]+)
    """,
    re.VERBOSE,
)
_INT_LITERAL = re.compile(r"(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9A-Fa-f]+)|(?P<dec>[0-9]+))")
_SIMPLE_ESCAPES ={"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"', "'": "'", "0": "\0"}
_INT_RANGES: dict[BinType, tuple[int, int]] = {
    BinType.I8: (-(2**7), 2**7 - 1),
    BinType.U8: (0, 2**8 - 1),
    BinType.I16: (-(2**15), 2**15 - 1),
    BinType.U16: (0, 2**16 - 1),
    BinType.I32: (-(2**31), 2**31 - 1),
    BinType.U32: (0, 2**32 - 1),
    BinType.I64: (-(2**63), 2**63 - 1),
    BinType.U64: (0, 2**64 - 1),
}
_FLOAT_COUNTS = {BinType.VEC2: 2, BinType.VEC3: 3, BinType.VEC4: 4, BinType.MTX44: 16}
_F32 = struct.Struct("<f")


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            line = text.count("\n", 0, pos) + 1
            raise BinFormatError(f"line {line}: unexpected character {text[pos]!r}")
        kind = match.lastgroup or "skip"
        if kind != "skip":
            tokens.append(_Token(kind, match.group(), pos))
        pos = match.end()
    return tokens


def _unescape(literal: str) -> str:
    body = literal[1:-1]
    out: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        code = body[index + 1]
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
            index += 2
        elif code in "xu":
            width = 2 if code == "x" else 4
            digits = body[index + 2 : index + 2 + width]
            if len(digits) != width:
                raise ValueError(f"truncated \\{code} escape")
            code_point = int(digits, 16)
            if 0xD800 <= code_point <= 0xDFFF:
                raise ValueError(f"surrogate code point \\{code}{digits} is not a character")
            out.append(chr(code_point))
            index += 2 + width
        else:
            raise ValueError(f"unknown escape \\{code}")
    return "".join(out)


def _parse_int(word: str) -> int:
    match = _INT_LITERAL.fullmatch(word)
    if match is None:
        raise ValueError(f"bad integer literal {word!r}")
    sign = -1 if match["sign"] == "-" else 1
    if match["hex"] is not None:
        return sign * int(match["hex"], 16)
    return sign * int(match["dec"], 10)


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._index = 0

    # -- token helpers -------------------------------------------------
    def _error(self, message: str, token: _Token | None = None) -> BinFormatError:
        if token is None:
            token = self._tokens[self._index] if self._index < len(self._tokens) else None
        if token is None:
            return BinFormatError(f"end of input: {message}")
        line = self._text.count("\n", 0, token.pos) + 1
        return BinFormatError(f"line {line}: {message} (near {token.text!r})")

    def _peek(self) -> _Token | None:
        return self._tokens[self._index] if self._index < len(self._tokens) else None

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of input")
        self._index += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._next()
        if token.text != text:
            raise self._error(f"expected {text!r}", token)

    def _at(self, text: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "punct" and token.text == text

    def _word(self) -> _Token:
        token = self._next()
        if token.kind != "word":
            raise self._error("expected a word", token)
        return token

    def _string(self) -> str:
        token = self._next()
        if token.kind != "string":
            raise self._error("expected a quoted string", token)
        try:
            return _unescape(token.text)
        except (ValueError, IndexError) as exc:
            raise self._error(f"bad string literal: {exc}", token) from exc

    # -- grammar -------------------------------------------------------
    def _hash(self) -> int:
        """Hash literal: quoted name, bare name, or ``0x`` hex."""
        token = self._next()
        if token.kind == "string":
            self._index -= 1
            return fnv1a32(self._string())
        if token.kind != "word":
            raise self._error("expected a hash", token)
        if token.text[:2].lower() == "0x":
            try:
                value = int(token.text[2:], 16)
            except ValueError:
                raise self._error("bad hex literal", token) from None
            if value > 0xFFFFFFFF:
                raise self._error("hash does not fit in 32 bits", token)
            return value
        return fnv1a32(token.text)

    def _type(self) -> tuple[BinType, tuple[BinType, ...]]:
        token = self._word()
        try:
            kind = BinType.from_text_name(token.text)
        except ValueError as exc:
            raise self._error(str(exc), token) from None
        args: list[BinType] = []
        if kind in (BinType.LIST, BinType.LIST2, BinType.OPTION, BinType.MAP):
            self._expect("[")
            while not self._at("]"):
                arg_token = self._word()
                try:
                    args.append(BinType.from_text_name(arg_token.text))
                except ValueError as exc:
                    raise self._error(str(exc), arg_token) from None
            self._expect("]")
            wanted = 2 if kind is BinType.MAP else 1
            if len(args) != wanted or any(arg.is_container for arg in args):
                raise self._error(f"{kind.text_name} takes {wanted} non-container type(s)", token)
        return kind, tuple(args)

    def _fields(self) -> tuple[BinField, ...]:
        self._expect("{")
        fields: list[BinField] = []
        while not self._at("}"):
            name_hash = self._hash()
            self._expect(":")
            kind, args = self._type()
            self._expect("=")
            fields.append(BinField(name_hash, self._value(kind, args)))
        self._expect("}")
        return tuple(fields)

    def _struct(self, kind: BinType) -> Struct:
        token = self._peek()
        if kind is BinType.POINTER and token is not None and token.text == "null":
            self._index += 1
            return Struct(kind, 0)
        class_hash = self._hash()
        return Struct(kind, class_hash, self._fields())

    def _numbers(
        self, count: int, convert: Callable[[str], float | int]
    ) -> tuple[float | int, ...]:
        self._expect("{")
        values: list[float | int] = []
        while not self._at("}"):
            token = self._word()
            try:
                values.append(convert(token.text))
            except ValueError:
                raise self._error("bad number", token) from None
        self._expect("}")
        if len(values) != count:
            raise self._error(f"expected {count} numbers, got {len(values)}")
        return tuple(values)

    def _f32(self, word: str) -> float:
        """Parse a float and round it to single precision."""
        try:
            return _F32.unpack(_F32.pack(float(word)))[0]
        except (OverflowError, struct.error):
            raise ValueError(word) from None

    def _value(self, kind: BinType, args: tuple[BinType, ...] = ()) -> BinValue:
        if kind in (BinType.LIST, BinType.LIST2):
            self._expect("{")
            items = []
            while not self._at("}"):
                items.append(self._value(args[0]))
            self._expect("}")
            return Container(kind, args[0], tuple(items))
        if kind is BinType.OPTION:
            self._expect("{")
            item = None if self._at("}") else self._value(args[0])
            self._expect("}")
            return Option(args[0], item)
        if kind is BinType.MAP:
            self._expect("{")
            pairs = []
            while not self._at("}"):
                key = self._value(args[0])
                self._expect("=")
                pairs.append((key, self._value(args[1])))
            self._expect("}")
            return Map(args[0], args[1], tuple(pairs))
        if kind in (BinType.POINTER, BinType.EMBED):
            return self._struct(kind)
        return self._scalar(kind)

    def _scalar(self, kind: BinType) -> Scalar:
        if kind in _FLOAT_COUNTS:
            return Scalar(kind, self._numbers(_FLOAT_COUNTS[kind], self._f32))
        if kind is BinType.RGBA:
            values = self._numbers(4, _parse_int)
            if any(not 0 <= value <= 255 for value in values):
                raise self._error("rgba components must be within 0..255")
            return Scalar(kind, values)
        if kind is BinType.STRING:
            return Scalar(kind, self._string())
        if kind in (BinType.HASH, BinType.LINK):
            return Scalar(kind, self._hash())

        token = self._word()
        if kind is BinType.NONE:
            if token.text != "null":
                raise self._error("expected null", token)
            return Scalar(kind, None)
        if kind in (BinType.BOOL, BinType.FLAG):
            if token.text not in ("true", "false"):
                raise self._error("expected true or false", token)
            return Scalar(kind, token.text == "true")
        if kind is BinType.F32:
            try:
                return Scalar(kind, self._f32(token.text))
            except ValueError:
                raise self._error("bad f32 literal", token) from None
        if kind is BinType.FILE:
            if token.text[:2].lower() != "0x":
                raise self._error("file hashes must be written as 0x hex", token)
            bounds = _INT_RANGES[BinType.U64]
        else:
            bounds = _INT_RANGES[kind]
        try:
            value = _parse_int(token.text)
        except ValueError:
            raise self._error(f"bad {kind.text_name} literal", token) from None
        if not bounds[0] <= value <= bounds[1]:
            raise self._error(f"{value} is out of range for {kind.text_name}", token)
        return Scalar(kind, value)

    def _patch(self) -> BinPatch:
        path_hash = self._hash()
        self._expect("=")
        token = self._word()
        if token.text != "patch":
            raise self._error("expected a patch struct", token)
        self._expect("{")
        path: str | None = None
        value: BinValue | None = None
        while not self._at("}"):
            name = self._word()
            self._expect(":")
            kind, args = self._type()
            self._expect("=")
            if name.text == "path" and kind is BinType.STRING:
                path = self._string()
            elif name.text == "value":
                value = self._value(kind, args)
            else:
                raise self._error("unexpected patch field", name)
        self._expect("}")
        if path is None or value is None:
            raise self._error("patch needs both path and value")
        return BinPatch(path_hash, path, value)

    def parse(self) -> BinTree:
        is_patch = False
        version = 3
        linked: tuple[str, ...] = ()
        entries: list[BinEntry] = []
        patches: list[BinPatch] = []
        while self._peek() is not None:
            key = self._word()
            self._expect(":")
            kind, args = self._type()
            self._expect("=")
            if key.text == "type" and kind is BinType.STRING:
                magic = self._string()
                if magic not in ("PROP", "PTCH"):
                    raise self._error(f"unknown file type {magic!r}", key)
                is_patch = magic == "PTCH"
            elif key.text == "version" and kind is BinType.U32:
                version = int(self._scalar(kind).value)  # type: ignore[arg-type]
                if not 1 <= version <= 3:
                    raise self._error(f"unsupported bin version {version}", key)
            elif key.text == "linked" and kind is BinType.LIST and args == (BinType.STRING,):
                container = self._value(kind, args)
                linked = tuple(str(item.value) for item in container.items)  # type: ignore[union-attr]
            elif key.text in ("entries", "patches") and args == (BinType.HASH, BinType.EMBED):
                self._expect("{")
                while not self._at("}"):
                    if key.text == "patches":
                        patches.append(self._patch())
                        continue
                    path_hash = self._hash()
                    self._expect("=")
                    class_hash = self._hash()
                    entries.append(BinEntry(path_hash, class_hash, self._fields()))
                self._expect("}")
            else:
                raise self._error(f"unexpected section '{key.text}'", key)
        return BinTree(
            is_patch=is_patch,
            version=version,
            linked=linked,
            entries=tuple(entries),
            patches=tuple(patches),
        )


def parse_text(text: str) -> BinTree:
    """Parse ritobin text into a :class:`BinTree`.

    Raises
    ------
    BinFormatError
        With the offending line number when the text is malformed.
    """
    return _Parser(text).parse()
