"""Name hashing used by property-bin files."""

from __future__ import annotations

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def fnv1a32(name: str) -> int:
    """Hash a name the way bin entries, fields, classes and hashes are keyed.

    The name is lowercased before hashing, so lookups are case-insensitive.
    """
    value = _FNV_OFFSET
    for byte in name.lower().encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & 0xFFFFFFFF
    return value


def hex_literal(value: int, width: int = 8) -> str:
    """Render a hash as a ``0x``-prefixed, zero-padded lowercase literal."""
    return f"0x{value:0{width}x}"
