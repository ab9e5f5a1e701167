"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from typing import Protocol

from ritobin_tools.bintree import BinTree
from ritobin_tools.types import HashKind, HashValue


class HashResolver(Protocol):
    """Map a numeric hash to a human-readable name."""

    def resolve(self, hash_value: HashValue, kind: HashKind = HashKind.HASH) -> str | None:
        """Return the name for ``hash_value``, or ``None`` when unknown."""


class BinCodec(Protocol):
    """Translate between bytes, text and the in-memory bin tree."""

    def parse(self, data: bytes) -> BinTree:
        """Parse binary bin data."""

    def serialize(self, tree: BinTree) -> bytes:
        """Serialize tree into binary bin data."""

    def render_text(self, tree: BinTree, resolver: HashResolver) -> str:
        """Render tree as ritobin text, naming hashes through ``resolver``."""

    def parse_text(self, text: str) -> BinTree:
        """Parse ritobin text."""
