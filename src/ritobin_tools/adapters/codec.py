"""Codec adapter backed by :mod:`ritobin_tools.bintree`."""

from __future__ import annotations

from ritobin_tools import bintree
from ritobin_tools.application.ports import HashResolver
from ritobin_tools.errors import BinParseError

# Lone surrogates fail to encode and runaway nesting exhausts the stack;
# both are input faults of the file being converted.
_FORMAT_FAULTS = (bintree.BinFormatError, UnicodeError, RecursionError)


class RitobinCodec:
    """Default :class:`~ritobin_tools.application.ports.BinCodec` implementation."""

    def parse(self, data: bytes) -> bintree.BinTree:
        try:
            return bintree.read_tree(data)
        except _FORMAT_FAULTS as exc:
            raise BinParseError(f"Failed to parse bin data: {exc}") from exc

    def serialize(self, tree: bintree.BinTree) -> bytes:
        try:
            return bintree.dump_bytes(tree)
        except _FORMAT_FAULTS as exc:
            raise BinParseError(f"Failed to serialize bin tree: {exc}") from exc

    def render_text(self, tree: bintree.BinTree, resolver: HashResolver) -> str:
        """Render ``tree``; names from ``resolver`` are verified against the hash."""
        try:
            return bintree.render_text(tree, resolver.resolve)
        except (ValueError, RecursionError) as exc:
            raise BinParseError(f"Failed to render bin tree: {exc}") from exc

    def parse_text(self, text: str) -> bintree.BinTree:
        try:
            return bintree.parse_text(text)
        except _FORMAT_FAULTS as exc:
            raise BinParseError(f"Failed to parse ritobin text: {exc}") from exc
