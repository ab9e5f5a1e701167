"""Property-bin tree model with its binary and text codecs."""

from __future__ import annotations

from ritobin_tools.bintree.binary import BinFormatError, dump_bytes, read_tree, write_tree
from ritobin_tools.bintree.hashing import fnv1a32, hex_literal
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
from ritobin_tools.bintree.text_parser import parse_text
from ritobin_tools.bintree.text_writer import NameLookup, render_text

__all__ = [
    "BinEntry",
    "BinField",
    "BinFormatError",
    "BinPatch",
    "BinTree",
    "BinType",
    "BinValue",
    "Container",
    "Map",
    "NameLookup",
    "Option",
    "Scalar",
    "Struct",
    "dump_bytes",
    "fnv1a32",
    "hex_literal",
    "parse_text",
    "read_tree",
    "render_text",
    "write_tree",
]
