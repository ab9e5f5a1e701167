"""Hash resolvers used when rendering bin trees as text."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from ritobin_tools.application.ports import HashResolver
from ritobin_tools.bintree import hex_literal
from ritobin_tools.types import HashKind, HashValue

if TYPE_CHECKING:
    from ritobin_tools.schemas import AppConfig

logger = logging.getLogger(__name__)

HASHTABLE_FILES: Mapping[HashKind, str] = {
    HashKind.ENTRY: "hashes.binentries.txt",
    HashKind.FIELD: "hashes.binfields.txt",
    HashKind.HASH: "hashes.binhashes.txt",
    HashKind.TYPE: "hashes.bintypes.txt",
}


def parse_hashtable(lines: Iterable[str]) -> dict[int, str]:
    """Parse ``<hex hash> <name>`` lines, skipping anything malformed."""
    table: dict[int, str] = {}
    for line in lines:
        raw_hash, sep, name = line.strip().partition(" ")
        if not sep or not name:
            continue
        try:
            table[int(raw_hash, 16)] = name
        except ValueError:
            continue
    return table


class DirectoryHashResolver:
    """Resolve hashes from the CommunityDragon hashtable files in a directory.

    Files are read once, at construction. A missing directory or file leaves
    the matching table empty so rendering falls back to hex literals.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self._tables: dict[HashKind, dict[int, str]] = {}
        for kind, filename in HASHTABLE_FILES.items():
            self._tables[kind] = self._load(directory / filename)

    @staticmethod
    def _load(path: Path) -> dict[int, str]:
        try:
            with path.open(encoding="utf-8", errors="replace") as handle:
                table = parse_hashtable(handle)
        except OSError as exc:
            logger.debug("Skipping hashtable %s: %s", path, exc)
            return {}
        logger.debug("Loaded %d hashes from %s", len(table), path)
        return table

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def resolve(self, hash_value: HashValue, kind: HashKind = HashKind.HASH) -> str | None:
        return self._tables[kind].get(hash_value)


class HexHashResolver:
    """Resolver that names every hash by its hex literal."""

    def resolve(self, hash_value: HashValue, kind: HashKind = HashKind.HASH) -> str | None:
        width = 16 if hash_value > 0xFFFFFFFF else 8
        return hex_literal(hash_value, width)


def select_resolver(config: AppConfig) -> HashResolver:
    """Pick the directory resolver when a hashtable dir is configured."""
    if config.hashtable_dir is not None:
        return DirectoryHashResolver(Path(config.hashtable_dir))
    return HexHashResolver()
