"""Shared pytest configuration, marker assignment and bin fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from ritobin_tools.bintree import (
    BinEntry,
    BinField,
    BinTree,
    BinType,
    Container,
    Map,
    Option,
    Scalar,
    Struct,
    fnv1a32,
)
from ritobin_tools.infrastructure import config_store

SAMPLE_NAMES = (
    "Characters/Annie/CharacterRecords/Root",
    "CharacterRecord",
    "mCharacterName",
    "baseHP",
    "flags",
    "spellNames",
    "tint",
    "offset",
    "spellLevels",
    "passive",
    "SpellData",
    "mName",
    "unused",
    "maybeRange",
    "q",
)


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def _field(name: str, value: object) -> BinField:
    return BinField(fnv1a32(name), value)  # type: ignore[arg-type]


@pytest.fixture
def sample_tree() -> BinTree:
    """Small PROP tree touching every value family."""
    return BinTree(
        linked=("DATA/Characters/Annie/Shared.bin",),
        entries=(
            BinEntry(
                fnv1a32("Characters/Annie/CharacterRecords/Root"),
                fnv1a32("CharacterRecord"),
                (
                    _field("mCharacterName", Scalar(BinType.STRING, "Annie")),
                    _field("baseHP", Scalar(BinType.F32, 524.0)),
                    _field("flags", Scalar(BinType.U32, 7)),
                    _field(
                        "spellNames",
                        Container(
                            BinType.LIST,
                            BinType.STRING,
                            (Scalar(BinType.STRING, "Q"), Scalar(BinType.STRING, "W")),
                        ),
                    ),
                    _field("tint", Scalar(BinType.RGBA, (255, 128, 0, 255))),
                    _field("offset", Scalar(BinType.VEC3, (1.0, 0.5, -2.0))),
                    _field(
                        "spellLevels",
                        Map(
                            BinType.HASH,
                            BinType.U8,
                            ((Scalar(BinType.HASH, fnv1a32("q")), Scalar(BinType.U8, 5)),),
                        ),
                    ),
                    _field(
                        "passive",
                        Struct(
                            BinType.POINTER,
                            fnv1a32("SpellData"),
                            (_field("mName", Scalar(BinType.STRING, "Pyromania")),),
                        ),
                    ),
                    _field("unused", Struct(BinType.POINTER, 0)),
                    _field("maybeRange", Option(BinType.I32, Scalar(BinType.I32, -625))),
                ),
            ),
        ),
    )


@pytest.fixture
def sample_names() -> dict[int, str]:
    """Hash -> name table covering every name used by ``sample_tree``."""
    return {fnv1a32(name): name for name in SAMPLE_NAMES}


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Config path under ``tmp_path`` with no host-derived hashtable default."""
    monkeypatch.setattr(config_store, "default_hashtable_dir", lambda: None)
    return tmp_path / "config.toml"
