"""Unit tests for TOML config persistence."""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

import pytest

from ritobin_tools.errors import ConfigError, ConfigValidationError
from ritobin_tools.infrastructure import config_store
from ritobin_tools.infrastructure.config_store import (
    ConfigLocator,
    ConfigStore,
    parse_config_value,
)
from ritobin_tools.schemas import AppConfig


def _store(path: Path | None) -> ConfigStore:
    return ConfigStore(ConfigLocator(path))


def _read(path: Path) -> dict[str, object]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def test_missing_file_is_created_with_defaults(
    config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure the first load writes the default document."""
    monkeypatch.setattr(config_store, "default_hashtable_dir", lambda: "D:\\Docs\\hashes")

    config, path = _store(config_file).load_or_create()

    assert path == config_file
    assert config.hashtable_dir == "D:\\Docs\\hashes"
    assert _read(config_file) == {"hashtable_dir": "D:/Docs/hashes"}


def test_missing_default_writes_empty_document(config_file: Path) -> None:
    """Ensure an unknown documents dir leaves the key out instead of writing null."""
    config, _ = _store(config_file).load_or_create()
    assert config == AppConfig()
    assert _read(config_file) == {}


def test_absent_key_is_backfilled_without_rewriting(
    config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure a document without hashtable_dir gets the default in memory only."""
    monkeypatch.setattr(config_store, "default_hashtable_dir", lambda: "/data/hashes")
    config_file.write_text("", encoding="utf-8")

    config, _ = _store(config_file).load_or_create()

    assert config.hashtable_dir == "/data/hashes"
    assert config_file.read_text(encoding="utf-8") == ""


def test_existing_value_is_kept(config_file: Path) -> None:
    """Ensure a stored hashtable_dir wins over the default."""
    config_file.write_text('hashtable_dir = "/mine"\n', encoding="utf-8")
    config, _ = _store(config_file).load_or_create()
    assert config.hashtable_dir == "/mine"


@pytest.mark.parametrize(
    "document",
    ["hashtable_dir = ", 'unknown_key = "x"\n', "hashtable_dir = 5\n", 'hashtable_dir = "  "\n'],
)
def test_malformed_document_is_a_config_error(config_file: Path, document: str) -> None:
    """Ensure syntax and schema failures both surface as ConfigError."""
    config_file.write_text(document, encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse config file"):
        _store(config_file).load_or_create()


def test_unknown_location_is_a_config_error() -> None:
    """Ensure every operation refuses to run without a config path."""
    store = _store(None)
    with pytest.raises(ConfigError, match="Could not determine config path"):
        store.load_or_create()
    with pytest.raises(ConfigError, match="Could not determine config path"):
        store.reset()


def test_set_value_normalizes_paths(config_file: Path) -> None:
    """Ensure backslashes are stored as forward slashes."""
    config = _store(config_file).set_value("hashtable_dir", "C:\\League\\hashes")
    assert config.hashtable_dir == "C:/League/hashes"
    assert _read(config_file) == {"hashtable_dir": "C:/League/hashes"}


@pytest.mark.parametrize(
    ("key", "value", "detail"),
    [
        ("hashtable_dir", "", "must not be empty"),
        ("hashtable_dir", "12", "string"),
        ("colour", "blue", "Extra inputs are not permitted"),
    ],
)
def test_invalid_set_leaves_file_untouched(
    config_file: Path, key: str, value: str, detail: str
) -> None:
    """Ensure a rejected update names the key and does not write."""
    config_file.write_text('hashtable_dir = "/keep"\n', encoding="utf-8")
    before = config_file.read_bytes()

    with pytest.raises(ConfigValidationError, match=detail) as excinfo:
        _store(config_file).set_value(key, value)

    assert excinfo.value.key == key
    assert f"Invalid configuration for '{key}'" in str(excinfo.value)
    assert config_file.read_bytes() == before


def test_reset_restores_defaults(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure reset overwrites a customized document."""
    config_file.write_text('hashtable_dir = "/custom"\n', encoding="utf-8")
    monkeypatch.setattr(config_store, "default_hashtable_dir", lambda: "/default")

    config = _store(config_file).reset()

    assert config.hashtable_dir == "/default"
    assert _read(config_file) == {"hashtable_dir": "/default"}


def test_load_table_without_file_is_defaults(config_file: Path) -> None:
    """Ensure showing an absent config does not create it."""
    assert _store(config_file).load_table() == {}
    assert not config_file.exists()


@pytest.mark.parametrize(
    ("raw", "parsed"),
    [
        ("true", True),
        ("false", False),
        ("True", "True"),
        ("42", 42),
        ("-7", -7),
        ("1.5", 1.5),
        ("1e5", "1e5"),
        ("1.2.3", "1.2.3"),
        ("C:/hashes", "C:/hashes"),
    ],
)
def test_parse_config_value(raw: str, parsed: object) -> None:
    """Ensure command-line strings coerce to the matching TOML scalar."""
    value = parse_config_value(raw)
    assert value == parsed
    assert type(value) is type(parsed)


def test_locator_defaults_beside_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the default config lives next to the running executable."""
    monkeypatch.setattr(sys, "executable", "/opt/ritobin/bin/python")
    assert ConfigLocator.default().path == Path("/opt/ritobin/bin/config.toml")
    monkeypatch.setattr(sys, "executable", "")
    assert ConfigLocator.default().path is None


def test_default_hashtable_dir_prefers_documents(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the documents folder is used, else the user data folder."""
    documents = "/home/u/Documents"
    monkeypatch.setattr(config_store.platformdirs, "user_documents_dir", lambda: documents)
    assert config_store.default_hashtable_dir() == f"{documents}/LeagueToolkit/bin_hashtables"

    monkeypatch.setattr(config_store.platformdirs, "user_documents_dir", lambda: "")
    monkeypatch.setattr(
        config_store.platformdirs,
        "user_data_dir",
        lambda appname, appauthor=None: f"/home/u/.local/share/{appname}",
    )
    expected = "/home/u/.local/share/LeagueToolkit/bin_hashtables"
    assert config_store.default_hashtable_dir() == expected
