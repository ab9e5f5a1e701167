"""TOML-backed persistence for :class:`~ritobin_tools.schemas.AppConfig`."""

from __future__ import annotations

import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

import platformdirs
import tomli_w
from pydantic import ValidationError

from ritobin_tools.errors import ConfigError, ConfigValidationError
from ritobin_tools.schemas import AppConfig, normalize_path_text
from ritobin_tools.types import ConfigScalar, ConfigTable

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
_PATH_KEYS = frozenset({"hashtable_dir"})


@dataclass(frozen=True)
class ConfigLocator:
    """Where the config document lives; ``None`` when it cannot be determined."""

    path: Path | None

    @classmethod
    def default(cls) -> ConfigLocator:
        """Locate ``config.toml`` beside the running interpreter or executable."""
        executable = sys.executable
        if not executable:
            return cls(None)
        return cls(Path(executable).absolute().parent / CONFIG_FILENAME)

    def require(self) -> Path:
        if self.path is None:
            raise ConfigError("Could not determine config path")
        return self.path


def default_hashtable_dir() -> str | None:
    """Documents/LeagueToolkit/bin_hashtables, else the LeagueToolkit data dir."""
    documents = platformdirs.user_documents_dir()
    if documents:
        return normalize_path_text(str(Path(documents) / "LeagueToolkit" / "bin_hashtables"))
    data_dir = platformdirs.user_data_dir("LeagueToolkit", appauthor=False)
    if data_dir:
        return normalize_path_text(str(Path(data_dir) / "bin_hashtables"))
    return None


def parse_config_value(value: str) -> ConfigScalar:
    """Coerce a command-line string into a TOML scalar.

    ``true``/``false`` become booleans, integers parse as ``int``, values that
    contain a ``.`` and parse as a number become ``float``; everything else
    stays a string.
    """
    if value in ("true", "false"):
        return value == "true"
    try:
        return int(value)
    except ValueError:
        pass
    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass
    return value


def _normalize_table(table: ConfigTable) -> ConfigTable:
    return {
        key: normalize_path_text(value) if key in _PATH_KEYS and isinstance(value, str) else value
        for key, value in table.items()
    }


def _validation_detail(exc: ValidationError) -> str:
    return "; ".join(str(error["msg"]) for error in exc.errors())


class ConfigStore:
    """Load, update and persist the application config.

    Parameters
    ----------
    locator : ConfigLocator
        Resolves the config file path. Tests pass a path under ``tmp_path``.
    """

    def __init__(self, locator: ConfigLocator) -> None:
        self.locator = locator

    @property
    def path(self) -> Path | None:
        return self.locator.path

    @staticmethod
    def defaults() -> AppConfig:
        return AppConfig(hashtable_dir=default_hashtable_dir())

    def _read_table(self, path: Path) -> ConfigTable:
        try:
            with path.open("rb") as handle:
                return tomllib.load(handle)
        except OSError as exc:
            raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    def _write_table(self, path: Path, table: ConfigTable) -> None:
        try:
            path.write_text(tomli_w.dumps(_normalize_table(table)), encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to save config file {path}: {exc}") from exc
        logger.debug("Saved config to %s", path)

    def load_or_create(self) -> tuple[AppConfig, Path]:
        """Load the config, creating it with defaults when absent.

        Returns
        -------
        tuple[AppConfig, Path]
            The effective config (missing fields backfilled) and its path.

        Raises
        ------
        ConfigError
            If the path is unknown, the file is malformed, or writing fails.
        """
        path = self.locator.require()
        if not path.exists():
            config = self.defaults()
            self.save(config)
            return config, path

        table = self._read_table(path)
        try:
            config = AppConfig.model_validate(table)
        except ValidationError as exc:
            raise ConfigError(
                f"Failed to parse config file {path}: {_validation_detail(exc)}"
            ) from exc
        if config.hashtable_dir is None:
            config = config.model_copy(update={"hashtable_dir": default_hashtable_dir()})
        return config, path

    def load_table(self) -> ConfigTable:
        """Return the raw document, or the serialized defaults if absent."""
        path = self.locator.require()
        if path.exists():
            return self._read_table(path)
        return self.defaults().model_dump(exclude_none=True)

    def set_value(self, key: str, value: str) -> AppConfig:
        """Set one key, validating the whole document before writing it.

        Raises
        ------
        ConfigValidationError
            If the updated document does not fit :class:`AppConfig`. The file
            on disk is left untouched.
        """
        table = dict(self.load_table())
        table[key] = parse_config_value(value)
        try:
            config = AppConfig.model_validate(table)
        except ValidationError as exc:
            raise ConfigValidationError(key, _validation_detail(exc)) from exc
        self._write_table(self.locator.require(), table)
        return config.normalized()

    def reset(self) -> AppConfig:
        config = self.defaults()
        self.save(config)
        return config

    def save(self, config: AppConfig) -> None:
        """Persist ``config`` with forward-slash paths."""
        self._write_table(
            self.locator.require(), config.normalized().model_dump(exclude_none=True)
        )
