"""Pydantic schemas for runtime validation of configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def normalize_path_text(value: str) -> str:
    """Use forward slashes regardless of the platform that wrote the path."""
    return value.replace("\\", "/")


class AppConfig(BaseModel):
    """Application-wide configuration stored in ``config.toml``."""

    model_config = ConfigDict(extra="forbid")

    hashtable_dir: str | None = None

    @field_validator("hashtable_dir")
    @classmethod
    def _validate_hashtable_dir(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("hashtable_dir must not be empty.")
        return value

    def normalized(self) -> AppConfig:
        """Copy with every path written using forward slashes."""
        if self.hashtable_dir is None:
            return self
        return self.model_copy(update={"hashtable_dir": normalize_path_text(self.hashtable_dir)})
