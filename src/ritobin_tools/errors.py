"""Exception hierarchy for ritobin conversion, diffing, and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ritobin_tools.application.results import BatchResult


class RitobinToolsError(Exception):
    """Base class for all user-facing errors raised by this package."""

    exit_code: int = 1


class FileAccessError(RitobinToolsError):
    """Opening, reading, creating, or writing a file failed."""

    def __init__(self, operation: str, path: Path | str, cause: OSError | None = None) -> None:
        self.operation = operation
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"Failed to {operation} {self.path}{detail}")


class BinParseError(RitobinToolsError):
    """Binary or text input could not be parsed into a bin tree."""


class UnsupportedExtensionError(RitobinToolsError):
    """Input file extension does not select any conversion direction."""

    def __init__(self, extension: str, supported: tuple[str, ...]) -> None:
        self.extension = extension
        self.supported = supported
        listed = ", ".join(f".{ext}" for ext in supported)
        super().__init__(
            f"Unsupported file extension: .{extension}. Supported extensions: {listed}"
        )


class ConfigError(RitobinToolsError):
    """Config file location, parsing, or persistence failed."""


class ConfigValidationError(ConfigError):
    """A config update produced a document that does not fit the schema."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        super().__init__(f"Invalid configuration for '{key}': {detail}")


class BatchConversionError(RitobinToolsError):
    """One or more files in a directory conversion failed."""

    def __init__(self, result: BatchResult) -> None:
        self.result = result
        super().__init__(f"{result.error_count} file(s) failed to convert")


class HashDownloadError(RitobinToolsError):
    """Downloading a hashtable file failed."""

    def __init__(self, filename: str, url: str, detail: str) -> None:
        self.filename = filename
        self.url = url
        super().__init__(f"Failed to download {filename} from {url}: {detail}")
