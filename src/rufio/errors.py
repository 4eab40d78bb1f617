"""Error hierarchy for config resolution and transcript parsing."""

from __future__ import annotations

from pathlib import Path


class RufioError(Exception):
    """Base class for errors that abort a run before any check is evaluated."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class ConfigError(RufioError):
    """Raised when a config or preset document cannot be used."""


class ConfigParseError(ConfigError):
    """Document is not readable or not valid YAML."""


class ConfigSchemaError(ConfigError):
    """Document parsed but a field is missing, duplicated or malformed."""

    def __init__(self, message: str, path: Path | str | None = None, field: str = "") -> None:
        super().__init__(message, path)
        self.field = field

    def __str__(self) -> str:
        where = f" (at '{self.field}')" if self.field else ""
        return f"{super().__str__()}{where}"


class UnknownPresetError(ConfigError):
    """A referenced preset exists neither in the user directory nor in the built-ins."""

    def __init__(self, preset: str, path: Path | str | None = None, searched: Path | None = None):
        message = f"preset '{preset}' not found"
        if searched is not None:
            message += f" (looked for {searched} and the built-in presets)"
        super().__init__(message, path)
        self.preset = preset
        self.searched = searched


class TranscriptParseError(RufioError):
    """Transcript file is unreadable or not JSONL."""


class GlobPatternError(ValueError):
    """Pattern uses '*' in a way the matcher does not support."""
