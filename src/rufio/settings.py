"""Engine settings: optional JSON file with environment variable overrides."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from rufio.rule_engine.models import CommandOrder
from rufio.rule_engine.presets import default_preset_dir

logger = logging.getLogger(__name__)


class ChangedFilesSource(StrEnum):
    SESSION = "session"  # files edited through tool calls in this session
    GIT = "git"  # session edits plus `git status` changes inside the project


@dataclass
class EngineSettings:
    command_order: CommandOrder = CommandOrder.ANY
    changed_files: ChangedFilesSource = ChangedFilesSource.SESSION
    presets_dir: Path = field(default_factory=default_preset_dir)
    debug: bool = False
    log_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))


def default_settings_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "rufio" / "settings.json"


def _truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _enum_or_none(enum: type[StrEnum], value: object, origin: str) -> StrEnum | None:
    try:
        return enum(str(value).lower())
    except ValueError:
        logger.warning("Ignoring %s=%r: expected one of %s", origin, value, [e.value for e in enum])
        return None


def _apply(cfg: EngineSettings, data: dict[str, object]) -> None:
    if "command_order" in data:
        if order := _enum_or_none(CommandOrder, data["command_order"], "command_order"):
            cfg.command_order = order
    if "changed_files" in data:
        if source := _enum_or_none(ChangedFilesSource, data["changed_files"], "changed_files"):
            cfg.changed_files = source
    if isinstance(data.get("presets_dir"), str):
        cfg.presets_dir = Path(os.path.expanduser(str(data["presets_dir"])))
    if isinstance(data.get("debug"), bool):
        cfg.debug = bool(data["debug"])
    if isinstance(data.get("log_dir"), str):
        cfg.log_dir = Path(os.path.expanduser(str(data["log_dir"])))


def load_settings(path: Path | None = None) -> EngineSettings:
    """Load settings from ``path`` (default: $XDG_CONFIG_HOME/rufio/settings.json)."""
    settings = EngineSettings()
    path = path or default_settings_path()
    if path.exists():
        try:
            text = path.read_text()
            if text.strip():
                data = json.loads(text)
                if isinstance(data, dict):
                    _apply(settings, data)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to load settings from %s: %s", path, e)

    if env_val := os.environ.get("RUFIO_COMMAND_ORDER"):
        if order := _enum_or_none(CommandOrder, env_val, "RUFIO_COMMAND_ORDER"):
            settings.command_order = order
    if env_val := os.environ.get("RUFIO_CHANGED_FILES"):
        if source := _enum_or_none(ChangedFilesSource, env_val, "RUFIO_CHANGED_FILES"):
            settings.changed_files = source
    if env_val := os.environ.get("RUFIO_PRESETS_DIR"):
        settings.presets_dir = Path(env_val)
    if env_val := os.environ.get("RUFIO_DEBUG"):
        settings.debug = _truthy(env_val)
    if env_val := os.environ.get("RUFIO_LOG_DIR"):
        settings.log_dir = Path(env_val)
    return settings
