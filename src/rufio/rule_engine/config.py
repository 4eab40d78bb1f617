"""Load rufio-hooks.yaml and preset documents, and resolve presets into checks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rufio.errors import (
    ConfigParseError,
    ConfigSchemaError,
    UnknownPresetError,
)
from rufio.rule_engine.models import Check, ConfigDocument
from rufio.rule_engine.presets import PresetChain

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "rufio-hooks.yaml"


class _RawDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    presets: list[str] = Field(default_factory=list)
    checks: list[Check] = Field(default_factory=list)

    @field_validator("presets", "checks", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        # A bare `presets:` or `checks:` key parses as None
        return [] if value is None else value


class _RawPreset(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = ""
    checks: list[Check]


def _format_loc(loc: tuple[int | str, ...]) -> str:
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif part in ("commands", "changed") and out.endswith(".then"):
            continue  # union tag, not a document key
        else:
            out += f".{part}" if out else str(part)
    return out


def _schema_error(exc: ValidationError, path: Path) -> ConfigSchemaError:
    first = exc.errors()[0]
    field = _format_loc(tuple(first["loc"]))
    message = first["msg"].removeprefix("Value error, ")
    if first["type"] == "missing":
        message = f"missing required field '{field}'"
    elif first["type"] == "extra_forbidden":
        message = f"unknown field '{field}'"
    return ConfigSchemaError(message, path, field=field)


def _load_yaml(text: str, path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"invalid YAML: {e}", path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigSchemaError(
            f"top level must be a mapping, got {type(data).__name__}", path, field="<root>"
        )
    return data


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(f"cannot read file: {e.strerror or e}", path) from e


def parse_document(text: str, path: Path) -> ConfigDocument:
    """Parse and validate one config document. Presets are not resolved here."""
    data = _load_yaml(text, path)
    try:
        raw = _RawDocument.model_validate(data)
    except ValidationError as e:
        raise _schema_error(e, path) from e
    if not raw.presets and not raw.checks:
        raise ConfigSchemaError(
            "no checks defined (add 'presets' or 'checks')", path, field="checks"
        )
    return ConfigDocument(path=path, presets=raw.presets, checks=raw.checks)


def load_document(path: Path) -> ConfigDocument:
    return parse_document(_read(path), path)


def load_preset_file(path: Path) -> list[Check]:
    """Load a user preset: a mapping with a `checks` list."""
    data = _load_yaml(_read(path), path)
    try:
        raw = _RawPreset.model_validate(data)
    except ValidationError as e:
        raise _schema_error(e, path) from e
    return raw.checks


def merge_checks(*groups: list[Check]) -> list[Check]:
    """Concatenate check lists; a later check replaces an earlier one of the same name in place."""
    merged: dict[str, Check] = {}
    for checks in groups:
        for check in checks:
            if check.name in merged:
                logger.debug("Check %s overridden", check.name)
            merged[check.name] = check
    return list(merged.values())


def resolve(document: ConfigDocument, chain: PresetChain | None = None) -> list[Check]:
    """Expand the document's presets (in listed order) and merge its local checks last."""
    chain = chain or PresetChain.default()
    preset_checks: list[list[Check]] = []
    for name in document.presets:
        preset = chain.lookup(name)
        if preset is None:
            raise UnknownPresetError(name, document.path, searched=chain.user_path(name))
        preset_checks.append(preset.checks)
    return merge_checks(*preset_checks, document.checks)
