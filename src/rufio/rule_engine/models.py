"""Pydantic models and enums for the rule engine layer."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

from rufio.rule_engine.matcher import validate_glob


class CommandOrder(StrEnum):
    ANY = "any"  # each command ran at least once after the last edit
    LISTED = "listed"  # commands ran after the last edit in the order listed


class Verdict(StrEnum):
    NOT_APPLICABLE = "not_applicable"
    PASSED = "passed"
    FAILED = "failed"


class PresetSource(StrEnum):
    USER = "user"
    BUILTIN = "builtin"


class When(BaseModel):
    model_config = ConfigDict(extra="forbid")

    paths_changed: str
    path_exists: str | None = None

    @field_validator("paths_changed")
    @classmethod
    def _valid_glob(cls, value: str) -> str:
        return validate_glob(value)


class EnsureCommands(BaseModel):
    """Every command must run after the last edit of a matching file."""

    model_config = ConfigDict(extra="forbid")

    ensure_commands: list[str] = Field(min_length=1)
    command_order: CommandOrder | None = None  # None = engine default


class EnsureChanged(BaseModel):
    """Every path must also have been edited during the session."""

    model_config = ConfigDict(extra="forbid")

    ensure_changed: list[str] = Field(min_length=1)


def _then_tag(value: Any) -> str | None:
    if isinstance(value, EnsureCommands):
        return "commands"
    if isinstance(value, EnsureChanged):
        return "changed"
    if isinstance(value, dict):
        if "ensure_commands" in value:
            return "commands"
        if "ensure_changed" in value:
            return "changed"
    return None


Then = Annotated[
    Union[Annotated[EnsureCommands, Tag("commands")], Annotated[EnsureChanged, Tag("changed")]],
    Discriminator(_then_tag),
]


class Check(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    when: When
    then: Then

    @field_validator("then", mode="before")
    @classmethod
    def _exactly_one_action(cls, value: Any) -> Any:
        if isinstance(value, dict):
            has_commands = "ensure_commands" in value
            has_changed = "ensure_changed" in value
            if has_commands and has_changed:
                raise ValueError("cannot have both 'ensure_commands' and 'ensure_changed'")
            if not has_commands and not has_changed:
                raise ValueError("must have 'ensure_commands' or 'ensure_changed'")
        return value


class Preset(BaseModel):
    name: str
    checks: list[Check]
    source: PresetSource = PresetSource.BUILTIN
    path: Path | None = None  # set for user presets


class ConfigDocument(BaseModel):
    """One parsed rufio-hooks.yaml, before presets are resolved."""

    path: Path
    presets: list[str] = Field(default_factory=list)
    checks: list[Check] = Field(default_factory=list)

    @property
    def directory(self) -> Path:
        return self.path.parent


class CheckResult(BaseModel):
    check_name: str
    verdict: Verdict
    directory: Path | None = None
    reason: str = ""
    missing: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.verdict == Verdict.FAILED


class HookDecision(BaseModel):
    """Payload printed to stdout when the agent must keep working."""

    decision: Literal["block"] = "block"
    reason: str
