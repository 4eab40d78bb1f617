"""Built-in presets and the user-first preset lookup chain."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rufio.rule_engine.models import (
    Check,
    EnsureChanged,
    EnsureCommands,
    Preset,
    PresetSource,
    When,
)

logger = logging.getLogger(__name__)


def _commands(name: str, pattern: str, *commands: str) -> Check:
    return Check(
        name=name,
        when=When(paths_changed=pattern),
        then=EnsureCommands(ensure_commands=list(commands)),
    )


def _version_bump(name: str, pattern: str) -> Check:
    return Check(
        name=name,
        when=When(paths_changed=pattern, path_exists="package.nix"),
        then=EnsureChanged(ensure_changed=["version.toml"]),
    )


BUILTIN_PRESETS: dict[str, list[Check]] = {
    "cargo": [
        _commands("cargo-checks", "**/*.rs", "cargo test", "cargo fmt", "cargo clippy"),
        _version_bump("cargo-version-bump", "**/*.rs"),
    ],
    "meow": [
        _commands("meow-fmt", "**/*.md", "meow fmt"),
    ],
    "pnpm": [
        _commands("pnpm-checks", "**/*.ts", "pnpm lint", "pnpm typecheck", "pnpm test"),
        _version_bump("pnpm-version-bump", "**/*.ts"),
    ],
    "ledger": [
        _commands("ledger-checks", "**/*.ledger", "hledger check", "folio validate"),
    ],
    "terraform": [
        _commands("terraform-checks", "**/*.tf", "tofu fmt", "tflint", "trivy config ."),
    ],
}


def default_preset_dir() -> Path:
    """$RUFIO_PRESETS_DIR, else $XDG_CONFIG_HOME/rufio/presets, else ~/.config/rufio/presets."""
    env = os.environ.get("RUFIO_PRESETS_DIR")
    if env:
        return Path(env)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "rufio" / "presets"


class PresetChain:
    """Ordered preset lookup: user directory first, then built-ins.

    Built fresh per invocation; nothing here is shared or mutated across runs.
    """

    def __init__(
        self,
        user_dir: Path | None = None,
        builtins: dict[str, list[Check]] | None = None,
    ) -> None:
        self._user_dir = user_dir
        self._builtins = BUILTIN_PRESETS if builtins is None else builtins
        self._loaded: dict[str, Preset | None] = {}

    @classmethod
    def default(cls) -> PresetChain:
        return cls(user_dir=default_preset_dir())

    @property
    def user_dir(self) -> Path | None:
        return self._user_dir

    def user_path(self, name: str) -> Path | None:
        if self._user_dir is None:
            return None
        return self._user_dir / f"{name}.yaml"

    def lookup(self, name: str) -> Preset | None:
        """Return the preset called ``name``, or None. User presets shadow built-ins."""
        if name in self._loaded:
            return self._loaded[name]

        preset: Preset | None = None
        user_path = self.user_path(name)
        if user_path is not None and user_path.is_file():
            # Local import: config imports this module for PresetChain
            from rufio.rule_engine.config import load_preset_file

            preset = Preset(
                name=name,
                checks=load_preset_file(user_path),
                source=PresetSource.USER,
                path=user_path,
            )
            logger.debug("Preset %s loaded from %s", name, user_path)
        elif name in self._builtins:
            preset = Preset(name=name, checks=list(self._builtins[name]))

        self._loaded[name] = preset
        return preset

    def available(self) -> list[Preset]:
        """All presets visible through the chain, user presets first shadowing built-ins."""
        names: set[str] = set(self._builtins)
        if self._user_dir is not None and self._user_dir.is_dir():
            names.update(p.stem for p in self._user_dir.glob("*.yaml"))
        presets = [self.lookup(name) for name in sorted(names)]
        return [p for p in presets if p is not None]
