"""Bind changed files to their nearest rufio-hooks.yaml (monorepo support)."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from rufio.rule_engine.config import CONFIG_FILENAME, load_document, resolve
from rufio.rule_engine.models import Check
from rufio.rule_engine.presets import PresetChain

logger = logging.getLogger(__name__)


@dataclass
class ConfigGroup:
    """Changed files governed by one config directory (None = no configuration)."""

    directory: Path | None
    files: list[Path] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)


def _normalize(path: Path, root: Path) -> Path:
    if not path.is_absolute():
        path = root / path
    # Symlinks resolved: the repo root from git is symlink-free
    return Path(os.path.realpath(path))


class ConfigResolver:
    """Finds and loads governing configs, memoising per directory and per file."""

    def __init__(self, repo_root: Path, chain: PresetChain | None = None) -> None:
        self._repo_root = Path(os.path.realpath(repo_root))
        self._chain = chain or PresetChain.default()
        self._nearest: dict[Path, Path | None] = {}
        self._checks: dict[Path, list[Check]] = {}

    @property
    def repo_root(self) -> Path:
        return self._repo_root

    def nearest_config(self, directory: Path) -> Path | None:
        """Walk upward from ``directory`` to the repo root (inclusive) for a config file."""
        visited: list[Path] = []
        current = directory
        found: Path | None = None
        while True:
            if current in self._nearest:
                found = self._nearest[current]
                break
            visited.append(current)
            candidate = current / CONFIG_FILENAME
            if candidate.is_file():
                found = candidate
                break
            if current == self._repo_root or current == current.parent:
                break
            if not current.is_relative_to(self._repo_root):
                break
            current = current.parent

        for d in visited:
            self._nearest[d] = found
        return found

    def checks_for(self, config_path: Path) -> list[Check]:
        if config_path not in self._checks:
            document = load_document(config_path)
            self._checks[config_path] = resolve(document, self._chain)
            logger.debug(
                "Loaded %s: %d checks", config_path, len(self._checks[config_path])
            )
        return self._checks[config_path]

    def group(self, files: Iterable[Path | str]) -> dict[Path | None, ConfigGroup]:
        groups: dict[Path | None, ConfigGroup] = {}
        for raw in files:
            path = _normalize(Path(raw), self._repo_root)
            if path.is_relative_to(self._repo_root):
                config_path = self.nearest_config(path.parent)
            else:
                config_path = None
            key = config_path.parent if config_path is not None else None
            if key not in groups:
                checks = self.checks_for(config_path) if config_path is not None else []
                groups[key] = ConfigGroup(directory=key, checks=checks)
            if path not in groups[key].files:
                groups[key].files.append(path)
        return groups


def group_by_config(
    files: Iterable[Path | str],
    repo_root: Path,
    chain: PresetChain | None = None,
) -> dict[Path | None, ConfigGroup]:
    """Group changed files by nearest governing config directory.

    Relative paths are taken relative to ``repo_root``. Files with no config
    between them and the repo root land under the ``None`` key with no checks.
    """
    return ConfigResolver(repo_root, chain).group(files)
