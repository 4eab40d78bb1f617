"""Shared utilities for hook scripts."""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

PROJECT_MARKERS = ("shell.nix", "CLAUDE.md")


class HookInput(BaseModel):
    """The subset of the Claude Code hook payload rufio reads."""

    model_config = ConfigDict(extra="ignore")

    hook_event_name: str
    cwd: str
    session_id: str = "default"
    transcript_path: str = ""
    tool_name: str | None = None
    stop_hook_active: bool = False


def read_hook_input() -> dict[str, Any]:
    """Read JSON input from stdin. Returns empty dict on failure."""
    try:
        raw = sys.stdin.read()
        if not raw.strip():
            return {}
        data = json.loads(raw)
        return data if isinstance(data, dict) else {}
    except (json.JSONDecodeError, OSError):
        return {}


def parse_hook_input(data: dict[str, Any]) -> HookInput | None:
    try:
        return HookInput.model_validate(data)
    except ValidationError:
        return None


def get_git_root(cwd: Path | None = None) -> Path | None:
    """Find git repo root via `git rev-parse`. Returns None if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
        if result.returncode == 0:
            return Path(result.stdout.strip())
        return None
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired):
        return None


def parse_porcelain_z(output: str) -> list[str]:
    """Paths from `git status --porcelain -z`; renames and copies yield the new path only."""
    paths: list[str] = []
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        status, path = entry[:2], entry[3:]
        paths.append(path)
        if "R" in status or "C" in status:
            i += 1  # skip the original path
    return paths


def find_project_root(cwd: Path, git_root: Path) -> Path | None:
    """Walk up from cwd to git_root looking for a project marker file."""
    current = cwd
    while True:
        if any((current / marker).exists() for marker in PROJECT_MARKERS):
            return current
        if current == git_root or current == current.parent:
            return None
        current = current.parent


def filter_to_project(files: list[Path], cwd: Path, git_root: Path) -> list[Path]:
    """Keep only files inside the project that contains cwd (monorepo sub-projects)."""
    project_root = find_project_root(cwd, git_root)
    if project_root is None or project_root == git_root:
        return files
    return [f for f in files if f.is_relative_to(project_root)]


def get_changed_files(cwd: Path) -> list[Path]:
    """Absolute paths git reports as changed or untracked, limited to the current project."""
    git_root = get_git_root(cwd)
    if git_root is None:
        return []
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain", "-z", "-uall"],
            capture_output=True,
            text=True,
            timeout=10,
            cwd=git_root,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning("git status failed: %s", e)
        return []
    if result.returncode != 0:
        logger.warning("git status exited %d: %s", result.returncode, result.stderr.strip())
        return []

    files = [git_root / p for p in parse_porcelain_z(result.stdout)]
    return filter_to_project(files, cwd, git_root)
