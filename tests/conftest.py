"""Shared fixtures for rufio tests."""

import json
from pathlib import Path

import pytest


def _tool_use(name: str, **tool_input: str) -> dict:
    """Build a tool_use content item."""
    return {"type": "tool_use", "id": f"toolu_{name}", "name": name, "input": tool_input}


def _assistant(*items: dict, timestamp: str = "2026-02-15T12:00:00.000Z") -> dict:
    """Build an assistant JSONL entry carrying the given content items."""
    return {
        "type": "assistant",
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": list(items)},
    }


def _edit(path: str, tool: str = "Edit") -> dict:
    return _assistant(_tool_use(tool, file_path=path))


def _bash(command: str) -> dict:
    return _assistant(_tool_use("Bash", command=command))


def _user(text: str = "hello") -> dict:
    return {"type": "user", "message": {"role": "user", "content": text}}


def _write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to a file."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


def _write_config(directory: Path, text: str, name: str = "rufio-hooks.yaml") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text)
    return path


CARGO_CONFIG = """\
presets:
  - cargo
"""


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch):
    """Keep the user's real presets and settings out of every test."""
    home = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    for var in (
        "RUFIO_PRESETS_DIR",
        "RUFIO_COMMAND_ORDER",
        "RUFIO_CHANGED_FILES",
        "RUFIO_DEBUG",
        "RUFIO_LOG_DIR",
        "ZELLIJ_PANE_ID",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def user_presets_dir(isolated_config_home: Path) -> Path:
    path = isolated_config_home / "rufio" / "presets"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """Repo root with a cargo preset config and a src/main.rs."""
    root = tmp_path / "repo"
    _write_config(root, CARGO_CONFIG)
    (root / "src").mkdir()
    (root / "src" / "main.rs").write_text("fn main() {}\n")
    return root
