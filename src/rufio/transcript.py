"""Parse Claude Code JSONL transcripts into an ordered session timeline."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rufio.errors import TranscriptParseError

logger = logging.getLogger(__name__)

# tool name -> input key holding the edited path
FILE_EDIT_TOOLS: dict[str, str] = {
    "Edit": "file_path",
    "Write": "file_path",
    "MultiEdit": "file_path",
    "NotebookEdit": "notebook_path",
}
COMMAND_TOOLS: dict[str, str] = {
    "Bash": "command",
}


@dataclass(frozen=True)
class FileEdited:
    """A file-modifying tool call."""

    index: int
    path: str
    tool_name: str = "Edit"
    timestamp: str = ""


@dataclass(frozen=True)
class CommandExecuted:
    """A shell command tool call."""

    index: int
    command: str
    tool_name: str = "Bash"
    timestamp: str = ""


SessionEvent = FileEdited | CommandExecuted


class TimelineBuilder:
    """Append-only builder fed one JSONL line at a time.

    ``index`` counts every tool_use item seen, recognised or not, so event
    positions follow transcript order even when wall-clock timestamps tie.
    Works on any prefix of a transcript.
    """

    def __init__(self, cwd: Path | None = None, source: Path | None = None) -> None:
        self._cwd = cwd
        self._source = source
        self._events: list[SessionEvent] = []
        self._position = 0
        self._line_no = 0
        self._pending_error: str | None = None

    @property
    def events(self) -> tuple[SessionEvent, ...]:
        return tuple(self._events)

    def feed(self, line: str) -> None:
        self._line_no += 1
        line = line.strip()
        if not line:
            return

        if self._pending_error is not None:
            # A broken line followed by more content: not a truncated tail
            raise TranscriptParseError(self._pending_error, self._source)

        try:
            entry = json.loads(line)
        except json.JSONDecodeError as e:
            self._pending_error = f"line {self._line_no} is not valid JSON: {e.msg}"
            return

        if isinstance(entry, dict):
            self._consume(entry)

    def feed_lines(self, lines: Iterable[str]) -> TimelineBuilder:
        for line in lines:
            self.feed(line)
        return self

    def _consume(self, entry: dict[str, Any]) -> None:
        message = entry.get("message")
        if not isinstance(message, dict):
            return
        content = message.get("content")
        if not isinstance(content, list):
            return

        timestamp = entry.get("timestamp", "")
        if not isinstance(timestamp, str):
            timestamp = ""

        for item in content:
            if not isinstance(item, dict) or item.get("type") != "tool_use":
                continue
            name = item.get("name")
            if not isinstance(name, str):
                continue
            index = self._position
            self._position += 1

            tool_input = item.get("input")
            if not isinstance(tool_input, dict):
                continue

            if name in FILE_EDIT_TOOLS:
                path = tool_input.get(FILE_EDIT_TOOLS[name])
                if isinstance(path, str) and path:
                    self._events.append(
                        FileEdited(index, self._normalize(path), name, timestamp)
                    )
            elif name in COMMAND_TOOLS:
                command = tool_input.get(COMMAND_TOOLS[name])
                if isinstance(command, str) and command:
                    self._events.append(CommandExecuted(index, command, name, timestamp))

    def _normalize(self, path: str) -> str:
        if self._cwd is not None and not os.path.isabs(path):
            path = os.path.join(self._cwd, path)
        # Symlinks resolved so edits match paths under the git root
        return os.path.realpath(path)


def build_timeline(path: Path, cwd: Path | None = None) -> tuple[SessionEvent, ...]:
    """Read a whole transcript file. Raises TranscriptParseError if it cannot be read."""
    builder = TimelineBuilder(cwd=cwd, source=path)
    try:
        with open(path, encoding="utf-8") as f:
            builder.feed_lines(f)
    except (OSError, UnicodeDecodeError) as e:
        raise TranscriptParseError(f"cannot read transcript: {e}", path) from e
    events = builder.events
    logger.debug("Transcript %s: %d events", path, len(events))
    return events


def edited_paths(events: Iterable[SessionEvent]) -> list[Path]:
    """Unique edited paths, in first-edit order."""
    seen: dict[str, None] = {}
    for event in events:
        if isinstance(event, FileEdited):
            seen.setdefault(event.path, None)
    return [Path(p) for p in seen]


def executed_commands(events: Iterable[SessionEvent]) -> list[str]:
    return [e.command for e in events if isinstance(e, CommandExecuted)]
