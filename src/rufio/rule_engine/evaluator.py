"""Evaluate resolved checks for a config group against the session timeline."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from rufio.rule_engine.matcher import matches
from rufio.rule_engine.models import (
    Check,
    CheckResult,
    CommandOrder,
    EnsureChanged,
    EnsureCommands,
    Verdict,
)
from rufio.rule_engine.resolver import ConfigGroup
from rufio.transcript import CommandExecuted, FileEdited, SessionEvent

SESSION_START = -1


def _norm(path: str | Path) -> str:
    return os.path.normpath(os.fspath(path))


def last_edit_index(events: Iterable[SessionEvent], files: Iterable[Path]) -> int:
    """Position of the latest edit to any of ``files``; SESSION_START if none was recorded."""
    wanted = {_norm(f) for f in files}
    return max(
        (e.index for e in events if isinstance(e, FileEdited) and _norm(e.path) in wanted),
        default=SESSION_START,
    )


def missing_commands(
    required: Sequence[str],
    events: Sequence[SessionEvent],
    after: int,
    order: CommandOrder = CommandOrder.ANY,
) -> list[str]:
    """Commands from ``required`` with no matching execution after position ``after``.

    With CommandOrder.LISTED the commands must form an ordered subsequence of
    the executions; each one is matched to its earliest run after the previous
    command's run, and those that cannot be placed are reported.
    """
    runs = [
        (e.index, e.command)
        for e in events
        if isinstance(e, CommandExecuted) and e.index > after
    ]
    if order == CommandOrder.ANY:
        ran = {command for _, command in runs}
        return [cmd for cmd in required if cmd not in ran]

    missing: list[str] = []
    cursor = after
    for cmd in required:
        position = next((i for i, c in runs if c == cmd and i > cursor), None)
        if position is None:
            missing.append(cmd)
        else:
            cursor = position
    return missing


def missing_changes(
    required: Sequence[str], events: Iterable[SessionEvent], directory: Path
) -> list[str]:
    """Paths (relative to ``directory``) never edited anywhere in the session."""
    edited = {_norm(e.path) for e in events if isinstance(e, FileEdited)}
    return [p for p in required if _norm(directory / p) not in edited]


def evaluate_check(
    check: Check,
    group: ConfigGroup,
    events: Sequence[SessionEvent],
    order: CommandOrder = CommandOrder.ANY,
    exists: Callable[[Path], bool] = Path.exists,
) -> CheckResult:
    directory = group.directory
    not_applicable = CheckResult(
        check_name=check.name, verdict=Verdict.NOT_APPLICABLE, directory=directory
    )
    if directory is None:
        return not_applicable

    if check.when.path_exists and not exists(directory / check.when.path_exists):
        return not_applicable

    matched = [f for f in group.files if matches(check.when.paths_changed, f, directory)]
    if not matched:
        return not_applicable

    then = check.then
    if isinstance(then, EnsureCommands):
        policy = then.command_order or order
        after = last_edit_index(events, matched)
        missing = missing_commands(then.ensure_commands, events, after, policy)
        if policy == CommandOrder.LISTED:
            reason = "Required commands not run in order after last edit"
        else:
            reason = "Required commands not run after last edit"
    elif isinstance(then, EnsureChanged):
        missing = missing_changes(then.ensure_changed, events, directory)
        reason = "Required files not modified"
    else:
        raise TypeError(f"unsupported action for check '{check.name}': {type(then).__name__}")

    if not missing:
        return CheckResult(check_name=check.name, verdict=Verdict.PASSED, directory=directory)
    return CheckResult(
        check_name=check.name,
        verdict=Verdict.FAILED,
        directory=directory,
        reason=f"{reason}: {', '.join(missing)}",
        missing=missing,
    )


def evaluate_group(
    group: ConfigGroup,
    events: Sequence[SessionEvent],
    order: CommandOrder = CommandOrder.ANY,
    exists: Callable[[Path], bool] = Path.exists,
) -> list[CheckResult]:
    """One result per check; groups without a config yield nothing."""
    return [evaluate_check(check, group, events, order, exists) for check in group.checks]


def evaluate_groups(
    groups: Iterable[ConfigGroup],
    events: Sequence[SessionEvent],
    order: CommandOrder = CommandOrder.ANY,
    exists: Callable[[Path], bool] = Path.exists,
) -> list[CheckResult]:
    ordered = sorted(groups, key=lambda g: "" if g.directory is None else str(g.directory))
    results: list[CheckResult] = []
    for group in ordered:
        results.extend(evaluate_group(group, events, order, exists))
    return results
