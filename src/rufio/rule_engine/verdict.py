"""Fold per-check results into a single allow/block decision."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from rufio.errors import RufioError
from rufio.rule_engine.models import CheckResult, HookDecision


def _sort_key(result: CheckResult) -> tuple[str, str]:
    directory = "" if result.directory is None else str(result.directory)
    return directory, result.check_name


def _label(result: CheckResult, repo_root: Path | None) -> str:
    directory = result.directory
    if directory is None or repo_root is None or directory == repo_root:
        return f"[{result.check_name}]"
    try:
        shown = directory.relative_to(repo_root).as_posix()
    except ValueError:
        shown = str(directory)
    return f"[{shown}] [{result.check_name}]"


def failure_lines(results: Iterable[CheckResult], repo_root: Path | None = None) -> list[str]:
    failed = sorted((r for r in results if r.failed), key=_sort_key)
    return [f"{_label(r, repo_root)} {r.reason}" for r in failed]


def aggregate(results: Iterable[CheckResult], repo_root: Path | None = None) -> HookDecision | None:
    """None means allow. Otherwise every failing check is listed in one message."""
    lines = failure_lines(results, repo_root)
    if not lines:
        return None
    if len(lines) == 1:
        return HookDecision(reason=lines[0])
    header = f"{len(lines)} checks failed:"
    return HookDecision(reason="\n".join([header, *(f"- {line}" for line in lines)]))


def error_decision(exc: RufioError) -> HookDecision:
    """Block with the configuration or transcript problem instead of guessing a verdict."""
    return HookDecision(reason=f"rufio: {type(exc).__name__}: {exc}")
