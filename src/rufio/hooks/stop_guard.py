"""Stop hook: block exit until every applicable check in rufio-hooks.yaml passes."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rufio.errors import RufioError
from rufio.hooks._common import HookInput, get_changed_files, get_git_root
from rufio.rule_engine.evaluator import evaluate_groups
from rufio.rule_engine.models import HookDecision
from rufio.rule_engine.presets import PresetChain
from rufio.rule_engine.resolver import ConfigResolver
from rufio.rule_engine.verdict import aggregate, error_decision, failure_lines
from rufio.settings import ChangedFilesSource, EngineSettings
from rufio.transcript import SessionEvent, build_timeline, edited_paths, executed_commands

logger = logging.getLogger(__name__)


def collect_changed_files(
    events: tuple[SessionEvent, ...], cwd: Path, settings: EngineSettings
) -> list[Path]:
    """Session-edited files, plus git-reported changes when configured."""
    files = edited_paths(events)
    if settings.changed_files == ChangedFilesSource.GIT:
        for path in get_changed_files(cwd):
            if path not in files:
                files.append(path)
    return files


def run_stop_checks(hook_input: HookInput, settings: EngineSettings) -> HookDecision | None:
    """Evaluate all checks for the session. None means the agent may stop."""
    cwd = Path(os.path.realpath(hook_input.cwd))
    repo_root = get_git_root(cwd) or cwd
    if hook_input.stop_hook_active:
        logger.debug("Stop: already continuing from a previous block")

    try:
        events = build_timeline(Path(hook_input.transcript_path), cwd=cwd)
        files = collect_changed_files(events, cwd, settings)
        logger.debug(
            "Stop: %d events, %d changed files, commands run: %s",
            len(events),
            len(files),
            executed_commands(events),
        )

        resolver = ConfigResolver(repo_root, PresetChain(user_dir=settings.presets_dir))
        groups = resolver.group(files)
    except RufioError as e:
        logger.error("Stop: aborting before evaluation: %s", e)
        return error_decision(e)

    results = evaluate_groups(groups.values(), events, settings.command_order)
    for result in results:
        logger.debug("check %s (%s): %s", result.check_name, result.directory, result.verdict)

    decision = aggregate(results, repo_root)
    if decision is None:
        logger.debug("Stop: all checks pass")
    else:
        logger.debug("Stop: blocking: %s", " | ".join(failure_lines(results, repo_root)))
    return decision
