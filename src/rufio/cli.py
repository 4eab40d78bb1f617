"""CLI entry point for rufio."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import cast

from rufio import __version__
from rufio.errors import RufioError
from rufio.rule_engine.config import CONFIG_FILENAME, load_document, resolve
from rufio.rule_engine.models import CommandOrder, EnsureCommands
from rufio.rule_engine.presets import PresetChain
from rufio.settings import ChangedFilesSource, load_settings


def _cmd_hook(_args: argparse.Namespace) -> None:
    from rufio.hooks.dispatcher import main as hook_main

    hook_main()


def _cmd_check(args: argparse.Namespace) -> None:
    from rufio.hooks._common import HookInput
    from rufio.hooks.stop_guard import run_stop_checks

    transcript = cast(Path, args.transcript)
    cwd = cast(Path, args.cwd).resolve()

    settings = load_settings()
    if args.order:
        settings.command_order = CommandOrder(args.order)
    if args.git:
        settings.changed_files = ChangedFilesSource.GIT

    hook_input = HookInput(
        hook_event_name="Stop",
        cwd=str(cwd),
        session_id="cli",
        transcript_path=str(transcript),
    )
    decision = run_stop_checks(hook_input, settings)
    if decision is None:
        print("All checks passed")
        return
    print(decision.reason)
    sys.exit(1)


def _cmd_presets(args: argparse.Namespace) -> None:
    settings = load_settings()
    chain = PresetChain(user_dir=settings.presets_dir)
    name = cast(str | None, args.name)

    try:
        if name is None:
            for preset in chain.available():
                checks = ", ".join(c.name for c in preset.checks)
                print(f"{preset.name} ({preset.source}): {checks}")
            return

        preset = chain.lookup(name)
    except RufioError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if preset is None:
        print(f"Error: unknown preset: {name}", file=sys.stderr)
        sys.exit(1)
    print(f"{preset.name} ({preset.source})")
    for check in preset.checks:
        then = check.then
        if isinstance(then, EnsureCommands):
            action = "run " + ", ".join(then.ensure_commands)
        else:
            action = "change " + ", ".join(then.ensure_changed)
        guard = f" if {check.when.path_exists} exists" if check.when.path_exists else ""
        print(f"  {check.name}: {check.when.paths_changed}{guard} -> {action}")


def _cmd_validate(args: argparse.Namespace) -> None:
    path = cast(Path, args.path)
    if path.is_dir():
        path = path / CONFIG_FILENAME
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)

    settings = load_settings()
    try:
        document = load_document(path)
        checks = resolve(document, PresetChain(user_dir=settings.presets_dir))
    except RufioError as e:
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"{path}: {len(checks)} checks")
    for check in checks:
        print(f"  {check.name}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="rufio",
        description="End-of-turn quality gates for Claude Code sessions",
    )
    _ = parser.add_argument("-V", "--version", action="version", version=f"rufio {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    # hook subcommand
    _ = subparsers.add_parser("hook", help="Run as a Claude Code hook (reads JSON on stdin)")

    # check subcommand
    check_parser = subparsers.add_parser("check", help="Evaluate checks against a transcript")
    _ = check_parser.add_argument("transcript", type=Path, help="Path to .jsonl transcript file")
    _ = check_parser.add_argument(
        "--cwd", type=Path, default=Path.cwd(), help="Session working directory (default: .)"
    )
    _ = check_parser.add_argument(
        "--order",
        choices=[o.value for o in CommandOrder],
        default=None,
        help="Required command ordering policy (default: from settings)",
    )
    _ = check_parser.add_argument(
        "--git",
        action="store_true",
        help="Also treat files reported by `git status` as changed",
    )

    # presets subcommand
    presets_parser = subparsers.add_parser("presets", help="List presets or show one preset")
    _ = presets_parser.add_argument("name", nargs="?", default=None, help="Preset name")

    # validate subcommand
    validate_parser = subparsers.add_parser("validate", help="Validate a rufio-hooks.yaml")
    _ = validate_parser.add_argument(
        "path", nargs="?", type=Path, default=Path.cwd(), help="Config file or its directory"
    )

    args = parser.parse_args()
    dispatch = {
        "hook": _cmd_hook,
        "check": _cmd_check,
        "presets": _cmd_presets,
        "validate": _cmd_validate,
    }
    command = cast(str | None, args.command)
    handler = dispatch.get(command) if command is not None else None
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
