"""Hook entry point for every Claude Code lifecycle event rufio is registered on."""

from __future__ import annotations

import logging
import sys

from rufio.hooks._common import parse_hook_input, read_hook_input
from rufio.hooks.stop_guard import run_stop_checks
from rufio.logging_config import configure_logging
from rufio.settings import load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Read the hook payload, run Stop checks, print a block decision if needed."""
    hook_input = parse_hook_input(read_hook_input())
    if hook_input is None:
        print("rufio: invalid or empty hook input on stdin", file=sys.stderr)
        sys.exit(1)

    settings = load_settings()
    configure_logging(hook_input.session_id, settings)
    logger.debug("event=%s tool=%s", hook_input.hook_event_name, hook_input.tool_name)

    if hook_input.hook_event_name == "Stop":
        decision = run_stop_checks(hook_input, settings)
        if decision is not None:
            print(decision.model_dump_json())
    else:
        logger.debug("No checks for event %s", hook_input.hook_event_name)

    sys.exit(0)


if __name__ == "__main__":
    main()
