"""Rule engine: config model, preset resolution, check evaluation and verdicts."""

from rufio.rule_engine.config import CONFIG_FILENAME, load_document, parse_document, resolve
from rufio.rule_engine.evaluator import evaluate_check, evaluate_group, evaluate_groups
from rufio.rule_engine.matcher import compile_glob, matches
from rufio.rule_engine.models import (
    Check,
    CheckResult,
    CommandOrder,
    ConfigDocument,
    EnsureChanged,
    EnsureCommands,
    HookDecision,
    Preset,
    Verdict,
    When,
)
from rufio.rule_engine.presets import BUILTIN_PRESETS, PresetChain
from rufio.rule_engine.resolver import ConfigGroup, ConfigResolver, group_by_config
from rufio.rule_engine.verdict import aggregate, error_decision

__all__ = [
    "BUILTIN_PRESETS",
    "CONFIG_FILENAME",
    "Check",
    "CheckResult",
    "CommandOrder",
    "ConfigDocument",
    "ConfigGroup",
    "ConfigResolver",
    "EnsureChanged",
    "EnsureCommands",
    "HookDecision",
    "Preset",
    "PresetChain",
    "Verdict",
    "When",
    "aggregate",
    "compile_glob",
    "error_decision",
    "evaluate_check",
    "evaluate_group",
    "evaluate_groups",
    "group_by_config",
    "load_document",
    "matches",
    "parse_document",
    "resolve",
]
