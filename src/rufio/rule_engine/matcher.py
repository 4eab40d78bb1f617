"""Glob matching for `when.paths_changed` patterns.

Only two wildcards are understood:

- ``*`` matches any run of characters inside a single path segment.
- ``**`` used as a whole segment matches any number of segments, including
  none, so ``**/*.rs`` matches both ``main.rs`` and ``src/a/b.rs``.

Everything else is literal. Paths are compared case-sensitively after being
made relative to the directory holding the config and normalised to forward
slashes.
"""

from __future__ import annotations

import functools
import logging
import os
import re
from pathlib import Path, PurePath

from rufio.errors import GlobPatternError

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a compiled regex. Raises GlobPatternError when malformed."""
    if not pattern:
        raise GlobPatternError("pattern is empty")
    if pattern.startswith("/"):
        raise GlobPatternError(f"pattern '{pattern}' must be relative to the config directory")
    if "***" in pattern:
        raise GlobPatternError(f"pattern '{pattern}' has more than two consecutive '*'")

    if pattern.startswith("./"):
        pattern = pattern[2:]

    segments = pattern.split("/")
    parts: list[str] = []
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        if segment == "**":
            parts.append(".*" if last else "(?:.*/)?")
            continue
        if "**" in segment:
            raise GlobPatternError(
                f"pattern '{pattern}': '**' must be a whole path segment, got '{segment}'"
            )
        regex = "[^/]*".join(re.escape(chunk) for chunk in segment.split("*"))
        parts.append(regex if last else regex + "/")
    return re.compile("".join(parts))


def validate_glob(pattern: str) -> str:
    """Compile once so malformed patterns fail while the config is parsed."""
    compile_glob(pattern)
    return pattern


def relative_posix(path: str | PurePath, base_dir: str | PurePath) -> str | None:
    """Return ``path`` relative to ``base_dir`` with '/' separators, or None if outside it."""
    path_str = os.path.normpath(os.fspath(path))
    base_str = os.path.normpath(os.fspath(base_dir))

    if not os.path.isabs(path_str):
        rel = path_str
    else:
        if not os.path.isabs(base_str):
            base_str = os.path.abspath(base_str)
        try:
            rel = os.path.relpath(path_str, base_str)
        except ValueError:
            # Different drives on Windows
            return None

    rel = rel.replace(os.sep, "/")
    if rel == ".." or rel.startswith("../"):
        return None
    return rel


def matches(pattern: str, path: str | Path, base_dir: str | Path) -> bool:
    """True when ``path``, taken relative to ``base_dir``, matches ``pattern``."""
    rel = relative_posix(path, base_dir)
    if rel is None or rel == ".":
        return False
    try:
        regex = compile_glob(pattern)
    except GlobPatternError as e:
        logger.warning("Ignoring unusable pattern %r: %s", pattern, e)
        return False
    return regex.fullmatch(rel) is not None
