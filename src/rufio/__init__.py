"""rufio: end-of-turn quality gates for Claude Code sessions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rufio")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
