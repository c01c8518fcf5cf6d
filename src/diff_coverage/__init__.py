"""
Diff Coverage

A CLI tool that reports the test coverage of only the lines touched by a
pending change. It streams `git diff` output into a structured model and
correlates each changed line with a per-line execution-count profile.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("diff-coverage")
except PackageNotFoundError:
    __version__ = "0.1.0"

# Public API exports
__all__ = [
    "__version__",
]
