"""
Executor package for Diff Coverage.

This package runs the diff-generating subprocess and parses its output
concurrently.
"""

from diff_coverage.executor.diff_runner import SubprocessError, run_diff

__all__ = [
    "SubprocessError",
    "run_diff",
]
