"""
Version-control package for Diff Coverage.

This package opens the git repository, fetches the base branch and
produces the diff to report on.
"""

from diff_coverage.vcs.repository import Repository, get_diff, open_repository

__all__ = [
    "Repository",
    "get_diff",
    "open_repository",
]
