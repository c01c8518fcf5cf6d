"""
Parser package for Diff Coverage.

This package contains modules for:
- Streaming unified diff parsing (patterns from unidiff)
- Execution-count profile parsing
"""

from diff_coverage.parser.diff_parser import DiffParseError, DiffParser
from diff_coverage.parser.profile_parser import (
    ProfileParseError,
    ProfileParser,
    normalize_profile_path,
)

__all__ = [
    "DiffParseError",
    "DiffParser",
    "ProfileParseError",
    "ProfileParser",
    "normalize_profile_path",
]
