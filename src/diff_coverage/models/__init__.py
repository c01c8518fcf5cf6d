"""
Data models for Diff Coverage.

This package contains Pydantic models for representing parsed diffs,
coverage profiles, and correlation results.
"""

from diff_coverage.models.coverage import (
    CorrelationResult,
    CoverageBlock,
    CoverageMode,
    CoverageProfile,
    FileCoverage,
)
from diff_coverage.models.diff import (
    Diff,
    DiffFile,
    DiffFileType,
    DiffLine,
    DiffLineType,
    DiffSection,
)

__all__ = [
    # Diff models
    "Diff",
    "DiffFile",
    "DiffFileType",
    "DiffLine",
    "DiffLineType",
    "DiffSection",
    # Coverage models
    "CorrelationResult",
    "CoverageBlock",
    "CoverageMode",
    "CoverageProfile",
    "FileCoverage",
]
