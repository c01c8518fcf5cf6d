"""
Analyzer package for Diff Coverage.

This package contains the correlator that aligns diff lines with
coverage profile blocks.
"""

from diff_coverage.analyzer.correlator import CoverageCorrelator, get_coverage

__all__ = [
    "CoverageCorrelator",
    "get_coverage",
]
