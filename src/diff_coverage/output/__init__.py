"""
Output package for Diff Coverage.

This package contains formatters for displaying diff-coverage results
in various formats (text, JSON, Markdown).
"""

from diff_coverage.output.formatters import (
    BaseFormatter,
    get_formatter,
)
from diff_coverage.output.json_output import JsonFormatter
from diff_coverage.output.markdown_output import MarkdownFormatter
from diff_coverage.output.text_output import TextFormatter

__all__ = [
    "BaseFormatter",
    "JsonFormatter",
    "MarkdownFormatter",
    "TextFormatter",
    "get_formatter",
]
