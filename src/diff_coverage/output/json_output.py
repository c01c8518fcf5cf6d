"""
JSON output formatter.
"""

import json
from typing import Any

from diff_coverage.models.coverage import CorrelationResult, FileCoverage
from diff_coverage.output.formatters import BaseFormatter, register_formatter


@register_formatter("json")
class JsonFormatter(BaseFormatter):
    """
    Format output as JSON.
    """

    def __init__(self, indent: int = 2, **_: object) -> None:
        """
        Initialize the JSON formatter.

        Args:
            indent: JSON indentation level.
        """
        self.indent = indent

    def _file_to_dict(self, file: FileCoverage) -> dict[str, Any]:
        """Convert a file breakdown to a dictionary."""
        return {
            "path": file.path,
            "total_lines": file.total_lines,
            "covered_lines": file.covered_lines,
            "percentage": round(file.percentage, 2),
            "uncovered_lines": file.uncovered_lines,
        }

    def format(self, result: CorrelationResult) -> str:
        """Format a correlation result as JSON."""
        data = {
            "percentage": result.percentage,
            "total_lines": result.total_lines,
            "covered_lines": result.covered_lines,
            "files": [self._file_to_dict(f) for f in result.files],
        }
        return json.dumps(data, indent=self.indent) + "\n"
