"""
Markdown output formatter.
"""

from diff_coverage.models.coverage import CorrelationResult
from diff_coverage.output.formatters import (
    BaseFormatter,
    format_line_ranges,
    register_formatter,
)


@register_formatter("markdown")
class MarkdownFormatter(BaseFormatter):
    """
    Format output as Markdown, suitable for a pull request comment.
    """

    def __init__(self, **_: object) -> None:
        pass

    def format(self, result: CorrelationResult) -> str:
        """Format a correlation result as Markdown."""
        lines = []

        lines.append("## Diff Coverage")
        lines.append("")
        lines.append(f"**{result.percentage:.2f}%** of changed lines are covered")
        lines.append(f"({result.covered_lines}/{result.total_lines} lines).")
        lines.append("")

        if result.files:
            lines.append("| File | Covered | Lines | Coverage | Uncovered lines |")
            lines.append("|------|---------|-------|----------|-----------------|")
            for file in result.files:
                lines.append(
                    f"| `{file.path}` | {file.covered_lines} | {file.total_lines} "
                    f"| {file.percentage:.2f}% | {format_line_ranges(file.uncovered_lines)} |"
                )
            lines.append("")

        return "\n".join(lines)
