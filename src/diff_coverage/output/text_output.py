"""
Human-readable text output formatter.
"""

from io import StringIO

from rich.console import Console
from rich.table import Table

from diff_coverage.models.coverage import CorrelationResult
from diff_coverage.output.formatters import (
    BaseFormatter,
    format_line_ranges,
    register_formatter,
)


@register_formatter("text")
class TextFormatter(BaseFormatter):
    """
    Format output as text using Rich.

    Without details only the percentage is printed, which is what CI
    scripts parse.
    """

    def __init__(self, colorize: bool = True, details: bool = False, **_: object) -> None:
        """
        Initialize the text formatter.

        Args:
            colorize: Whether to use colors in output.
            details: Include the per-file table.
        """
        self.colorize = colorize
        self.details = details

    def _styled_percentage(self, percentage: float) -> str:
        """Render a percentage, colored by how well it is covered."""
        text = f"{percentage:.2f}%"
        if not self.colorize:
            return text
        if percentage >= 80.0:
            style = "green"
        elif percentage >= 50.0:
            style = "yellow"
        else:
            style = "red"
        return f"[{style}]{text}[/{style}]"

    def format(self, result: CorrelationResult) -> str:
        """Format a correlation result as text."""
        if not self.details:
            return f"{result.percentage}\n"

        output = StringIO()
        console = Console(file=output, force_terminal=self.colorize, width=120)

        console.print(
            f"[bold]Diff coverage:[/bold] {self._styled_percentage(result.percentage)} "
            f"({result.covered_lines}/{result.total_lines} lines)"
        )

        if result.files:
            table = Table(show_header=True, header_style="bold")
            table.add_column("File")
            table.add_column("Covered", justify="right")
            table.add_column("Lines", justify="right")
            table.add_column("Coverage", justify="right")
            table.add_column("Uncovered lines")
            for file in result.files:
                table.add_row(
                    file.path,
                    str(file.covered_lines),
                    str(file.total_lines),
                    self._styled_percentage(file.percentage),
                    format_line_ranges(file.uncovered_lines),
                )
            console.print(table)

        return output.getvalue()
