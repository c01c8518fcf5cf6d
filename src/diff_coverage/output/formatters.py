"""
Base formatter and formatter registry.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from diff_coverage.models.coverage import CorrelationResult


class BaseFormatter(ABC):
    """
    Abstract base class for output formatters.

    Subclasses must implement format().
    """

    @abstractmethod
    def format(self, result: "CorrelationResult") -> str:
        """
        Format a correlation result.

        Args:
            result: The diff-coverage result to format.

        Returns:
            Formatted string representation.
        """
        pass


# Formatter registry
_FORMATTERS: dict[str, type[BaseFormatter]] = {}


def register_formatter(name: str) -> Callable[[type[BaseFormatter]], type[BaseFormatter]]:
    """
    Decorator to register a formatter.

    Args:
        name: The name to register the formatter under.

    Returns:
        Decorator function.
    """
    def decorator(cls: type[BaseFormatter]) -> type[BaseFormatter]:
        _FORMATTERS[name] = cls
        return cls
    return decorator


def get_formatter(name: str, **options: object) -> BaseFormatter:
    """
    Get a formatter instance by name.

    Args:
        name: The formatter name (e.g., "text", "json", "markdown").
        **options: Keyword arguments for the formatter's constructor.

    Returns:
        An instance of the requested formatter.

    Raises:
        ValueError: If the formatter name is not recognized.
    """
    # Import formatters to ensure they're registered
    from diff_coverage.output import (  # noqa: F401
        json_output,
        markdown_output,
        text_output,
    )

    if name not in _FORMATTERS:
        available = ", ".join(_FORMATTERS.keys())
        raise ValueError(f"Unknown formatter: {name}. Available: {available}")

    return _FORMATTERS[name](**options)


def format_line_ranges(lines: list[int]) -> str:
    """
    Collapse line numbers into comma-separated `a-b` ranges.

    Example:
        >>> format_line_ranges([3, 1, 2, 7])
        '1-3, 7'
    """
    ranges: list[str] = []
    start = previous = None
    for line in sorted(set(lines)):
        if previous is not None and line == previous + 1:
            previous = line
            continue
        if start is not None:
            ranges.append(str(start) if start == previous else f"{start}-{previous}")
        start = previous = line
    if start is not None:
        ranges.append(str(start) if start == previous else f"{start}-{previous}")
    return ", ".join(ranges)
