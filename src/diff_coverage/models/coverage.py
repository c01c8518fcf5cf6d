"""
Coverage data models.

Models representing a parsed execution-count profile and the result of
correlating it with a diff.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CoverageMode(str, Enum):
    """Counting mode declared on the first line of a profile."""

    SET = "set"
    COUNT = "count"
    ATOMIC = "atomic"


class CoverageBlock(BaseModel):
    """A range of source with an execution count."""

    start_line: int = Field(description="First line of the block (1-based, inclusive)")
    start_col: int = Field(default=0, description="Column on the first line")
    end_line: int = Field(description="Last line of the block")
    end_col: int = Field(default=0, description="Column on the last line")
    num_statements: int = Field(default=1, ge=0, description="Statements in the block")
    count: int = Field(ge=0, description="How many times the block executed")

    class Config:
        frozen = True


class CoverageProfile(BaseModel):
    """A parsed execution-count profile keyed by normalized file path."""

    mode: CoverageMode = Field(default=CoverageMode.SET, description="Counting mode")
    files: dict[str, list[CoverageBlock]] = Field(
        default_factory=dict,
        description="Normalized file path -> blocks ordered by position",
    )

    class Config:
        frozen = True

    def has_file(self, path: str) -> bool:
        """Check if the profile has any block for a file."""
        return path in self.files

    def count_at(self, path: str, line: int) -> Optional[int]:
        """
        Get the execution count of the block starting exactly at a line.

        Only exact start-line matches count; a line inside a block that
        starts earlier is not looked up by range. When several blocks
        start on the same line the highest count wins.

        Args:
            path: Normalized file path.
            line: 1-based line number on the new side of the diff.

        Returns:
            The count, or None if no block starts at that line.
        """
        counts = [
            block.count
            for block in self.files.get(path, [])
            if block.start_line == line
        ]
        if not counts:
            return None
        return max(counts)


class FileCoverage(BaseModel):
    """Diff-coverage breakdown for a single file."""

    path: str = Field(description="Path of the file in the diff")
    total_lines: int = Field(default=0, description="Countable lines touched by the diff")
    covered_lines: int = Field(default=0, description="Countable lines with count > 0")
    uncovered_lines: list[int] = Field(
        default_factory=list,
        description="New-side line numbers without coverage",
    )

    class Config:
        frozen = True

    @property
    def percentage(self) -> float:
        """Coverage of this file's countable lines."""
        if self.total_lines == 0:
            return 0.0
        return self.covered_lines / self.total_lines * 100


class CorrelationResult(BaseModel):
    """Aggregate diff-coverage of a change."""

    total_lines: int = Field(default=0, description="Countable lines across eligible files")
    covered_lines: int = Field(default=0, description="Countable lines with count > 0")
    percentage: float = Field(ge=0.0, le=100.0, description="Diff-coverage percentage")
    files: list[FileCoverage] = Field(
        default_factory=list,
        description="Per-file breakdown in diff order",
    )

    class Config:
        frozen = True

    @property
    def uncovered_count(self) -> int:
        """Number of countable lines without coverage."""
        return self.total_lines - self.covered_lines
