"""
Diff data models.

Models representing a parsed unified diff: files, sections (hunks) and
the individual lines inside them.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DiffLineType(str, Enum):
    """Type of a single line inside a diff section."""

    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class DiffFileType(str, Enum):
    """Type of file change in a diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


class DiffLine(BaseModel):
    """One line of diff output."""

    type: DiffLineType = Field(description="Whether the line was added, removed or is context")
    old_line: Optional[int] = Field(
        default=None,
        description="Line number on the old side (removed and context lines)",
    )
    new_line: Optional[int] = Field(
        default=None,
        description="Line number on the new side (added and context lines)",
    )
    text: str = Field(default="", description="Line content without the diff marker")

    class Config:
        frozen = True

    @property
    def is_countable(self) -> bool:
        """Whether the line still exists in the target revision."""
        return self.type != DiffLineType.REMOVED


class DiffSection(BaseModel):
    """Represents a section (hunk) of changes in a file."""

    old_start: int = Field(description="Starting line in the old file")
    old_count: int = Field(description="Number of lines in the old file")
    new_start: int = Field(description="Starting line in the new file")
    new_count: int = Field(description="Number of lines in the new file")
    header: str = Field(default="", description="Function context after the hunk range")
    lines: list[DiffLine] = Field(
        default_factory=list,
        description="Lines of the section in input order",
    )

    class Config:
        frozen = True

    @property
    def added_lines(self) -> list[int]:
        """New-side line numbers of added lines."""
        return [line.new_line for line in self.lines if line.type == DiffLineType.ADDED]

    @property
    def removed_lines(self) -> list[int]:
        """Old-side line numbers of removed lines."""
        return [line.old_line for line in self.lines if line.type == DiffLineType.REMOVED]


class DiffFile(BaseModel):
    """Represents a single file in a diff."""

    name: str = Field(description="Path of the file in the target revision")
    old_name: Optional[str] = Field(
        default=None,
        description="Path of the file in the base revision",
    )
    type: DiffFileType = Field(default=DiffFileType.MODIFIED, description="Type of change")
    old_index: Optional[str] = Field(default=None, description="Blob id on the old side")
    new_index: Optional[str] = Field(default=None, description="Blob id on the new side")
    mode: Optional[str] = Field(default=None, description="File mode from the diff header")
    is_binary: bool = Field(default=False, description="Binary content, no sections")
    is_submodule: bool = Field(default=False, description="Submodule pointer change")
    is_incomplete: bool = Field(
        default=False,
        description="A line or character cap dropped part of this file",
    )
    num_additions: int = Field(default=0, description="Total lines added")
    num_deletions: int = Field(default=0, description="Total lines removed")
    sections: list[DiffSection] = Field(
        default_factory=list,
        description="Sections in this file",
    )

    class Config:
        frozen = True

    @property
    def is_rename(self) -> bool:
        """Check if the file was renamed."""
        return self.type == DiffFileType.RENAMED

    @property
    def lines(self) -> list[DiffLine]:
        """All lines of all sections, in input order."""
        return [line for section in self.sections for line in section.lines]


class Diff(BaseModel):
    """A full parsed diff."""

    files: list[DiffFile] = Field(default_factory=list, description="Files in input order")
    total_additions: int = Field(default=0, description="Lines added across all files")
    total_deletions: int = Field(default=0, description="Lines removed across all files")
    is_incomplete: bool = Field(
        default=False,
        description="The file cap was reached and the remainder was discarded",
    )

    class Config:
        frozen = True

    @property
    def num_files(self) -> int:
        """Number of files kept in the diff."""
        return len(self.files)
