"""
Streaming diff parser.

This module reads unified diff output line by line and builds the Diff
model incrementally. Memory is bounded by the caps in DiffConfig rather
than by the size of the input: files past the file cap are drained and
discarded, lines past the per-file cap are counted but not kept, and
long lines are truncated. Header and hunk patterns come from unidiff.
"""

import io
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Optional, Union

from loguru import logger
from unidiff.constants import (
    DEV_NULL,
    LINE_TYPE_ADDED,
    LINE_TYPE_CONTEXT,
    LINE_TYPE_NO_NEWLINE,
    LINE_TYPE_REMOVED,
    RE_HUNK_HEADER,
    RE_SOURCE_FILENAME,
    RE_TARGET_FILENAME,
)

from diff_coverage.config import DiffConfig
from diff_coverage.models.diff import (
    Diff,
    DiffFile,
    DiffFileType,
    DiffLine,
    DiffLineType,
    DiffSection,
)

GIT_HEADER_PREFIX = "diff --git "
SUBMODULE_MODE = "160000"

RE_GIT_HEADER_SPLIT = re.compile(r'^(?P<old>"?a/.+?"?) (?P<new>"?b/.+"?)$')
RE_NEW_FILE_MODE = re.compile(r"^new file mode (?P<mode>\d+)$")
RE_DELETED_FILE_MODE = re.compile(r"^deleted file mode (?P<mode>\d+)$")
RE_NEW_MODE = re.compile(r"^new mode (?P<mode>\d+)$")
RE_RENAME_FROM = re.compile(r"^rename from (?P<path>.+)$")
RE_RENAME_TO = re.compile(r"^rename to (?P<path>.+)$")
RE_COPY_FROM = re.compile(r"^copy from (?P<path>.+)$")
RE_COPY_TO = re.compile(r"^copy to (?P<path>.+)$")
RE_INDEX = re.compile(
    r"^index (?P<old>[0-9a-fA-F]+)\.\.(?P<new>[0-9a-fA-F]+)(?: (?P<mode>\d+))?$"
)
RE_BINARY_FILES = re.compile(r"^Binary files .+ differ$")


class DiffParseError(Exception):
    """Error during diff parsing."""
    pass


def _unquote(path: str) -> str:
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return path


def _strip_prefix(path: str, prefix: str) -> Optional[str]:
    """Drop a/ or b/ from a header path; /dev/null becomes None."""
    path = _unquote(path.strip())
    if path == DEV_NULL:
        return None
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def split_git_header(line: str) -> tuple[str, str]:
    """
    Split a `diff --git a/<old> b/<new>` header into its two paths.

    Paths may contain spaces. When both halves name the same file the
    header is split in the middle; otherwise at the first ` b/`.

    Raises:
        DiffParseError: If the header cannot be split.
    """
    rest = line[len(GIT_HEADER_PREFIX):]
    if len(rest) % 2 == 1:
        half = len(rest) // 2
        old, new = rest[:half], rest[half + 1:]
        if rest[half] == " ":
            old_path = _strip_prefix(old, "a/")
            new_path = _strip_prefix(new, "b/")
            if old_path is not None and old_path == new_path:
                return old_path, new_path

    match = RE_GIT_HEADER_SPLIT.match(rest)
    if not match:
        raise DiffParseError(f"Unparsable file header: {line!r}")
    return _strip_prefix(match.group("old"), "a/"), _strip_prefix(match.group("new"), "b/")


@dataclass
class _SectionBuilder:
    """Mutable state for the hunk currently being read."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header: str
    old_line: int = 0
    new_line: int = 0
    old_remaining: int = 0
    new_remaining: int = 0
    lines: list[DiffLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.old_line = self.old_start
        self.new_line = self.new_start
        self.old_remaining = self.old_count
        self.new_remaining = self.new_count

    @property
    def complete(self) -> bool:
        return self.old_remaining == 0 and self.new_remaining == 0

    def build(self) -> DiffSection:
        return DiffSection(
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            header=self.header,
            lines=self.lines,
        )


@dataclass
class _FileBuilder:
    """Mutable state for the file currently being read."""

    old_path: Optional[str] = None
    new_path: Optional[str] = None
    type: DiffFileType = DiffFileType.MODIFIED
    old_index: Optional[str] = None
    new_index: Optional[str] = None
    mode: Optional[str] = None
    is_binary: bool = False
    is_submodule: bool = False
    is_incomplete: bool = False
    has_git_header: bool = False
    has_source_header: bool = False
    num_additions: int = 0
    num_deletions: int = 0
    retained_lines: int = 0
    sections: list[DiffSection] = field(default_factory=list)

    @property
    def name(self) -> str:
        if self.type == DiffFileType.DELETED or self.new_path is None:
            return self.old_path or ""
        return self.new_path

    def build(self) -> DiffFile:
        return DiffFile(
            name=self.name,
            old_name=self.old_path,
            type=self.type,
            old_index=self.old_index,
            new_index=self.new_index,
            mode=self.mode,
            is_binary=self.is_binary,
            is_submodule=self.is_submodule,
            is_incomplete=self.is_incomplete,
            num_additions=self.num_additions,
            num_deletions=self.num_deletions,
            sections=self.sections,
        )


class _StreamState:
    """
    Line-driven state machine behind DiffParser.parse_stream.

    Inside a hunk every line is body until the declared old/new counts
    are used up; outside a hunk lines are file or hunk headers.
    """

    def __init__(self, limits: DiffConfig) -> None:
        self.limits = limits
        self.files: list[DiffFile] = []
        self.total_additions = 0
        self.total_deletions = 0
        self.is_incomplete = False
        self.draining = False
        self._file: Optional[_FileBuilder] = None
        self._section: Optional[_SectionBuilder] = None

    def feed(self, line: str) -> None:
        if self._section is not None:
            self._feed_body(line)
            return

        if line.startswith(LINE_TYPE_NO_NEWLINE):
            if self._file is None:
                raise DiffParseError(f"Unexpected line before file header: {line!r}")
            return

        if line.startswith(GIT_HEADER_PREFIX):
            old_path, new_path = split_git_header(line)
            if self._start_file():
                self._file.old_path = old_path
                self._file.new_path = new_path
                self._file.has_git_header = True
            return

        if line.startswith("@@"):
            self._start_section(line)
            return

        if self._feed_file_header(line):
            return

        if not line.strip():
            return

        if self._file is None:
            raise DiffParseError(f"Unexpected line before file header: {line!r}")
        if self._file.sections:
            raise DiffParseError(
                f"Line outside of any hunk in {self._file.name}: {line!r}"
            )
        # Unknown extended header lines (similarity index, old mode, ...).
        logger.debug("Ignoring diff header line: {!r}", line)

    def _feed_file_header(self, line: str) -> bool:
        source = RE_SOURCE_FILENAME.match(line)
        if source:
            current = self._file
            if current is None or current.sections or current.has_source_header:
                if not self._start_file():
                    return True
            self._file.has_source_header = True
            self._file.old_path = _strip_prefix(source.group("filename"), "a/")
            if self._file.old_path is None:
                self._file.type = DiffFileType.ADDED
            return True

        target = RE_TARGET_FILENAME.match(line)
        if target:
            if self._file is None or not self._file.has_source_header:
                raise DiffParseError(f"Target file header without source header: {line!r}")
            self._file.new_path = _strip_prefix(target.group("filename"), "b/")
            if self._file.new_path is None:
                self._file.type = DiffFileType.DELETED
            return True

        current = self._file
        if current is None or not current.has_git_header or current.sections:
            return False

        match = RE_NEW_FILE_MODE.match(line)
        if match:
            current.type = DiffFileType.ADDED
            current.mode = match.group("mode")
            current.old_path = None
            return True
        match = RE_DELETED_FILE_MODE.match(line)
        if match:
            current.type = DiffFileType.DELETED
            current.mode = match.group("mode")
            return True
        match = RE_NEW_MODE.match(line)
        if match:
            current.mode = match.group("mode")
            return True
        match = RE_RENAME_FROM.match(line) or RE_COPY_FROM.match(line)
        if match:
            current.type = (
                DiffFileType.RENAMED if line.startswith("rename") else DiffFileType.COPIED
            )
            current.old_path = _unquote(match.group("path"))
            return True
        match = RE_RENAME_TO.match(line) or RE_COPY_TO.match(line)
        if match:
            current.new_path = _unquote(match.group("path"))
            return True
        match = RE_INDEX.match(line)
        if match:
            current.old_index = match.group("old")
            current.new_index = match.group("new")
            if match.group("mode"):
                current.mode = match.group("mode")
            current.is_submodule = current.mode == SUBMODULE_MODE
            return True
        if RE_BINARY_FILES.match(line):
            current.is_binary = True
            return True
        return False

    def _start_file(self) -> bool:
        """Close the current file and open a new one; False once the file cap is hit."""
        self._close_file()
        max_files = self.limits.max_files
        if max_files and len(self.files) >= max_files:
            logger.warning(
                "Diff exceeds {} files, discarding the remainder", max_files
            )
            self.is_incomplete = True
            self.draining = True
            return False
        self._file = _FileBuilder()
        return True

    def _start_section(self, line: str) -> None:
        if self._file is None:
            raise DiffParseError(f"Hunk header before file header: {line!r}")
        match = RE_HUNK_HEADER.match(line)
        if not match:
            raise DiffParseError(f"Unparsable hunk header: {line!r}")

        old_start, old_count, new_start, new_count, header = match.groups()
        self._section = _SectionBuilder(
            old_start=int(old_start),
            old_count=int(old_count) if old_count is not None else 1,
            new_start=int(new_start),
            new_count=int(new_count) if new_count is not None else 1,
            header=(header or "").strip(),
        )
        if self._section.complete:
            self._close_section()

    def _feed_body(self, line: str) -> None:
        section = self._section
        file = self._file
        if line.startswith(LINE_TYPE_NO_NEWLINE):
            return

        marker, text = line[:1], line[1:]
        old_line: Optional[int] = None
        new_line: Optional[int] = None
        if marker == LINE_TYPE_ADDED:
            if section.new_remaining == 0:
                raise DiffParseError(f"Added line exceeds hunk length in {file.name}: {line!r}")
            line_type = DiffLineType.ADDED
            new_line = section.new_line
            section.new_line += 1
            section.new_remaining -= 1
            file.num_additions += 1
        elif marker == LINE_TYPE_REMOVED:
            if section.old_remaining == 0:
                raise DiffParseError(f"Removed line exceeds hunk length in {file.name}: {line!r}")
            line_type = DiffLineType.REMOVED
            old_line = section.old_line
            section.old_line += 1
            section.old_remaining -= 1
            file.num_deletions += 1
        elif marker == LINE_TYPE_CONTEXT or line == "":
            if section.old_remaining == 0 or section.new_remaining == 0:
                raise DiffParseError(f"Context line exceeds hunk length in {file.name}: {line!r}")
            line_type = DiffLineType.CONTEXT
            old_line = section.old_line
            new_line = section.new_line
            section.old_line += 1
            section.new_line += 1
            section.old_remaining -= 1
            section.new_remaining -= 1
        else:
            raise DiffParseError(f"Malformed hunk line in {file.name}: {line!r}")

        self._retain(line_type, old_line, new_line, text)
        if section.complete:
            self._close_section()

    def _retain(
        self,
        line_type: DiffLineType,
        old_line: Optional[int],
        new_line: Optional[int],
        text: str,
    ) -> None:
        file = self._file
        max_lines = self.limits.max_file_lines
        if max_lines and file.retained_lines >= max_lines:
            if not file.is_incomplete:
                logger.debug("Dropping lines of {} past {} lines", file.name, max_lines)
            file.is_incomplete = True
            return

        max_chars = self.limits.max_line_chars
        if max_chars and len(text) > max_chars:
            text = text[:max_chars]
            file.is_incomplete = True

        self._section.lines.append(
            DiffLine(type=line_type, old_line=old_line, new_line=new_line, text=text)
        )
        file.retained_lines += 1

    def _close_section(self) -> None:
        section = self._section
        if section is None:
            return
        if not section.complete:
            raise DiffParseError(
                f"Truncated hunk in {self._file.name}: expected "
                f"{section.old_remaining} more old and {section.new_remaining} more new lines"
            )
        self._file.sections.append(section.build())
        self._section = None

    def _close_file(self) -> None:
        if self._file is None:
            return
        self._close_section()
        diff_file = self._file.build()
        self.files.append(diff_file)
        self.total_additions += diff_file.num_additions
        self.total_deletions += diff_file.num_deletions
        self._file = None

    def finish(self) -> Diff:
        self._close_file()
        return Diff(
            files=self.files,
            total_additions=self.total_additions,
            total_deletions=self.total_deletions,
            is_incomplete=self.is_incomplete,
        )


class DiffParser:
    """
    Parse unified diff output into a Diff.

    Supports parsing from streams (e.g. a subprocess pipe), files, or strings.
    """

    @staticmethod
    def _decode(raw: Union[bytes, str]) -> str:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if raw.endswith("\n"):
            raw = raw[:-1]
        return raw

    @staticmethod
    def _drain(stream: IO) -> None:
        """Consume what is left of a stream after a parse error."""
        try:
            for _ in stream:
                pass
        except OSError as e:
            logger.debug("Stopped draining diff stream: {}", e)

    @classmethod
    def parse_stream(
        cls,
        stream: IO,
        limits: Optional[DiffConfig] = None,
    ) -> Diff:
        """
        Parse a diff from a binary or text stream.

        The stream is always read to the end, even after the file cap is
        reached, so a writer on the other side of a pipe never blocks.

        Args:
            stream: Readable stream yielding diff lines.
            limits: Caps on files, lines per file and characters per line.

        Returns:
            The parsed Diff. Empty input yields an empty Diff.

        Raises:
            DiffParseError: If the diff is malformed or the stream fails.
        """
        state = _StreamState(limits or DiffConfig())
        try:
            for raw in stream:
                if state.draining:
                    continue
                state.feed(cls._decode(raw))
        except DiffParseError:
            cls._drain(stream)
            raise
        except OSError as e:
            raise DiffParseError(f"Failed to read diff stream: {e}") from e
        except Exception:
            # A pipe writer blocks until its output is read.
            cls._drain(stream)
            raise

        diff = state.finish()
        logger.debug(
            "Parsed diff: {} files, +{} -{}{}",
            diff.num_files,
            diff.total_additions,
            diff.total_deletions,
            " (incomplete)" if diff.is_incomplete else "",
        )
        return diff

    @classmethod
    def parse_string(cls, diff_content: str, limits: Optional[DiffConfig] = None) -> Diff:
        """
        Parse diff content from a string.

        Args:
            diff_content: The diff content as a string.
            limits: Caps on files, lines per file and characters per line.

        Returns:
            The parsed Diff.

        Raises:
            DiffParseError: If parsing fails.
        """
        return cls.parse_stream(io.StringIO(diff_content), limits)

    @classmethod
    def parse_file(cls, diff_path: Path, limits: Optional[DiffConfig] = None) -> Diff:
        """
        Parse a diff file.

        Args:
            diff_path: Path to the diff file.
            limits: Caps on files, lines per file and characters per line.

        Returns:
            The parsed Diff.

        Raises:
            DiffParseError: If the file cannot be read or parsing fails.
        """
        try:
            with open(diff_path, "rb") as f:
                return cls.parse_stream(f, limits)
        except OSError as e:
            raise DiffParseError(f"Failed to read diff file {diff_path}: {e}") from e
