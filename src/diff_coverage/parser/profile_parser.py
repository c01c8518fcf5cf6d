"""
Coverage profile parser.

Parses execution-count profiles in the block format written by
`go test -coverprofile`:

    mode: set
    example.com/org/repo/pkg/foo.go:10.2,12.16 2 1

Each block line is `file:startLine.startCol,endLine.endCol numStatements count`.
"""

import re
from pathlib import Path
from typing import Optional

from loguru import logger

from diff_coverage.models.coverage import CoverageBlock, CoverageMode, CoverageProfile

MODE_PREFIX = "mode: "
RE_BLOCK_LINE = re.compile(r"^(.+):(\d+)\.(\d+),(\d+)\.(\d+) (\d+) (\d+)$")


class ProfileParseError(Exception):
    """Error during coverage profile parsing."""
    pass


def normalize_profile_path(path: str) -> str:
    """
    Strip the module prefix from a profile path so it matches diff paths.

    Profile paths are import paths such as `github.com/org/repo/pkg/foo.go`,
    while diff paths are repository-relative (`pkg/foo.go`). The path is
    split on `/` at most three times: with four parts the first three
    segments are dropped, otherwise the first two.

    Examples:
        >>> normalize_profile_path("github.com/org/repo/pkg/foo.go")
        'pkg/foo.go'
        >>> normalize_profile_path("example.com/mod/foo.go")
        'foo.go'

    Raises:
        ProfileParseError: If the path has fewer than three segments.
    """
    parts = path.split("/", 3)
    if len(parts) == 4:
        return parts[3]
    if len(parts) == 3:
        return parts[2]
    raise ProfileParseError(f"Cannot strip module prefix from profile path: {path!r}")


class ProfileParser:
    """
    Parse execution-count profiles into a CoverageProfile.

    Supports parsing from files or strings.
    """

    @staticmethod
    def _parse_mode(line: str) -> CoverageMode:
        if not line.startswith(MODE_PREFIX):
            raise ProfileParseError(f"Bad mode line: {line!r}")
        value = line[len(MODE_PREFIX):].strip()
        try:
            return CoverageMode(value)
        except ValueError as e:
            raise ProfileParseError(f"Unknown coverage mode: {value!r}") from e

    @staticmethod
    def _parse_block(line: str, line_number: int) -> tuple[str, CoverageBlock]:
        match = RE_BLOCK_LINE.match(line)
        if not match:
            raise ProfileParseError(
                f"Line {line_number} doesn't match expected format: {line!r}"
            )
        file_name = match.group(1)
        start_line, start_col, end_line, end_col, num_statements, count = (
            int(value) for value in match.groups()[1:]
        )
        return file_name, CoverageBlock(
            start_line=start_line,
            start_col=start_col,
            end_line=end_line,
            end_col=end_col,
            num_statements=num_statements,
            count=count,
        )

    @staticmethod
    def _merge_blocks(
        file_name: str,
        blocks: list[CoverageBlock],
        mode: CoverageMode,
    ) -> list[CoverageBlock]:
        """
        Sort blocks by position and merge exact duplicates.

        The same block appears more than once when a file is compiled into
        several test binaries; `set` profiles OR the counts, the others sum.
        """
        ordered = sorted(
            blocks,
            key=lambda b: (b.start_line, b.start_col, b.end_line, b.end_col),
        )
        merged: list[CoverageBlock] = []
        for block in ordered:
            if merged:
                last = merged[-1]
                same_range = (
                    last.start_line == block.start_line
                    and last.start_col == block.start_col
                    and last.end_line == block.end_line
                    and last.end_col == block.end_col
                )
                if same_range:
                    if last.num_statements != block.num_statements:
                        raise ProfileParseError(
                            f"Inconsistent statement count in {file_name} "
                            f"at {block.start_line}.{block.start_col}: "
                            f"{last.num_statements} vs {block.num_statements}"
                        )
                    if mode == CoverageMode.SET:
                        count = last.count | block.count
                    else:
                        count = last.count + block.count
                    merged[-1] = last.model_copy(update={"count": count})
                    continue
            merged.append(block)
        return merged

    @classmethod
    def parse_string(cls, content: str) -> CoverageProfile:
        """
        Parse a profile from a string.

        Blocks that normalize to the same path are kept together; none
        overwrite each other.

        Args:
            content: Profile text.

        Returns:
            CoverageProfile keyed by normalized file path.

        Raises:
            ProfileParseError: If the mode line or any block line is malformed.
        """
        mode: Optional[CoverageMode] = None
        raw_blocks: dict[str, list[CoverageBlock]] = {}

        for line_number, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if mode is None:
                mode = cls._parse_mode(line)
                continue
            file_name, block = cls._parse_block(line, line_number)
            raw_blocks.setdefault(normalize_profile_path(file_name), []).append(block)

        files = {
            path: cls._merge_blocks(path, blocks, mode)
            for path, blocks in raw_blocks.items()
        }
        logger.debug(
            "Parsed coverage profile: mode={}, {} files",
            mode.value if mode else None,
            len(files),
        )
        return CoverageProfile(mode=mode or CoverageMode.SET, files=files)

    @classmethod
    def parse_file(cls, profile_path: Path) -> CoverageProfile:
        """
        Parse a profile file.

        Args:
            profile_path: Path to the profile.

        Returns:
            CoverageProfile keyed by normalized file path.

        Raises:
            ProfileParseError: If the file cannot be read or parsing fails.
        """
        try:
            content = Path(profile_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProfileParseError(
                f"Failed to read coverage profile {profile_path}: {e}"
            ) from e
        return cls.parse_string(content)
