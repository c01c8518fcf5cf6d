"""
Diff-to-coverage correlation.

This module aligns every line a diff touches with an execution-count
profile and aggregates the covered fraction of those lines:

1. An empty diff is fully covered (100%).
2. Files that are not source files are skipped entirely.
3. Removed lines are skipped; added and context lines count toward the
   total, and are covered when the block starting on that line ran.
4. A non-empty diff without any countable line is reported as 0%.
"""

from pathlib import Path
from typing import Iterable, Optional, Sequence

from loguru import logger

from diff_coverage.models.coverage import CorrelationResult, CoverageProfile, FileCoverage
from diff_coverage.models.diff import DiffFile
from diff_coverage.parser.profile_parser import ProfileParser

DEFAULT_SOURCE_SUFFIXES = (".go",)


class CoverageCorrelator:
    """
    Compute diff-coverage from parsed diff files and a coverage profile.

    The correlator holds no state between calls; the same inputs always
    give the same result.
    """

    def __init__(self, source_suffixes: Optional[Iterable[str]] = None) -> None:
        """
        Initialize the correlator.

        Args:
            source_suffixes: File suffixes that count toward coverage
                (default: ``.go``).
        """
        if source_suffixes is None:
            source_suffixes = DEFAULT_SOURCE_SUFFIXES
        self.source_suffixes = tuple(source_suffixes)

    def is_eligible(self, path: str) -> bool:
        """Check if a file counts toward diff coverage."""
        return path.endswith(self.source_suffixes)

    def _correlate_file(self, diff_file: DiffFile, profile: CoverageProfile) -> FileCoverage:
        total = 0
        covered = 0
        uncovered: list[int] = []

        for line in diff_file.lines:
            if not line.is_countable:
                continue
            total += 1
            count = profile.count_at(diff_file.name, line.new_line)
            if count is not None and count > 0:
                covered += 1
            else:
                uncovered.append(line.new_line)

        return FileCoverage(
            path=diff_file.name,
            total_lines=total,
            covered_lines=covered,
            uncovered_lines=uncovered,
        )

    def correlate(
        self,
        diff_files: Sequence[DiffFile],
        profile: CoverageProfile,
    ) -> CorrelationResult:
        """
        Correlate diff files with a coverage profile.

        Args:
            diff_files: Files of the parsed diff, in diff order.
            profile: Parsed coverage profile.

        Returns:
            CorrelationResult with the aggregate percentage and a per-file
            breakdown of eligible files.
        """
        if not diff_files:
            return CorrelationResult(percentage=100.0)

        total = 0
        covered = 0
        files: list[FileCoverage] = []
        for diff_file in diff_files:
            if not self.is_eligible(diff_file.name):
                logger.debug("Skipping non-source file {}", diff_file.name)
                continue
            if not profile.has_file(diff_file.name):
                logger.debug("No coverage data for {}", diff_file.name)
            file_coverage = self._correlate_file(diff_file, profile)
            files.append(file_coverage)
            total += file_coverage.total_lines
            covered += file_coverage.covered_lines

        if total == 0:
            return CorrelationResult(percentage=0.0, files=files)

        return CorrelationResult(
            total_lines=total,
            covered_lines=covered,
            percentage=covered / total * 100,
            files=files,
        )

    def compute(
        self,
        diff_files: Sequence[DiffFile],
        profile_path: Path,
    ) -> CorrelationResult:
        """
        Parse a profile file and correlate it with diff files.

        The profile is not read when the diff is empty.

        Args:
            diff_files: Files of the parsed diff.
            profile_path: Path to the execution-count profile.

        Returns:
            CorrelationResult for the change.

        Raises:
            ProfileParseError: If the profile cannot be read or parsed.
        """
        if not diff_files:
            return CorrelationResult(percentage=100.0)

        profile = ProfileParser.parse_file(profile_path)
        result = self.correlate(diff_files, profile)
        logger.info(
            "Diff coverage: {}/{} lines ({:.2f}%)",
            result.covered_lines,
            result.total_lines,
            result.percentage,
        )
        return result


def get_coverage(
    diff_files: Sequence[DiffFile],
    profile_path: Path,
    source_suffixes: Optional[Iterable[str]] = None,
) -> float:
    """
    Get the diff-coverage percentage of a change.

    Args:
        diff_files: Files of the parsed diff.
        profile_path: Path to the execution-count profile.
        source_suffixes: File suffixes that count toward coverage.

    Returns:
        Percentage between 0.0 and 100.0.
    """
    return CoverageCorrelator(source_suffixes).compute(diff_files, profile_path).percentage
