"""
Unit tests for the coverage correlator.
"""

from pathlib import Path

import pytest

from diff_coverage.analyzer.correlator import CoverageCorrelator, get_coverage
from diff_coverage.models.coverage import CoverageBlock, CoverageProfile
from diff_coverage.models.diff import DiffFile, DiffFileType, DiffLine, DiffLineType, DiffSection
from diff_coverage.parser.diff_parser import DiffParser
from diff_coverage.parser.profile_parser import ProfileParseError, ProfileParser


def _added_file(name: str, new_lines: list[int]) -> DiffFile:
    """Build a DiffFile whose only section adds the given lines."""
    lines = [DiffLine(type=DiffLineType.ADDED, new_line=n) for n in new_lines]
    section = DiffSection(
        old_start=max(new_lines[0] - 1, 0),
        old_count=0,
        new_start=new_lines[0],
        new_count=len(new_lines),
        lines=lines,
    )
    return DiffFile(name=name, num_additions=len(lines), sections=[section])


def _removed_file(name: str, old_lines: list[int]) -> DiffFile:
    lines = [DiffLine(type=DiffLineType.REMOVED, old_line=n) for n in old_lines]
    section = DiffSection(
        old_start=old_lines[0],
        old_count=len(old_lines),
        new_start=old_lines[0] - 1,
        new_count=0,
        lines=lines,
    )
    return DiffFile(name=name, type=DiffFileType.DELETED, sections=[section])


def _profile(blocks: dict[str, list[tuple[int, int]]]) -> CoverageProfile:
    """Build a profile from {path: [(start_line, count), ...]}."""
    return CoverageProfile(
        files={
            path: [
                CoverageBlock(start_line=start, end_line=start, count=count)
                for start, count in entries
            ]
            for path, entries in blocks.items()
        }
    )


@pytest.fixture
def correlator() -> CoverageCorrelator:
    return CoverageCorrelator()


class TestCoverageCorrelator:
    """Tests for the CoverageCorrelator class."""

    def test_empty_diff_is_fully_covered(self, correlator: CoverageCorrelator) -> None:
        profile = _profile({"pkg/foo.go": [(1, 0)]})

        result = correlator.correlate([], profile)

        assert result.percentage == 100.0
        assert result.total_lines == 0

    def test_start_line_exact_match(self, correlator: CoverageCorrelator) -> None:
        """Three added lines, one block starting on the first of them."""
        diff_files = [_added_file("pkg/foo.go", [10, 11, 12])]
        profile = _profile({"pkg/foo.go": [(10, 2)]})

        result = correlator.correlate(diff_files, profile)

        assert result.total_lines == 3
        assert result.covered_lines == 1
        assert result.percentage == pytest.approx(33.33, abs=0.01)
        assert result.files[0].uncovered_lines == [11, 12]

    def test_non_source_files_are_excluded(self, correlator: CoverageCorrelator) -> None:
        diff_files = [
            _added_file("pkg/foo.go", [1, 2]),
            _added_file("README.md", [1, 2, 3, 4, 5]),
        ]
        profile = _profile({"pkg/foo.go": [(1, 1), (2, 1)], "README.md": [(1, 0)]})

        result = correlator.correlate(diff_files, profile)

        assert result.total_lines == 2
        assert result.percentage == 100.0
        assert [f.path for f in result.files] == ["pkg/foo.go"]

    def test_no_coverage_for_touched_files(self, correlator: CoverageCorrelator) -> None:
        diff_files = [_added_file("pkg/foo.go", [1, 2])]
        profile = _profile({"pkg/other.go": [(1, 1)]})

        result = correlator.correlate(diff_files, profile)

        assert result.total_lines == 2
        assert result.percentage == 0.0

    def test_only_removed_lines(self, correlator: CoverageCorrelator) -> None:
        """Removed lines never count; a diff of only removals has nothing to measure."""
        diff_files = [_removed_file("pkg/foo.go", [3, 4])]
        profile = _profile({"pkg/foo.go": [(3, 1)]})

        result = correlator.correlate(diff_files, profile)

        assert result.total_lines == 0
        assert result.percentage == 0.0

    def test_only_ineligible_files(self, correlator: CoverageCorrelator) -> None:
        diff_files = [_added_file("docs/guide.md", [1])]

        result = correlator.correlate(diff_files, _profile({}))

        assert result.percentage == 0.0
        assert result.files == []

    def test_context_lines_count(
        self,
        correlator: CoverageCorrelator,
        simple_diff_content: str,
        profile_content: str,
    ) -> None:
        diff = DiffParser.parse_string(simple_diff_content)
        profile = ProfileParser.parse_string(profile_content)

        result = correlator.correlate(diff.files, profile)

        # Context 8, 9, 13, 14 plus added 10, 11, 12; only line 10 ran.
        assert result.total_lines == 7
        assert result.covered_lines == 1
        assert result.files[0].uncovered_lines == [8, 9, 11, 12, 13, 14]

    def test_multi_file_diff(
        self,
        correlator: CoverageCorrelator,
        multi_file_diff_content: str,
        profile_content: str,
    ) -> None:
        diff = DiffParser.parse_string(multi_file_diff_content)
        profile = ProfileParser.parse_string(profile_content)

        result = correlator.correlate(diff.files, profile)

        assert [f.path for f in result.files] == ["pkg/foo.go", "pkg/gone.go", "pkg/new name.go"]
        assert result.total_lines == 4
        assert result.covered_lines == 1
        assert result.percentage == 25.0

    def test_idempotent(self, correlator: CoverageCorrelator) -> None:
        diff_files = [_added_file("pkg/foo.go", [1, 2, 3])]
        profile = _profile({"pkg/foo.go": [(1, 1), (3, 0)]})

        first = correlator.correlate(diff_files, profile)
        second = correlator.correlate(diff_files, profile)

        assert first == second

    @pytest.mark.parametrize("count,expect_increase", [(1, True), (0, False)])
    def test_monotonic(
        self,
        correlator: CoverageCorrelator,
        count: int,
        expect_increase: bool,
    ) -> None:
        """Adding a covered line never lowers the result; an uncovered one never raises it."""
        profile = _profile({"pkg/foo.go": [(1, 1), (2, 0), (3, count)]})
        before = correlator.correlate([_added_file("pkg/foo.go", [1, 2])], profile)
        after = correlator.correlate([_added_file("pkg/foo.go", [1, 2, 3])], profile)

        if expect_increase:
            assert after.percentage >= before.percentage
        else:
            assert after.percentage <= before.percentage

    def test_custom_source_suffixes(self) -> None:
        correlator = CoverageCorrelator([".py"])
        diff_files = [_added_file("app/main.py", [1]), _added_file("pkg/foo.go", [1])]
        profile = _profile({"app/main.py": [(1, 1)]})

        result = correlator.correlate(diff_files, profile)

        assert correlator.is_eligible("app/main.py")
        assert not correlator.is_eligible("pkg/foo.go")
        assert result.percentage == 100.0

    def test_empty_source_suffixes(self) -> None:
        """An explicit empty list disables every file rather than restoring the default."""
        correlator = CoverageCorrelator([])
        profile = _profile({"pkg/foo.go": [(1, 1)]})

        result = correlator.correlate([_added_file("pkg/foo.go", [1])], profile)

        assert not correlator.is_eligible("pkg/foo.go")
        assert result.files == []
        assert result.percentage == 0.0


class TestCompute:
    """Tests for reading the profile from disk."""

    def test_compute_reads_profile(self, profile_file: Path) -> None:
        diff_files = [_added_file("pkg/foo.go", [10, 11, 12])]

        result = CoverageCorrelator().compute(diff_files, profile_file)

        assert result.covered_lines == 1

    def test_empty_diff_skips_profile(self, tmp_path: Path) -> None:
        assert get_coverage([], tmp_path / "missing.txt") == 100.0

    def test_malformed_profile(self, tmp_path: Path) -> None:
        profile_path = tmp_path / "output.txt"
        profile_path.write_text(
            "mode: set\ngithub.com/acme/widgets/pkg/foo.go:10.2,10.12 1\n",
            encoding="utf-8",
        )

        with pytest.raises(ProfileParseError):
            get_coverage([_added_file("pkg/foo.go", [10])], profile_path)

    def test_missing_profile(self, tmp_path: Path) -> None:
        with pytest.raises(ProfileParseError):
            get_coverage([_added_file("pkg/foo.go", [10])], tmp_path / "missing.txt")

    def test_get_coverage_returns_percentage(self, profile_file: Path) -> None:
        diff_files = [_added_file("pkg/bar.go", [5, 6])]

        assert get_coverage(diff_files, profile_file) == 50.0
