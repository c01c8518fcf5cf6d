"""
Unit tests for configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from diff_coverage.config import Config, DiffConfig, find_config_file, load_config


class TestConfigDefaults:
    """Tests for default configuration values."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.diff.max_files == 1000
        assert config.diff.max_file_lines == 10000
        assert config.diff.max_line_chars == 1000
        assert config.coverage.profile == Path("output.txt")
        assert config.coverage.source_suffixes == [".go"]
        assert config.coverage.fail_under is None
        assert config.git.remote == "origin"
        assert config.git.base_branch == "main"
        assert config.git.fetch is True
        assert config.output.format == "text"

    def test_negative_cap_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiffConfig(max_files=-1)

    def test_diff_config_is_frozen(self) -> None:
        config = DiffConfig()

        with pytest.raises(ValidationError):
            config.max_files = 5


class TestLoadConfig:
    """Tests for load_config."""

    def test_none_returns_defaults(self) -> None:
        assert load_config(None) == Config()

    def test_load_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".diff-coverage.yaml"
        config_path.write_text(
            "diff:\n"
            "  max_files: 50\n"
            "coverage:\n"
            "  profile: cover.out\n"
            "  fail_under: 75\n"
            "git:\n"
            "  remote: upstream\n"
            "  base_branch: develop\n",
            encoding="utf-8",
        )

        config = load_config(config_path)

        assert config.diff.max_files == 50
        assert config.diff.max_file_lines == 10000
        assert config.coverage.profile == Path("cover.out")
        assert config.coverage.fail_under == 75.0
        assert config.git.remote == "upstream"
        assert config.git.base_branch == "develop"

    def test_empty_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".diff-coverage.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(config_path) == Config()

    def test_unknown_section(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".diff-coverage.yaml"
        config_path.write_text("thresholds:\n  minimum: 80\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to load configuration"):
            load_config(config_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".diff-coverage.yaml"
        config_path.write_text("diff: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_found_in_parent(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".diff-coverage.yml"
        config_path.write_text("{}\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == config_path.resolve()

    def test_yaml_preferred_over_yml(self, tmp_path: Path) -> None:
        (tmp_path / ".diff-coverage.yml").write_text("{}\n", encoding="utf-8")
        (tmp_path / ".diff-coverage.yaml").write_text("{}\n", encoding="utf-8")

        assert find_config_file(tmp_path) == (tmp_path / ".diff-coverage.yaml").resolve()
