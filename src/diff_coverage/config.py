"""
Configuration loading and validation for Diff Coverage.

This module handles configuration file parsing, validation, and provides
sensible defaults for all configuration options.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class DiffConfig(BaseModel):
    """Caps applied while streaming diff output. Zero disables a cap."""

    max_files: int = Field(
        default=1000,
        ge=0,
        description="Maximum number of files kept from the diff.",
    )
    max_file_lines: int = Field(
        default=10000,
        ge=0,
        description="Maximum number of lines kept per file.",
    )
    max_line_chars: int = Field(
        default=1000,
        ge=0,
        description="Maximum number of characters kept per line.",
    )

    class Config:
        frozen = True


class CoverageConfig(BaseModel):
    """Configuration for coverage correlation."""

    profile: Path = Field(
        default=Path("output.txt"),
        description="Path to the execution-count profile.",
    )
    source_suffixes: list[str] = Field(
        default=[".go"],
        description="File suffixes that count toward diff coverage.",
    )
    fail_under: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=100.0,
        description="Exit with an error when coverage is below this percentage.",
    )


class GitConfig(BaseModel):
    """Configuration for the git collaborator."""

    remote: str = Field(
        default="origin",
        description="Remote the base branch is fetched from.",
    )
    base_branch: str = Field(
        default="main",
        description="Branch the change is compared against.",
    )
    fetch: bool = Field(
        default=True,
        description="Fetch the base branch before diffing.",
    )


class OutputConfig(BaseModel):
    """Configuration for output formatting."""

    format: str = Field(
        default="text",
        description="Default output format.",
    )
    colorize: bool = Field(
        default=True,
        description="Use colors in terminal output.",
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose output.",
    )


class Config(BaseModel):
    """Root configuration model for Diff Coverage."""

    diff: DiffConfig = Field(default_factory=DiffConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    class Config:
        """Pydantic model configuration."""

        extra = "forbid"


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, returns defaults.

    Returns:
        Config object with loaded or default values.

    Raises:
        FileNotFoundError: If the specified config file doesn't exist.
        ValueError: If the config file is invalid.
    """
    if config_path is None:
        return Config()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file: {e}") from e
    except Exception as e:
        raise ValueError(f"Failed to load configuration: {e}") from e


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for a configuration file starting from the given path.

    Searches for `.diff-coverage.yaml` or `.diff-coverage.yml`
    in the start path and parent directories.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to the config file if found, None otherwise.
    """
    config_names = [".diff-coverage.yaml", ".diff-coverage.yml"]

    current = start_path.resolve()
    while current != current.parent:
        for name in config_names:
            config_path = current / name
            if config_path.exists():
                return config_path
        current = current.parent

    return None
