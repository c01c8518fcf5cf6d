"""
Diff subprocess pipeline.

Runs a diff-generating command and parses its output while it is being
written. The command's stdout is a pipe read by a single worker thread;
the worker's Future carries its one result (a Diff or the parse error).
Reading concurrently keeps the command from blocking on a full pipe
buffer while this side waits for it to exit.
"""

import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence, Union

from loguru import logger

from diff_coverage.config import DiffConfig
from diff_coverage.models.diff import Diff
from diff_coverage.parser.diff_parser import DiffParser


class SubprocessError(Exception):
    """The diff command could not be started or exited with an error."""
    pass


def concatenate_error(error: Union[Exception, str], stderr: str) -> str:
    """Join a failure with the command's stderr output."""
    stderr = stderr.strip()
    if not stderr:
        return str(error)
    return f"{error} - {stderr}"


def run_diff(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    limits: Optional[DiffConfig] = None,
) -> Diff:
    """
    Run a diff command and stream its output through DiffParser.

    The worker is always joined before returning, whether the command
    succeeds, fails, or its output is malformed.

    Args:
        args: Command and arguments, e.g. ``["git", "diff", "main"]``.
        cwd: Working directory for the command.
        limits: Caps on files, lines per file and characters per line.

    Returns:
        The parsed Diff.

    Raises:
        SubprocessError: If the command cannot start or exits non-zero.
        DiffParseError: If the output is not a valid diff.
    """
    command = " ".join(args)
    logger.debug("Running {} in {}", command, cwd or ".")

    try:
        process = subprocess.Popen(
            list(args),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise SubprocessError(f"Failed to start {command}: {e}") from e

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="diff-parser") as executor:
        future = executor.submit(DiffParser.parse_stream, process.stdout, limits)
        try:
            stderr = process.stderr.read().decode("utf-8", errors="replace")
            returncode = process.wait()
        finally:
            process.stderr.close()

        # The worker sees end-of-stream once the command has exited.
        try:
            parse_error = future.exception()
        finally:
            process.stdout.close()

    if returncode != 0:
        raise SubprocessError(
            concatenate_error(f"{command} exited with status {returncode}", stderr)
        ) from parse_error
    if parse_error is not None:
        raise parse_error

    return future.result()
