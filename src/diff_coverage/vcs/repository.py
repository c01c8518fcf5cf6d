"""
Git repository access for Diff Coverage.

Wraps a GitPython ``Repo`` with the metadata the report needs (origin
URL, checked-out branch) and produces the diff between the working tree
and the base branch. The diff itself is streamed from ``git diff``
through the executor pipeline rather than loaded through GitPython.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from git import Repo
from loguru import logger

from diff_coverage.config import DiffConfig
from diff_coverage.executor.diff_runner import run_diff
from diff_coverage.models.diff import Diff

DIFF_ARGS = (
    "diff",
    "--no-color",
    "--no-ext-diff",
    "--src-prefix=a/",
    "--dst-prefix=b/",
    "--full-index",
    "-M",
)


@dataclass
class Repository:
    """
    A GitPython repository plus the fields the report needs.

    Attributes not defined here are looked up on the wrapped ``Repo``.
    """

    repo: Repo
    origin: Optional[str] = None
    head_branch_name: Optional[str] = None

    def __getattr__(self, name: str) -> Any:
        if name == "repo":
            raise AttributeError(name)
        return getattr(self.repo, name)

    @property
    def path(self) -> Path:
        """Root of the working tree."""
        return Path(self.repo.working_tree_dir)

    def fetch(self, remote: str, branch: str) -> None:
        """
        Fetch a branch from a remote, updating its remote-tracking ref.

        Raises:
            ValueError: If the remote does not exist.
            git.GitCommandError: If the fetch fails.
        """
        logger.debug("Fetching {} from {}", branch, remote)
        self.repo.remote(remote).fetch(branch)

    def branch_commit_id(self, ref: str) -> str:
        """
        Resolve a branch or ref to its commit id.

        Raises:
            gitdb.exc.BadName: If the ref cannot be resolved.
        """
        return self.repo.commit(ref).hexsha

    def diff(
        self,
        limits: Optional[DiffConfig] = None,
        base: str = "HEAD",
        extra_args: Sequence[str] = (),
    ) -> Diff:
        """
        Diff the working tree against a base revision.

        Runs ``git diff --full-index -M <base>`` with rename detection and
        parses the output while git writes it.

        Args:
            limits: Caps on files, lines per file and characters per line.
            base: Revision to compare against.
            extra_args: Additional ``git diff`` options.

        Returns:
            The parsed Diff.
        """
        executable = self.repo.git.GIT_PYTHON_GIT_EXECUTABLE or "git"
        args = [executable, *DIFF_ARGS, *extra_args, base]
        return run_diff(args, cwd=self.path, limits=limits)


def open_repository(path: Union[Path, str] = ".") -> Repository:
    """
    Open the repository containing a path.

    Args:
        path: Any directory inside the working tree.

    Returns:
        Repository with origin URL and branch name filled in where known.

    Raises:
        git.InvalidGitRepositoryError: If the path is not inside a repository.
        git.NoSuchPathError: If the path does not exist.
    """
    repo = Repo(path, search_parent_directories=True)

    origin = None
    if any(remote.name == "origin" for remote in repo.remotes):
        urls = list(repo.remote("origin").urls)
        origin = urls[0] if urls else None

    head_branch_name = None
    if not repo.head.is_detached:
        head_branch_name = repo.active_branch.name

    return Repository(repo=repo, origin=origin, head_branch_name=head_branch_name)


def get_diff(
    repository: Repository,
    remote: str = "origin",
    base_branch: str = "main",
    limits: Optional[DiffConfig] = None,
    fetch: bool = True,
) -> Diff:
    """
    Diff the working tree against the tip of the base branch.

    With a remote, the base branch is fetched first and its
    remote-tracking ref is used; with an empty remote the local branch is
    used as is.

    Args:
        repository: Repository to diff.
        remote: Remote the base branch lives on, or "" for a local branch.
        base_branch: Name of the base branch.
        limits: Caps on files, lines per file and characters per line.
        fetch: Fetch the base branch before resolving it.

    Returns:
        The parsed Diff.
    """
    if remote and fetch:
        repository.fetch(remote, base_branch)

    ref = f"{remote}/{base_branch}" if remote else base_branch
    base = repository.branch_commit_id(ref)
    logger.debug("Diffing against {} ({})", ref, base)
    return repository.diff(limits, base)
