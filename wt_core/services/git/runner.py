"""Process interface to the git executable."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import git

from wt_core.exceptions import GitFailureError, classify_git_error
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class GitResult:
    """Exit status plus separately captured stdout and stderr."""

    status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.status == 0


class GitRunner:
    """Runs git synchronously and classifies failures.

    Commands run in ``cwd`` (the repository root by default). Each call blocks
    until git exits; nothing is cached between calls.
    """

    def __init__(self, cwd: Optional[PathLike] = None):
        self.cwd = Path(cwd) if cwd is not None else None

    def _get_git(self, cwd: Optional[PathLike]) -> git.Git:
        """Get a git.Git command wrapper bound to ``cwd``."""
        working_dir = cwd if cwd is not None else self.cwd
        return git.Git(str(working_dir) if working_dir is not None else os.getcwd())

    def run_status(self, args: Sequence[str], cwd: Optional[PathLike] = None) -> GitResult:
        """Run ``git <args>`` and return the raw result without raising on failure."""
        command = ["git", *args]
        try:
            status, stdout, stderr = self._get_git(cwd).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
            )
        except git.exc.GitCommandNotFound as e:
            raise GitFailureError(f"failed to run git: {e}", command=" ".join(command)) from e

        # rstrip only: porcelain lines can start with a space
        result = GitResult(status=status, stdout=(stdout or "").rstrip(), stderr=(stderr or "").strip())
        logger.debug(f"git {' '.join(args)} -> exit {result.status}")
        if not result.ok and result.stderr:
            logger.debug(f"  stderr: {result.stderr}")
        return result

    def run(self, args: Sequence[str], cwd: Optional[PathLike] = None) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            AppError: the classified failure when git exits non-zero
        """
        result = self.run_status(args, cwd)
        if not result.ok:
            raise classify_git_error(
                result.stderr or result.stdout,
                command="git " + " ".join(args),
                status=result.status,
            )
        return result.stdout

    def succeeds(self, args: Sequence[str], cwd: Optional[PathLike] = None) -> bool:
        """Return True if ``git <args>`` exits with status 0."""
        return self.run_status(args, cwd).ok
