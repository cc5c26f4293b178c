"""Mutating git operations on the main worktree: merge and push."""

from typing import Optional

from wt_core.exceptions import AppError, ConflictError
from wt_core.models.branch import BranchName
from wt_core.models.worktree import RepositoryRoot
from wt_core.services.git.runner import GitRunner
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)


class GitOperations:
    """Service for merge and push operations run from the main worktree."""

    def __init__(self, repo: RepositoryRoot, runner: Optional[GitRunner] = None):
        """Initialize the service.

        Args:
            repo: Resolved repository root; commands run in the main worktree
            runner: Git process interface
        """
        self.repo = repo
        self.runner = runner or GitRunner(repo.path)

    def merge_no_ff(self, branch: BranchName, mainline: str) -> None:
        """Merge ``branch`` into the checked-out mainline with a merge commit.

        Any failure aborts the merge before raising, so the main worktree is
        left exactly as it was.

        Raises:
            ConflictError: the merge failed and was aborted
        """
        message = f"Merge branch '{branch}' into {mainline}"
        try:
            self.runner.run(["merge", "--no-ff", "--no-edit", "-m", message, branch.value])
        except AppError as e:
            self.merge_abort()
            raise ConflictError(
                f"merge conflicts with '{branch}'; merge aborted, resolve manually "
                f"with `git merge {branch}`\n{e.message}"
            ) from e
        except BaseException:
            # Interrupted mid-merge: restore the pre-merge state first.
            self.merge_abort()
            raise
        logger.info(f"Merged {branch} into {mainline}")

    def merge_abort(self) -> None:
        """Abort an in-progress merge; a no-op when nothing is in progress."""
        result = self.runner.run_status(["merge", "--abort"])
        if result.ok:
            logger.info("Aborted merge")
        else:
            logger.debug(f"merge --abort: {result.stderr}")

    def push(self, remote: str, branch_name: str) -> None:
        """Push ``branch_name`` to ``remote``."""
        self.runner.run(["push", remote, branch_name])
        logger.info(f"Pushed {branch_name} to {remote}")
