"""Branch and repository queries for wt-core."""

from pathlib import Path
from typing import List, Optional, Union

from wt_core.exceptions import AppError, GitFailureError, NotARepositoryError
from wt_core.models.branch import BranchName
from wt_core.models.worktree import RepositoryRoot, WorktreeInfo
from wt_core.services.git.runner import GitRunner
from wt_core.services.git.worktrees import WorktreeService
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)

FALLBACK_MAINLINES = ("main", "master")


def resolve_repo_root(
    start: Union[str, Path], worktrees_dir_name: str = ".worktrees", runner: Optional[GitRunner] = None
) -> RepositoryRoot:
    """Resolve the main repository root from a starting path.

    Uses ``--git-common-dir`` so this returns the main worktree root even when
    invoked from inside a linked worktree.

    Raises:
        NotARepositoryError: if ``start`` is not inside a git repository
    """
    start_path = Path(start).expanduser()
    if not start_path.is_dir():
        raise NotARepositoryError(f"not a git repository: {start_path}")

    runner = runner or GitRunner(start_path)
    try:
        toplevel = runner.run(["rev-parse", "--show-toplevel"], cwd=start_path)
    except AppError as e:
        logger.debug(f"rev-parse --show-toplevel failed in {start_path}: {e}")
        raise NotARepositoryError(f"not a git repository: {start_path}") from e

    # The common dir is <main-repo>/.git for both the main and linked
    # worktrees. A relative answer is relative to ``start``.
    common = runner.run_status(["rev-parse", "--git-common-dir"], cwd=start_path)
    if common.ok and common.stdout:
        common_path = (start_path / common.stdout).resolve()
        root = common_path.parent
    else:
        root = Path(toplevel)

    repo = RepositoryRoot.from_path(root, worktrees_dir_name)
    logger.debug(f"Repository root: {repo}")
    return repo


class BranchQueries:
    """Read-mostly branch lookups against one repository."""

    def __init__(self, repo: RepositoryRoot, runner: Optional[GitRunner] = None, remote_name: str = "origin"):
        self.repo = repo
        self.runner = runner or GitRunner(repo.path)
        self.remote_name = remote_name

    def branch_exists(self, branch: BranchName) -> bool:
        """Check if a local branch exists."""
        return self.runner.succeeds(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch.value}"])

    def rev_exists(self, rev: str) -> bool:
        """Check that a revision resolves to a commit."""
        return self.runner.succeeds(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])

    def remote_branch_exists(self, branch: BranchName) -> bool:
        """Check if ``<remote>/<branch>`` exists as a remote-tracking ref."""
        ref = f"refs/remotes/{self.remote_name}/{branch.value}"
        return self.runner.succeeds(["rev-parse", "--verify", "--quiet", ref])

    def remote_for(self, branch_name: str) -> str:
        """The remote ``branch_name`` pushes to, defaulting to the configured remote."""
        result = self.runner.run_status(["config", "--get", f"branch.{branch_name}.remote"])
        if result.ok and result.stdout and result.stdout != ".":
            return result.stdout
        return self.remote_name

    def delete_branch(self, branch: BranchName, force: bool = False) -> None:
        """Delete a local branch with ``-d`` (``-D`` when forced)."""
        flag = "-D" if force else "-d"
        self.runner.run(["branch", flag, branch.value])
        logger.info(f"Deleted branch {branch} ({flag})")

    def resolve_mainline(self, worktrees: Optional[List[WorktreeInfo]] = None) -> str:
        """Auto-detect the mainline branch.

        Resolution order:
        1. ``refs/remotes/<remote>/HEAD`` symbolic ref
        2. Local branch named ``main``
        3. Local branch named ``master``
        4. The main worktree's branch

        Raises:
            GitFailureError: if none of these yields a branch
        """
        result = self.runner.run_status(
            ["symbolic-ref", "--quiet", "--short", f"refs/remotes/{self.remote_name}/HEAD"]
        )
        if result.ok and result.stdout:
            prefix = f"{self.remote_name}/"
            mainline = result.stdout[len(prefix):] if result.stdout.startswith(prefix) else result.stdout
            logger.debug(f"Mainline from {self.remote_name}/HEAD: {mainline}")
            return mainline

        for candidate in FALLBACK_MAINLINES:
            if self.branch_exists(BranchName(candidate)):
                logger.debug(f"Mainline from local branch: {candidate}")
                return candidate

        if worktrees is None:
            worktrees = WorktreeService(self.repo, self.runner).list_worktrees()
        main = next((wt for wt in worktrees if wt.is_main), None)
        if main is not None and main.branch is not None:
            logger.debug(f"Mainline from main worktree: {main.branch}")
            return main.branch.value

        raise GitFailureError("could not determine mainline branch; use --mainline to specify")
