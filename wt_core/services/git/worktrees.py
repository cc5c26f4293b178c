"""Worktree registry operations for wt-core."""

import os
import shutil
from pathlib import Path
from typing import Optional, Dict, Any, List

from wt_core.exceptions import AppError, GitFailureError
from wt_core.models.branch import BranchName
from wt_core.models.worktree import RepositoryRoot, WorktreeInfo, WorktreeStatus
from wt_core.services.git.runner import GitRunner
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)


def parse_worktree_porcelain(output: str) -> List[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Format (blank line between worktrees):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached")
        locked [reason]                 (optional)
        prunable [reason]               (optional)

    Bare entries are dropped. The first remaining entry is the main worktree;
    position is used instead of path comparison so symlinked paths cannot
    confuse it.
    """
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}

    for raw_line in output.split("\n"):
        line = raw_line.rstrip("\r")

        if not line.strip():
            # Empty line marks end of worktree entry
            if current:
                entries.append(current)
                current = {}
            continue

        if line.startswith("worktree "):
            if current:
                entries.append(current)
            current = {"path": line.split(" ", 1)[1]}
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1].strip()
        elif line.startswith("branch "):
            current["branch"] = line.split(" ", 1)[1].strip()
        elif line == "detached":
            current["branch"] = None
        elif line == "bare":
            current["bare"] = True
        elif line == "locked" or line.startswith("locked "):
            current["locked"] = True
        elif line == "prunable" or line.startswith("prunable "):
            current["prunable"] = True

    # Handle last entry if no trailing blank line
    if current:
        entries.append(current)

    worktrees = []
    for entry in entries:
        if entry.get("bare") or not entry.get("path"):
            continue
        path = Path(entry["path"])
        branch_ref = entry.get("branch")
        worktrees.append(
            WorktreeInfo(
                path=path,
                branch=BranchName.from_git(branch_ref) if branch_ref else None,
                commit_sha=entry.get("HEAD", ""),
                is_main=not worktrees,
                is_orphaned=not path.exists(),
                is_locked=entry.get("locked", False),
                is_prunable=entry.get("prunable", False),
            )
        )
    return worktrees


def parse_status_porcelain(output: str) -> WorktreeStatus:
    """Parse ``git status --porcelain`` (v1) into status flags."""
    status = WorktreeStatus()

    for line in output.split("\n"):
        if len(line) < 2:
            continue

        index_status = line[0]  # Staged changes
        worktree_status = line[1]  # Working tree changes
        status.files.append(line[3:] if len(line) > 3 else line)

        if line.startswith("??"):
            status.untracked = True
            continue
        if "U" in (index_status, worktree_status) or line[:2] in ("AA", "DD"):
            status.unmerged = True
            continue
        if index_status not in (" ", "!"):
            status.staged = True
        if worktree_status not in (" ", "!"):
            status.modified = True

    return status


class WorktreeService:
    """Service for reading and changing the git worktree registry."""

    def __init__(self, repo: RepositoryRoot, runner: Optional[GitRunner] = None):
        """Initialize the worktree service.

        Args:
            repo: Resolved repository root
            runner: Git process interface (defaults to one bound to the root)
        """
        self.repo = repo
        self.runner = runner or GitRunner(repo.path)

    def list_worktrees(self) -> List[WorktreeInfo]:
        """Read all worktrees from git's registry. Never cached."""
        output = self.runner.run(["worktree", "list", "--porcelain"])
        worktrees = parse_worktree_porcelain(output)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def get_status(
        self, worktree_path: Path, include_untracked: bool = True, exclude_worktrees_dir: bool = False
    ) -> Optional[WorktreeStatus]:
        """Get file status of a worktree.

        Args:
            worktree_path: Path to the worktree directory
            include_untracked: Count untracked files as changes
            exclude_worktrees_dir: Ignore ``.worktrees/`` (for the main worktree,
                where linked worktrees show up as untracked)

        Returns:
            WorktreeStatus, or None if the worktree directory doesn't exist (orphaned)
        """
        if not worktree_path.exists():
            logger.debug(f"Worktree path {worktree_path} doesn't exist (orphaned)")
            return None

        args = ["status", "--porcelain"]
        if not include_untracked:
            args.append("--untracked-files=no")
        if exclude_worktrees_dir:
            args.extend(["--", ".", f":(exclude){self.repo.worktrees_dir_name}"])
        output = self.runner.run(args, cwd=worktree_path)
        return parse_status_porcelain(output)

    def is_dirty(self, worktree: WorktreeInfo, include_untracked: bool = True) -> Optional[bool]:
        """True if the worktree has uncommitted changes; None if it can't be checked."""
        try:
            status = self.get_status(
                worktree.path,
                include_untracked=include_untracked,
                exclude_worktrees_dir=worktree.is_main,
            )
        except AppError as e:
            logger.warning(f"Could not check worktree status for {worktree.path}: {e}")
            return None
        return status.is_dirty if status is not None else None

    def add_worktree(self, path: Path, branch: BranchName, start_point: str, track: bool = False) -> None:
        """Create ``branch`` at ``start_point`` checked out in a new worktree at ``path``.

        Directory and branch are created by one git call (``--track`` also sets
        the upstream in that call). If it fails, any directory or branch it
        left behind is cleaned up before re-raising.
        """
        dir_existed = path.exists()
        branch_existed = self._branch_ref_exists(branch)
        args = ["worktree", "add"]
        if track:
            args.append("--track")
        args.extend(["-b", branch.value, str(path), start_point])
        try:
            self.runner.run(args)
        except AppError:
            self._rollback_add(path, branch, dir_existed, branch_existed)
            raise
        logger.info(f"Created worktree for {branch} at {path}")

    def _branch_ref_exists(self, branch: BranchName) -> bool:
        return self.runner.succeeds(["show-ref", "--verify", "--quiet", f"refs/heads/{branch.value}"])

    def _rollback_add(self, path: Path, branch: BranchName, dir_existed: bool, branch_existed: bool) -> None:
        """Undo whatever a failed ``worktree add -b`` left behind."""
        if not dir_existed and path.exists():
            logger.debug(f"Rolling back partially created worktree at {path}")
            self.runner.run_status(["worktree", "remove", "--force", str(path)])
            shutil.rmtree(path, ignore_errors=True)
            self.runner.run_status(["worktree", "prune"])
        if not branch_existed and self._branch_ref_exists(branch):
            logger.debug(f"Rolling back branch {branch}")
            self.runner.run_status(["branch", "-D", branch.value])

    def remove_worktree(self, path: Path, force: bool = False) -> None:
        """Remove a worktree at the specified path.

        A registration whose directory is already gone is cleared with
        ``git worktree prune`` instead.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked
        """
        if not path.exists():
            logger.info(f"Worktree directory {path} is missing; pruning its registration")
            self.prune_registrations()
            return

        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(path))
        self.runner.run(args)
        logger.info(f"Removed worktree at {path}")

    def prune_registrations(self) -> None:
        """Prune registry entries whose directories no longer exist."""
        self.runner.run(["worktree", "prune"])
        logger.info("Pruned orphaned worktree metadata")

    def find_by_branch(self, worktrees: List[WorktreeInfo], branch: BranchName) -> Optional[WorktreeInfo]:
        """Return the worktree that has ``branch`` checked out, if any."""
        for wt in worktrees:
            if wt.branch == branch:
                return wt
        return None

    def unregistered_directories(self, worktrees: List[WorktreeInfo]) -> List[Path]:
        """Directories under ``.worktrees/`` that git does not know about."""
        wt_dir = self.repo.worktrees_dir
        if not wt_dir.is_dir():
            return []
        registered = {os.path.normcase(str(wt.path.resolve())) for wt in worktrees}
        try:
            children = sorted(wt_dir.iterdir())
        except OSError as e:
            raise GitFailureError(f"cannot read {wt_dir}: {e}") from e
        return [
            child for child in children
            if child.is_dir() and os.path.normcase(str(child.resolve())) not in registered
        ]
