"""Worktree data models."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

from wt_core.models.branch import BranchName


@dataclass(frozen=True)
class RepositoryRoot:
    """Canonical root of the main working copy."""

    path: Path
    worktrees_dir_name: str = ".worktrees"

    @classmethod
    def from_path(cls, path: Union[str, Path], worktrees_dir_name: str = ".worktrees") -> "RepositoryRoot":
        return cls(Path(path).resolve(), worktrees_dir_name)

    @property
    def worktrees_dir(self) -> Path:
        """The ``.worktrees/`` directory under the repo root."""
        return self.path / self.worktrees_dir_name

    def worktree_path(self, branch: BranchName) -> Path:
        """Where the worktree for ``branch`` lives."""
        return self.worktrees_dir / branch.to_dir_name()

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a git worktree."""

    path: Path
    branch: Optional[BranchName]
    commit_sha: str
    is_main: bool  # First entry of the registry
    is_orphaned: bool = False  # Registered but directory missing
    is_locked: bool = False
    is_prunable: bool = False  # git itself flagged the entry as prunable
    is_current: bool = False  # Most specific worktree containing cwd
    is_dirty: Optional[bool] = None  # None = couldn't check

    @property
    def branch_name(self) -> str:
        return self.branch.value if self.branch else ""

    @property
    def short_sha(self) -> str:
        return self.commit_sha[:7]

    def with_status(self, **changes) -> "WorktreeInfo":
        return replace(self, **changes)

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        branch = self.branch_name or "(detached)"
        return f"{branch} @ {self.path}{main_marker} [{status}]"


@dataclass
class WorktreeStatus:
    """File status flags for one worktree, parsed from ``git status --porcelain``."""

    modified: bool = False
    untracked: bool = False
    staged: bool = False
    unmerged: bool = False
    files: list = field(default_factory=list)

    @property
    def is_dirty(self) -> bool:
        return self.modified or self.untracked or self.staged or self.unmerged
