"""Result values produced by the lifecycle engine.

Each operation returns one immutable result which the display service renders
exactly once.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from wt_core.models.branch import BranchName, IntegrationMethod, IntegrationStatus
from wt_core.models.worktree import WorktreeInfo


@dataclass(frozen=True)
class AddResult:
    worktree_path: Path
    branch: BranchName
    repo_root: Path
    tracking: bool = False  # Created from <remote>/<branch> with upstream set
    base: Optional[str] = None


@dataclass(frozen=True)
class GoResult:
    worktree_path: Path
    branch: BranchName
    repo_root: Path


@dataclass(frozen=True)
class ListResult:
    repo_root: Path
    worktrees: Tuple[WorktreeInfo, ...]


@dataclass(frozen=True)
class RemoveResult:
    removed_path: Path
    branch: BranchName
    repo_root: Path
    branch_deleted: bool = True
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MergeResult:
    branch: BranchName
    mainline: str
    repo_root: Path
    cleaned_up: bool
    pushed: bool
    removed_path: Optional[Path] = None  # Only set when cleaned_up
    warnings: Tuple[str, ...] = ()


class SkipReason(Enum):
    """Why prune left a worktree in place."""
    NOT_INTEGRATED = "not_integrated"
    NO_BRANCH = "no_branch"
    DIRTY = "dirty"
    REMOVAL_FAILED = "removal_failed"


@dataclass(frozen=True)
class PruneEntry:
    """One non-main worktree as seen by prune."""
    path: Path
    branch: Optional[BranchName]
    status: IntegrationStatus
    method: Optional[IntegrationMethod] = None
    is_dirty: Optional[bool] = None

    @property
    def is_integrated(self) -> bool:
        return self.status == IntegrationStatus.INTEGRATED


@dataclass(frozen=True)
class PrunedEntry:
    path: Path
    branch: BranchName
    branch_deleted: bool = True


@dataclass(frozen=True)
class SkippedEntry:
    path: Path
    branch: Optional[BranchName]
    reason: SkipReason


@dataclass(frozen=True)
class PruneFailure:
    """A candidate whose removal failed; siblings were still processed."""
    path: Path
    branch: Optional[BranchName]
    message: str
    exit_code: int


@dataclass(frozen=True)
class PruneReport:
    mainline: str
    repo_root: Path
    entries: Tuple[PruneEntry, ...]
    executed: bool = False
    pruned: Tuple[PrunedEntry, ...] = ()
    skipped: Tuple[SkippedEntry, ...] = ()
    failures: Tuple[PruneFailure, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def candidates(self) -> Tuple[PruneEntry, ...]:
        return tuple(entry for entry in self.entries if entry.is_integrated)

    @property
    def ok(self) -> bool:
        return not self.failures


class DiagLevel(Enum):
    OK = "ok"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    level: DiagLevel
    message: str
    path: Optional[Path] = None


@dataclass(frozen=True)
class DoctorReport:
    repo_root: Path
    diagnostics: Tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not any(d.level == DiagLevel.ERROR for d in self.diagnostics)
