"""Git-related services for wt-core."""

from .runner import GitRunner, GitResult
from .worktrees import WorktreeService
from .branch_queries import BranchQueries, resolve_repo_root
from .operations import GitOperations
from .merge_detector import MergeDetector

__all__ = [
    "GitRunner",
    "GitResult",
    "WorktreeService",
    "BranchQueries",
    "resolve_repo_root",
    "GitOperations",
    "MergeDetector",
]
