"""Core functionality for wt-core"""

from .worktree_keeper import WorktreeKeeper, most_specific_worktree

__all__ = ["WorktreeKeeper", "most_specific_worktree"]
