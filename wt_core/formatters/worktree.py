"""Worktree row formatting utilities."""

from typing import Optional

from wt_core.constants import (
    SYMBOL_CLEAN,
    SYMBOL_CURRENT,
    SYMBOL_DETACHED,
    SYMBOL_DIRTY,
    SYMBOL_MAIN,
    SYMBOL_MISSING,
    SYMBOL_UNKNOWN,
    RowStyleType,
)
from wt_core.models.branch import BranchName
from wt_core.models.worktree import WorktreeInfo


def format_branch_label(branch: Optional[BranchName]) -> str:
    """Branch name, or ``(detached)`` for a detached HEAD."""
    return branch.value if branch is not None else SYMBOL_DETACHED


def format_worktree_name(wt: WorktreeInfo) -> str:
    """
    Format the branch column of a worktree row.

    Args:
        wt: Worktree to format

    Returns:
        Branch label with ``[main]`` and current-worktree markers, e.g.
        ``"main [main] *"`` or ``"feature/x"``
    """
    label = format_branch_label(wt.branch)
    if wt.is_main:
        label = f"{label} {SYMBOL_MAIN}"
    if wt.is_current:
        label += SYMBOL_CURRENT
    return label


def format_dirty(is_dirty: Optional[bool], is_orphaned: bool = False) -> str:
    """
    Format working tree state as a symbol.

    ✗ = missing on disk, ⚠ = could not be checked, M = uncommitted changes,
    ✓ = clean.
    """
    if is_orphaned:
        return SYMBOL_MISSING
    if is_dirty is None:
        return SYMBOL_UNKNOWN
    return SYMBOL_DIRTY if is_dirty else SYMBOL_CLEAN


def get_worktree_style_type(wt: WorktreeInfo) -> str:
    """Determine the row style for a worktree in ``list`` output."""
    if wt.is_orphaned:
        return RowStyleType.WARNING
    if wt.is_current:
        return RowStyleType.CURRENT
    if wt.is_main:
        return RowStyleType.MAIN
    return RowStyleType.NORMAL
