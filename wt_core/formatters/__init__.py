"""Formatting utilities for wt-core.

This package provides formatting functions for displaying worktree
information, organized into logical modules:
- worktree: worktree row labels and working tree state
- status: integration status, skip reasons and diagnostics
"""

# Worktree formatters
from .worktree import (
    format_branch_label,
    format_worktree_name,
    format_dirty,
    get_worktree_style_type,
)

# Status formatters
from .status import (
    format_integration,
    format_skip_reason,
    format_diagnostic,
    get_prune_style_type,
    pluralize,
)

__all__ = [
    # Worktree
    "format_branch_label",
    "format_worktree_name",
    "format_dirty",
    "get_worktree_style_type",
    # Status
    "format_integration",
    "format_skip_reason",
    "format_diagnostic",
    "get_prune_style_type",
    "pluralize",
]
