"""Integration status, skip reason and diagnostic formatting utilities."""

from wt_core.constants import (
    DIAGNOSTIC_ICONS,
    SYMBOL_INTEGRATED,
    SYMBOL_NO_BRANCH,
    SYMBOL_NOT_INTEGRATED,
    RowStyleType,
)
from wt_core.models.branch import IntegrationStatus
from wt_core.models.results import Diagnostic, PruneEntry, SkipReason

SKIP_REASON_DISPLAY = {
    SkipReason.NOT_INTEGRATED: "not integrated",
    SkipReason.NO_BRANCH: "no branch (detached HEAD)",
    SkipReason.DIRTY: "uncommitted changes (use --force)",
    SkipReason.REMOVAL_FAILED: "removal failed",
}


def format_integration(entry: PruneEntry) -> str:
    """
    Format a prune entry's integration status.

    Args:
        entry: Prune entry

    Returns:
        e.g. ``"✓ integrated (rebase)"``, ``"✗ not integrated"``
    """
    if entry.status == IntegrationStatus.INTEGRATED:
        return f"{SYMBOL_INTEGRATED} integrated ({entry.method.value})"
    if entry.status == IntegrationStatus.NOT_INTEGRATED:
        return f"{SYMBOL_NOT_INTEGRATED} not integrated"
    return f"{SYMBOL_NO_BRANCH} no branch (detached HEAD)"


def format_skip_reason(reason: SkipReason) -> str:
    return SKIP_REASON_DISPLAY.get(reason, reason.value)


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Format a diagnostic as ``<icon> <message> (<path>)``."""
    icon = DIAGNOSTIC_ICONS[diagnostic.level.value]
    if diagnostic.path is not None:
        return f"{icon} {diagnostic.message} ({diagnostic.path})"
    return f"{icon} {diagnostic.message}"


def get_prune_style_type(entry: PruneEntry) -> str:
    """Red for candidates prune would remove, yellow for dirty ones it would skip."""
    if not entry.is_integrated:
        return RowStyleType.NORMAL
    if entry.is_dirty:
        return RowStyleType.WARNING
    return RowStyleType.PRUNABLE


def pluralize(count: int, noun: str) -> str:
    """``pluralize(1, "worktree")`` -> ``"1 worktree"``, 2 -> ``"2 worktrees"``."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
