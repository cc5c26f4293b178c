"""Shared constants for wt-core."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


LIST_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("commit", "Commit", 8),
    ColumnDefinition("state", "State", 8),
    ColumnDefinition("path", "Path"),
]

PRUNE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("status", "Status", 22),
    ColumnDefinition("state", "State", 8),
    ColumnDefinition("path", "Path"),
]


# Symbol constants
SYMBOL_CURRENT = " *"
SYMBOL_MAIN = "[main]"
SYMBOL_DETACHED = "(detached)"
SYMBOL_CLEAN = "✓"
SYMBOL_DIRTY = "M"
SYMBOL_UNKNOWN = "⚠"
SYMBOL_MISSING = "✗"

SYMBOL_INTEGRATED = "✓"
SYMBOL_NOT_INTEGRATED = "✗"
SYMBOL_NO_BRANCH = "⚠"

DIAGNOSTIC_ICONS = {
    "ok": "✓",
    "warn": "⚠",
    "error": "✗",
}


class RowStyleType:
    """Style types for table rows."""

    MAIN = "main"
    CURRENT = "current"
    PRUNABLE = "prunable"
    WARNING = "warning"  # Missing on disk or can't be checked
    NORMAL = "normal"


# CLI colors (Rich color names)
CLI_COLORS = {
    RowStyleType.MAIN: "cyan",
    RowStyleType.CURRENT: "green",
    RowStyleType.PRUNABLE: "red",  # Would be removed by prune --execute
    RowStyleType.WARNING: "yellow",
    RowStyleType.NORMAL: None,  # Default color
}

DIAGNOSTIC_COLORS = {
    "ok": "green",
    "warn": "yellow",
    "error": "red",
}


LEGEND_TEXT = """
Legend:
* = Current worktree      [main] = Main worktree
✓ = Clean                 M = Uncommitted changes
⚠ = Status unknown        ✗ = Missing on disk"""
