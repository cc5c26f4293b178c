"""Output formats, one closed set per command family."""

from enum import Enum


class NavigationFormat(Enum):
    """Formats for commands that produce a path to cd into (add, go)."""
    HUMAN = "human"
    JSON = "json"
    CD_PATH = "cd_path"


class RemovalFormat(Enum):
    """Formats for commands that remove a worktree (remove, merge)."""
    HUMAN = "human"
    JSON = "json"
    PRINT_PATHS = "print_paths"  # One value per line for shell wrappers


class StatusFormat(Enum):
    """Formats for reporting commands (list, prune, doctor)."""
    HUMAN = "human"
    JSON = "json"


def navigation_format(json_output: bool, cd_path: bool) -> NavigationFormat:
    if json_output:
        return NavigationFormat.JSON
    if cd_path:
        return NavigationFormat.CD_PATH
    return NavigationFormat.HUMAN


def removal_format(json_output: bool, print_paths: bool) -> RemovalFormat:
    if json_output:
        return RemovalFormat.JSON
    if print_paths:
        return RemovalFormat.PRINT_PATHS
    return RemovalFormat.HUMAN


def status_format(json_output: bool) -> StatusFormat:
    return StatusFormat.JSON if json_output else StatusFormat.HUMAN
