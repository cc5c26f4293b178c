"""Branch model and related enums"""
import re
from enum import Enum
from dataclasses import dataclass

from wt_core.exceptions import UsageError
from wt_core.services.naming import worktree_dir_name

HEADS_PREFIX = "refs/heads/"

# Sequences git refuses inside a ref name (see git-check-ref-format).
_FORBIDDEN_SEQUENCES = ("..", "@{", "//", "/.")
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\\x00-\x1f\x7f]")


class IntegrationMethod(Enum):
    """How a branch was found to be integrated into mainline."""
    MERGED = "merged"  # Tip is an ancestor of mainline
    REBASE = "rebase"  # Every patch has an equivalent on mainline


class IntegrationStatus(Enum):
    """Integration state of a worktree's branch."""
    INTEGRATED = "integrated"
    NOT_INTEGRATED = "not_integrated"
    NO_BRANCH = "no_branch"


@dataclass(frozen=True)
class BranchName:
    """A validated local branch name.

    Build instances with ``parse`` for user input or ``from_git`` for names
    read back from git itself.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise UsageError("branch name cannot be empty")

    @classmethod
    def parse(cls, text: str) -> "BranchName":
        """Validate a user-supplied branch name."""
        name = (text or "").strip()
        if not name:
            raise UsageError("branch name cannot be empty")
        if name.startswith("-"):
            raise UsageError(f"invalid branch name '{name}': cannot start with '-'")
        if name.startswith(HEADS_PREFIX):
            name = name[len(HEADS_PREFIX):]
        problem = _ref_name_problem(name)
        if problem:
            raise UsageError(f"invalid branch name '{name}': {problem}")
        return cls(name)

    @classmethod
    def from_git(cls, ref: str) -> "BranchName":
        """Wrap a branch name reported by git (``refs/heads/`` prefix optional)."""
        ref = ref.strip()
        if ref.startswith(HEADS_PREFIX):
            ref = ref[len(HEADS_PREFIX):]
        return cls(ref)

    def to_dir_name(self) -> str:
        """Collision-safe directory name, e.g. ``feature-auth--1a2b3c4d``."""
        return worktree_dir_name(self.value)

    def __str__(self) -> str:
        return self.value


def _ref_name_problem(name: str) -> str:
    """Return why git would reject ``name`` as a branch, or an empty string."""
    if _FORBIDDEN_CHARS.search(name):
        return "contains whitespace, control or special characters"
    for sequence in _FORBIDDEN_SEQUENCES:
        if sequence in name:
            return f"contains '{sequence}'"
    if name.startswith("/") or name.startswith("."):
        return "cannot start with '/' or '.'"
    if name.endswith("/") or name.endswith("."):
        return "cannot end with '/' or '.'"
    if name.endswith(".lock"):
        return "cannot end with '.lock'"
    if name == "@" or name == "HEAD":
        return f"'{name}' is reserved"
    return ""
