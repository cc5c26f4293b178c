"""Custom exceptions for wt-core"""

from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Stable process exit codes."""

    SUCCESS = 0
    USAGE = 1
    GIT = 2
    NOT_A_REPO = 3
    INVARIANT = 4
    CONFLICT = 5


# Ordered stderr patterns; the first matching group decides the error kind.
CONFLICT_PATTERNS = (
    "unmerged",
    "modified",
    "dirty",
    "already exists",
    "already checked out",
    "is not fully merged",
)
NOT_A_REPO_PATTERN = "not a git repository"


class AppError(Exception):
    """Base exception for all wt-core errors.

    Every failure the lifecycle engine reports is one of the subclasses below,
    each mapped to a stable exit code.
    """

    kind = "error"
    exit_code = ExitCode.GIT

    def __init__(self, message: str):
        self.message = message.strip() if message else ""
        super().__init__(self.message)


class UsageError(AppError):
    """Caller error; no state was changed."""

    kind = "usage"
    exit_code = ExitCode.USAGE


class SelectionCancelledError(UsageError):
    """The interactive picker was dismissed without a selection."""

    def __init__(self, message: str = "selection cancelled"):
        super().__init__(message)


class GitFailureError(AppError):
    """Exception raised when a git invocation fails for an unclassified reason."""

    kind = "git"
    exit_code = ExitCode.GIT

    def __init__(self, message: str, command: Optional[str] = None, status: Optional[int] = None):
        self.command = command
        self.status = status
        super().__init__(message)


class NotARepositoryError(AppError):
    """Exception raised when the repository root cannot be resolved."""

    kind = "not_a_repository"
    exit_code = ExitCode.NOT_A_REPO


class InvariantViolationError(AppError):
    """Exception raised when an operation would cross a protected boundary."""

    kind = "invariant"
    exit_code = ExitCode.INVARIANT


class ConflictError(AppError):
    """Exception raised when repository state is incompatible with the request."""

    kind = "conflict"
    exit_code = ExitCode.CONFLICT


def classify_git_error(
    stderr: str, command: Optional[str] = None, status: Optional[int] = None
) -> AppError:
    """Map git's stderr text to an error kind.

    Args:
        stderr: Raw error text reported by git
        command: The git command line, for diagnostics
        status: Process exit status

    Returns:
        NotARepositoryError, ConflictError or GitFailureError (the fallback)
    """
    message = (stderr or "").strip()
    lowered = message.lower()

    if NOT_A_REPO_PATTERN in lowered:
        return NotARepositoryError(message)

    if any(pattern in lowered for pattern in CONFLICT_PATTERNS):
        return ConflictError(message)

    if not message:
        message = f"git command failed with exit code {status}" if status is not None else "git command failed"
    return GitFailureError(message, command=command, status=status)
