"""Configuration handling for wt-core"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_REMOTE = "origin"
DEFAULT_WORKTREES_DIR = ".worktrees"
REMOTE_ENV_VAR = "WT_REMOTE"


@dataclass
class Config:
    """Per-invocation configuration for wt-core with validation."""

    # Repository location (None = current working directory)
    repo_path: Optional[str] = None

    # Git layout
    remote_name: str = ""
    worktrees_dir_name: str = DEFAULT_WORKTREES_DIR

    # Execution modes
    interactive: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_worktrees_dir_name()

    def _validate_remote_name(self):
        """Fill remote_name from the environment and make sure it is usable."""
        if not self.remote_name:
            self.remote_name = os.environ.get(REMOTE_ENV_VAR, "") or DEFAULT_REMOTE
        self.remote_name = self.remote_name.strip()
        if not self.remote_name or any(ch.isspace() for ch in self.remote_name):
            raise ValueError(f"remote_name must be a single word, got '{self.remote_name}'")

    def _validate_worktrees_dir_name(self):
        """Validate worktrees_dir_name is a single relative path component."""
        name = (self.worktrees_dir_name or "").strip()
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise ValueError(
                f"worktrees_dir_name must be a single directory name, got '{self.worktrees_dir_name}'"
            )
        self.worktrees_dir_name = name

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {
            "repo_path": self.repo_path,
            "remote_name": self.remote_name,
            "worktrees_dir_name": self.worktrees_dir_name,
            "interactive": self.interactive,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "repo_path",
            "remote_name",
            "worktrees_dir_name",
            "interactive",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
