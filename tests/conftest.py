"""Pytest fixtures for wt-core tests"""
import logging
import tempfile
from pathlib import Path

import pytest
import git

from wt_core.config import Config, REMOTE_ENV_VAR
from wt_core.core import WorktreeKeeper
from wt_core.models.branch import BranchName
from wt_core.models.worktree import RepositoryRoot
from wt_core.utils.logging import LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    monkeypatch.delenv(REMOTE_ENV_VAR, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers main() attached to the wt logger (they hold captured streams)."""
    yield
    wt_logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in wt_logger.handlers[:]:
        wt_logger.removeHandler(handler)
        handler.close()
    wt_logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def _configure(repo: git.Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on ``main``."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure(repo)

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_origin(git_repo, temp_dir):
    """``git_repo`` with a bare ``origin`` holding ``main`` and ``feature/remote``.

    ``feature/remote`` exists only as ``origin/feature/remote`` locally.
    """
    origin_path = temp_dir / "origin.git"
    git.Repo.init(origin_path, bare=True).close()

    repo = git_repo
    repo.create_remote("origin", str(origin_path))
    repo.git.push("-u", "origin", "main")

    repo.git.checkout("-b", "feature/remote")
    commit_file(Path(repo.working_dir), "remote.txt", "from the remote\n", "Remote work")
    repo.git.push("origin", "feature/remote")
    repo.git.checkout("main")
    repo.git.branch("-D", "feature/remote")

    yield repo


@pytest.fixture
def repo_root(git_repo):
    return RepositoryRoot.from_path(git_repo.working_dir)


@pytest.fixture
def keeper(repo_root):
    """Non-interactive keeper standing in the main worktree."""
    return WorktreeKeeper(repo_root, Config(), cwd=repo_root.path)


def commit_file(worktree_path: Path, name: str, content: str, message: str) -> str:
    """Write ``name`` in ``worktree_path``, commit it there and return the new sha."""
    (worktree_path / name).write_text(content)
    wt_git = git.Repo(worktree_path).git
    wt_git.add(name)
    wt_git.commit("-m", message)
    return wt_git.rev_parse("HEAD")


def branch_exists(repo: git.Repo, name: str) -> bool:
    return bool(repo.git.branch("--list", name).strip())


def add_worktree(keeper: WorktreeKeeper, name: str, content: str = None) -> Path:
    """Create a worktree for ``name``; with ``content``, also commit a file in it."""
    result = keeper.add(BranchName.parse(name))
    if content is not None:
        commit_file(result.worktree_path, f"{name.replace('/', '_')}.txt", content, f"Work on {name}")
    return result.worktree_path
