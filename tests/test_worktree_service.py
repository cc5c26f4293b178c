"""Tests for the git process interface and worktree registry service."""
from pathlib import Path

import pytest

from wt_core.exceptions import ConflictError, GitFailureError, NotARepositoryError
from wt_core.models.branch import BranchName
from wt_core.services.git import BranchQueries, GitRunner, WorktreeService, resolve_repo_root
from wt_core.services.git.worktrees import parse_status_porcelain, parse_worktree_porcelain

from conftest import commit_file


class TestParseWorktreePorcelain:
    """Test parsing of ``git worktree list --porcelain``."""

    def test_main_and_linked(self, temp_dir):
        """Test that the first entry is main and branches are unprefixed."""
        linked = temp_dir / ".worktrees" / "feature-x--00000000"
        linked.mkdir(parents=True)
        output = (
            f"worktree {temp_dir}\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "branch refs/heads/main\n"
            "\n"
            f"worktree {linked}\n"
            "HEAD 2222222222222222222222222222222222222222\n"
            "branch refs/heads/feature/x\n"
            "\n"
        )

        worktrees = parse_worktree_porcelain(output)

        assert len(worktrees) == 2
        main, wt = worktrees
        assert main.is_main and not wt.is_main
        assert main.branch == BranchName("main")
        assert wt.branch == BranchName("feature/x")
        assert wt.path == linked
        assert wt.short_sha == "2222222"
        assert not wt.is_orphaned

    def test_detached_locked_prunable_and_missing(self, temp_dir):
        """Test flags for detached, locked, prunable and missing entries."""
        missing = temp_dir / "gone"
        output = (
            f"worktree {temp_dir}\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "detached\n"
            "\n"
            f"worktree {missing}\n"
            "HEAD 2222222222222222222222222222222222222222\n"
            "branch refs/heads/old\n"
            "locked reason here\n"
            "prunable gitdir file points to non-existent location\n"
        )

        main, wt = parse_worktree_porcelain(output)

        assert main.branch is None
        assert main.is_main
        assert wt.is_locked
        assert wt.is_prunable
        assert wt.is_orphaned

    def test_bare_entry_skipped(self, temp_dir):
        """Test that a bare repository entry is not treated as the main worktree."""
        output = (
            "worktree /srv/repo.git\n"
            "bare\n"
            "\n"
            f"worktree {temp_dir}\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "branch refs/heads/main\n"
        )

        worktrees = parse_worktree_porcelain(output)

        assert len(worktrees) == 1
        assert worktrees[0].is_main
        assert worktrees[0].path == temp_dir

    def test_empty_output(self):
        """Test that empty output gives no worktrees."""
        assert parse_worktree_porcelain("") == []


class TestParseStatusPorcelain:
    """Test parsing of ``git status --porcelain``."""

    def test_clean(self):
        """Test that empty output is clean."""
        status = parse_status_porcelain("")
        assert not status.is_dirty

    def test_flags(self):
        """Test modified, staged, untracked and unmerged detection."""
        status = parse_status_porcelain(" M a.txt\nA  b.txt\n?? c.txt\nUU d.txt")

        assert status.modified
        assert status.staged
        assert status.untracked
        assert status.unmerged
        assert status.is_dirty
        assert status.files == ["a.txt", "b.txt", "c.txt", "d.txt"]

    def test_untracked_only_is_dirty(self):
        """Test that untracked files alone make a worktree dirty."""
        status = parse_status_porcelain("?? new.txt")
        assert status.untracked and not status.modified
        assert status.is_dirty


class TestGitRunner:
    """Test the process interface against a real repository."""

    def test_run_returns_stripped_stdout(self, git_repo):
        """Test that stdout comes back without the trailing newline."""
        runner = GitRunner(git_repo.working_dir)
        assert runner.run(["rev-parse", "--abbrev-ref", "HEAD"]) == "main"

    def test_run_status_does_not_raise(self, git_repo):
        """Test that exit codes are reported rather than raised."""
        runner = GitRunner(git_repo.working_dir)
        result = runner.run_status(["rev-parse", "--verify", "--quiet", "refs/heads/nope"])
        assert result.status == 1
        assert not result.ok

    def test_run_raises_classified_error(self, git_repo):
        """Test that a failing command raises the classified error."""
        runner = GitRunner(git_repo.working_dir)
        with pytest.raises(ConflictError):
            runner.run(["branch", "main"])  # fatal: a branch named 'main' already exists

    def test_run_outside_repository(self, temp_dir):
        """Test that running outside a repository raises NotARepositoryError."""
        runner = GitRunner(temp_dir)
        with pytest.raises(NotARepositoryError):
            runner.run(["status"])

    def test_unknown_failure_is_git_failure(self, git_repo):
        """Test that unclassified stderr falls back to GitFailureError."""
        runner = GitRunner(git_repo.working_dir)
        with pytest.raises(GitFailureError) as exc_info:
            runner.run(["rev-parse", "--verify", "does-not-exist^{commit}"])
        assert exc_info.value.status != 0


class TestResolveRepoRoot:
    """Test repository root resolution."""

    def test_from_root(self, git_repo):
        """Test resolving from the root itself."""
        repo = resolve_repo_root(git_repo.working_dir)
        assert repo.path == Path(git_repo.working_dir).resolve()

    def test_from_subdirectory(self, git_repo):
        """Test resolving from a nested directory."""
        nested = Path(git_repo.working_dir) / "a" / "b"
        nested.mkdir(parents=True)
        assert resolve_repo_root(nested).path == Path(git_repo.working_dir).resolve()

    def test_from_linked_worktree(self, git_repo, keeper):
        """Test that a linked worktree resolves to the main worktree root."""
        result = keeper.add(BranchName("feature/root"))
        assert resolve_repo_root(result.worktree_path).path == Path(git_repo.working_dir).resolve()

    def test_not_a_repository(self, temp_dir):
        """Test that a plain directory is rejected."""
        with pytest.raises(NotARepositoryError, match="not a git repository"):
            resolve_repo_root(temp_dir)

    def test_missing_directory(self, temp_dir):
        """Test that a non-existent path is rejected."""
        with pytest.raises(NotARepositoryError):
            resolve_repo_root(temp_dir / "nope")


class TestWorktreeService:
    """Test registry operations against a real repository."""

    def test_list_main_only(self, repo_root):
        """Test a fresh repository has only the main worktree."""
        worktrees = WorktreeService(repo_root).list_worktrees()
        assert len(worktrees) == 1
        assert worktrees[0].is_main
        assert worktrees[0].branch == BranchName("main")

    def test_add_failure_rolls_back_directory(self, repo_root):
        """Test that a failed add leaves neither directory nor branch behind."""
        service = WorktreeService(repo_root)
        branch = BranchName("feature/bad-start")
        path = repo_root.worktree_path(branch)

        with pytest.raises(GitFailureError):
            service.add_worktree(path, branch, "no-such-revision")

        assert not path.exists()
        assert not BranchQueries(repo_root).branch_exists(branch)
        assert len(service.list_worktrees()) == 1

    def test_main_dirty_ignores_worktrees_dir(self, git_repo, keeper):
        """Test that linked worktrees don't make the main worktree look dirty."""
        keeper.add(BranchName("feature/side"))
        main = keeper.worktree_service.list_worktrees()[0]

        assert keeper.worktree_service.is_dirty(main) is False

        (Path(git_repo.working_dir) / "scratch.txt").write_text("x")
        assert keeper.worktree_service.is_dirty(main) is True

    def test_linked_dirty_and_clean(self, keeper):
        """Test dirty detection inside a linked worktree."""
        path = keeper.add(BranchName("feature/dirt")).worktree_path
        wt = keeper.worktree_service.find_by_branch(
            keeper.worktree_service.list_worktrees(), BranchName("feature/dirt")
        )
        assert keeper.worktree_service.is_dirty(wt) is False

        commit_file(path, "a.txt", "a\n", "Add a")
        assert keeper.worktree_service.is_dirty(wt) is False

        (path / "a.txt").write_text("changed\n")
        assert keeper.worktree_service.is_dirty(wt) is True
        assert keeper.worktree_service.is_dirty(wt, include_untracked=False) is True

    def test_unregistered_directories(self, keeper, repo_root):
        """Test that stray directories under .worktrees are found."""
        keeper.add(BranchName("feature/known"))
        stray = repo_root.worktrees_dir / "stray"
        stray.mkdir()

        found = keeper.worktree_service.unregistered_directories(
            keeper.worktree_service.list_worktrees()
        )

        assert found == [stray]
