"""Tests for merging a worktree's branch into mainline."""
from pathlib import Path

import pytest

from wt_core.config import Config
from wt_core.core import WorktreeKeeper
from wt_core.exceptions import ConflictError, InvariantViolationError
from wt_core.models.branch import BranchName
from wt_core.models.worktree import RepositoryRoot

from conftest import add_worktree, branch_exists, commit_file


class TestMerge:
    """Test the merge lifecycle end to end."""

    def test_merge_and_cleanup(self, keeper, git_repo):
        """Test that merge creates a merge commit and removes worktree and branch."""
        path = add_worktree(keeper, "feature/ship", content="shipped\n")

        result = keeper.merge(BranchName("feature/ship"))

        assert result.mainline == "main"
        assert result.cleaned_up
        assert result.removed_path == path
        assert not result.pushed
        assert not path.exists()
        assert not branch_exists(git_repo, "feature/ship")
        assert (Path(git_repo.working_dir) / "feature_ship.txt").exists()
        # --no-ff always records a merge commit
        assert len(git_repo.head.commit.parents) == 2
        assert [wt.branch.value for wt in keeper.list().worktrees] == ["main"]

    def test_merge_no_cleanup(self, keeper, git_repo):
        """Test that --no-cleanup keeps the worktree and branch."""
        path = add_worktree(keeper, "feature/keep", content="kept\n")

        result = keeper.merge(BranchName("feature/keep"), cleanup=False)

        assert not result.cleaned_up
        assert result.removed_path is None
        assert path.exists()
        assert branch_exists(git_repo, "feature/keep")
        assert keeper.merge_detector.is_integrated(BranchName("feature/keep"), "main")

    def test_merge_infers_branch_from_cwd(self, keeper, repo_root):
        """Test that merge without a branch uses the worktree containing cwd."""
        path = add_worktree(keeper, "feature/here", content="here\n")
        inside = WorktreeKeeper(repo_root, Config(), cwd=path)

        result = inside.merge()

        assert result.branch == BranchName("feature/here")

    def test_merge_conflict_aborts(self, keeper, git_repo):
        """Test that a conflicting merge is aborted and main is left clean."""
        repo_path = Path(git_repo.working_dir)
        path = add_worktree(keeper, "feature/clash")
        commit_file(path, "README.md", "branch version\n", "Branch edit")
        commit_file(repo_path, "README.md", "main version\n", "Main edit")
        head_before = git_repo.git.rev_parse("HEAD")

        with pytest.raises(ConflictError, match="merge conflicts with 'feature/clash'"):
            keeper.merge(BranchName("feature/clash"))

        assert git_repo.git.rev_parse("HEAD") == head_before
        assert git_repo.git.status("--porcelain", "--untracked-files=no") == ""
        assert not (repo_path / ".git" / "MERGE_HEAD").exists()
        assert path.exists()
        assert branch_exists(git_repo, "feature/clash")

    def test_merge_blocked_by_untracked_file_is_conflict(self, keeper, git_repo):
        """Test that a merge git refuses to start is aborted and reported as a conflict."""
        repo_path = Path(git_repo.working_dir)
        path = add_worktree(keeper, "feature/new")
        commit_file(path, "feature_new.txt", "from branch\n", "Add file")
        (repo_path / "feature_new.txt").write_text("untracked in main\n")
        head_before = git_repo.git.rev_parse("HEAD")

        with pytest.raises(ConflictError, match="merge aborted"):
            keeper.merge(BranchName("feature/new"))

        assert git_repo.git.rev_parse("HEAD") == head_before
        assert (repo_path / "feature_new.txt").read_text() == "untracked in main\n"
        assert not (repo_path / ".git" / "MERGE_HEAD").exists()
        assert path.exists()
        assert branch_exists(git_repo, "feature/new")

    def test_merge_main_refused(self, keeper):
        """Test that the main worktree cannot be merged into itself."""
        with pytest.raises(InvariantViolationError, match="refusing to merge the main worktree"):
            keeper.merge(BranchName("main"))

    def test_merge_from_main_without_branch(self, keeper):
        """Test that inferring from the main worktree hits the main guard."""
        add_worktree(keeper, "feature/x", content="x\n")
        with pytest.raises(InvariantViolationError):
            keeper.merge()

    def test_merge_main_off_mainline(self, keeper, git_repo):
        """Test that merge refuses while the main worktree is on another branch."""
        add_worktree(keeper, "feature/x", content="x\n")
        git_repo.git.checkout("-b", "side")

        with pytest.raises(InvariantViolationError, match="main worktree is on 'side', expected 'main'"):
            keeper.merge(BranchName("feature/x"))

    def test_merge_dirty_main_conflicts(self, keeper, git_repo):
        """Test that tracked changes in the main worktree block the merge."""
        add_worktree(keeper, "feature/x", content="x\n")
        (Path(git_repo.working_dir) / "README.md").write_text("local edit\n")
        head_before = git_repo.git.rev_parse("HEAD")

        with pytest.raises(ConflictError, match="uncommitted changes"):
            keeper.merge(BranchName("feature/x"))

        assert git_repo.git.rev_parse("HEAD") == head_before

    def test_merge_dirty_worktree_keeps_it(self, keeper, git_repo):
        """Test that a dirty worktree is merged but not cleaned up."""
        path = add_worktree(keeper, "feature/messy", content="committed\n")
        (path / "scratch.txt").write_text("not committed")

        result = keeper.merge(BranchName("feature/messy"))

        assert not result.cleaned_up
        assert result.warnings
        assert path.exists()
        assert keeper.merge_detector.is_integrated(BranchName("feature/messy"), "main")

    def test_merge_without_mainline(self, keeper, git_repo):
        """Test that an undeterminable mainline stops merge before anything happens."""
        add_worktree(keeper, "feature/x", content="x\n")
        git_repo.git.checkout("--detach")
        git_repo.git.branch("-m", "main", "trunk")

        with pytest.raises(InvariantViolationError, match="could not determine mainline"):
            keeper.merge(BranchName("feature/x"))


class TestMergePush:
    """Test pushing mainline after a merge."""

    def test_merge_push_updates_origin(self, git_repo_with_origin, temp_dir):
        """Test that --push sends the merge commit to the remote."""
        repo = git_repo_with_origin
        root = RepositoryRoot.from_path(repo.working_dir)
        keeper = WorktreeKeeper(root, Config(), cwd=root.path)
        add_worktree(keeper, "feature/pushed", content="pushed\n")

        result = keeper.merge(BranchName("feature/pushed"), push=True)

        assert result.pushed
        origin_main = repo.git.ls_remote("origin", "refs/heads/main").split()[0]
        assert origin_main == repo.git.rev_parse("main")

    def test_push_failure_is_warning(self, keeper, git_repo):
        """Test that a failed push after a merge is reported, not raised."""
        add_worktree(keeper, "feature/nowhere", content="x\n")

        result = keeper.merge(BranchName("feature/nowhere"), push=True)

        assert not result.pushed
        assert result.cleaned_up
        assert any("push" in warning for warning in result.warnings)
