"""Tests for the worktree health check."""
import shutil

from wt_core.models.results import DiagLevel

from conftest import add_worktree


def _levels(report):
    return [d.level for d in report.diagnostics]


class TestDoctor:
    """Test diagnostics reported by doctor."""

    def test_fresh_repository(self, keeper):
        """Test that a repo without .worktrees reports that and is ok."""
        report = keeper.doctor()

        assert report.ok
        assert len(report.diagnostics) == 1
        assert report.diagnostics[0].level == DiagLevel.OK
        assert "no .worktrees directory" in report.diagnostics[0].message

    def test_healthy(self, keeper):
        """Test that managed worktrees in good shape report healthy."""
        add_worktree(keeper, "feature/a")
        add_worktree(keeper, "feature/b")

        report = keeper.doctor()

        assert report.ok
        assert [d.message for d in report.diagnostics] == ["all worktrees healthy"]

    def test_missing_registered_directory(self, keeper):
        """Test that a registered worktree missing on disk is an error."""
        path = add_worktree(keeper, "feature/gone")
        shutil.rmtree(path)

        report = keeper.doctor()

        assert not report.ok
        errors = [d for d in report.diagnostics if d.level == DiagLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].path == path

    def test_unregistered_directory(self, keeper, repo_root):
        """Test that a stray directory under .worktrees is a warning."""
        add_worktree(keeper, "feature/a")
        stray = repo_root.worktrees_dir / "stray"
        stray.mkdir()

        report = keeper.doctor()

        assert report.ok
        warnings = [d for d in report.diagnostics if d.level == DiagLevel.WARN]
        assert [w.path for w in warnings] == [stray]

    def test_detached_and_locked(self, keeper, git_repo, repo_root):
        """Test that detached and locked worktrees are warnings."""
        path = add_worktree(keeper, "feature/locked")
        git_repo.git.worktree("lock", str(path))
        git_repo.git.worktree("add", "--detach", str(repo_root.worktrees_dir / "loose"))

        messages = [d.message for d in keeper.doctor().diagnostics]

        assert any("locked" in m for m in messages)
        assert any("detached HEAD" in m for m in messages)
        assert DiagLevel.ERROR not in _levels(keeper.doctor())

    def test_slug_mismatch(self, keeper, git_repo, repo_root):
        """Test that a managed directory named for another branch is a warning."""
        wrong = repo_root.worktrees_dir / "not-the-slug--00000000"
        repo_root.worktrees_dir.mkdir()
        git_repo.git.worktree("add", "-b", "feature/real", str(wrong))

        report = keeper.doctor()

        mismatches = [d for d in report.diagnostics if "does not match" in d.message]
        assert len(mismatches) == 1
        assert mismatches[0].path == wrong

    def test_main_detached(self, keeper, git_repo):
        """Test that a detached main worktree is a warning."""
        git_repo.git.checkout("--detach")

        report = keeper.doctor()

        assert report.ok
        assert any(
            d.level == DiagLevel.WARN and "main worktree" in d.message for d in report.diagnostics
        )

    def test_doctor_is_read_only(self, keeper, git_repo):
        """Test that doctor does not prune missing registrations."""
        path = add_worktree(keeper, "feature/gone")
        shutil.rmtree(path)

        keeper.doctor()

        assert len(keeper.list().worktrees) == 2
