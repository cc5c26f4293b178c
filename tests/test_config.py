"""Tests for configuration handling"""
import pytest

from wt_core.config import Config, DEFAULT_REMOTE, REMOTE_ENV_VAR


class TestConfig:
    """Test Config defaults and validation."""

    def test_defaults(self):
        """Test the default configuration."""
        config = Config()
        assert config.repo_path is None
        assert config.remote_name == DEFAULT_REMOTE
        assert config.worktrees_dir_name == ".worktrees"
        assert not config.interactive

    def test_remote_from_environment(self, monkeypatch):
        """Test that WT_REMOTE overrides the default remote."""
        monkeypatch.setenv(REMOTE_ENV_VAR, "upstream")
        assert Config().remote_name == "upstream"

    def test_explicit_remote_wins(self, monkeypatch):
        monkeypatch.setenv(REMOTE_ENV_VAR, "upstream")
        assert Config(remote_name="fork").remote_name == "fork"

    def test_empty_environment_falls_back(self, monkeypatch):
        monkeypatch.setenv(REMOTE_ENV_VAR, "")
        assert Config().remote_name == DEFAULT_REMOTE

    def test_invalid_remote(self):
        """Test that a remote name with whitespace is rejected."""
        with pytest.raises(ValueError, match="remote_name"):
            Config(remote_name="my remote")

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b"])
    def test_invalid_worktrees_dir_name(self, name):
        """Test that the worktrees directory must be a single name."""
        with pytest.raises(ValueError, match="worktrees_dir_name"):
            Config(worktrees_dir_name=name)

    def test_from_dict_ignores_unknown_keys(self):
        """Test building a config from a dictionary."""
        config = Config.from_dict({"verbose": True, "remote_name": "up", "colour": "red"})
        assert config.verbose
        assert config.remote_name == "up"
        assert config.to_dict()["remote_name"] == "up"

    def test_get(self):
        config = Config(debug=True)
        assert config.get("debug") is True
        assert config.get("missing", "fallback") == "fallback"
