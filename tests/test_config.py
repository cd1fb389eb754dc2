"""Tests for the configuration module."""

from pathlib import Path

import pytest

from taski.config import MIN_SYNC_INTERVAL, Settings, load_settings


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test in an empty directory with a private HOME."""
    for name in (
        "TASKI_GIT_AUTO_SYNC",
        "TASKI_GIT_SYNC_INTERVAL",
        "TASKI_ADDITIONAL_DIRECTORIES",
        "TASKI_EXCLUDE_DIRECTORIES",
        "TASKI_INCLUDE_WORKSPACE",
        "TASKI_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestSettings:
    """Test Settings class."""

    def test_default_values(self, isolated_env: Path):
        """Test default configuration values."""
        settings = Settings()
        assert settings.git_auto_sync is True
        assert settings.git_sync_interval == MIN_SYNC_INTERVAL
        assert settings.additional_directories == []
        assert settings.exclude_directories == []
        assert settings.include_workspace is False
        assert settings.log_level == "INFO"
        assert settings.taski_dir == isolated_env / "taski"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        """Test values from TASKI_ environment variables."""
        monkeypatch.setenv("TASKI_GIT_AUTO_SYNC", "false")
        monkeypatch.setenv("TASKI_GIT_SYNC_INTERVAL", "120")
        monkeypatch.setenv("TASKI_LOG_LEVEL", "DEBUG")

        settings = Settings()
        assert settings.git_auto_sync is False
        assert settings.git_sync_interval == 120
        assert settings.log_level == "DEBUG"

    def test_comma_separated_lists(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch):
        """Test list settings parse from comma-separated strings."""
        monkeypatch.setenv("TASKI_ADDITIONAL_DIRECTORIES", "~/work, /srv/notes")
        monkeypatch.setenv("TASKI_EXCLUDE_DIRECTORIES", "**/archive/**,**/tmp")

        settings = Settings()
        assert settings.additional_directories == [isolated_env / "work", Path("/srv/notes")]
        assert settings.exclude_directories == ["**/archive/**", "**/tmp"]

    def test_empty_list_value(self, monkeypatch: pytest.MonkeyPatch):
        """Test an empty list setting."""
        monkeypatch.setenv("TASKI_EXCLUDE_DIRECTORIES", "")
        assert Settings().exclude_directories == []

    @pytest.mark.parametrize(("configured", "effective"), [(5, 30), (30, 30), (300, 300)])
    def test_interval_clamped(self, configured: int, effective: int):
        """Test the effective interval never drops below the minimum."""
        settings = Settings(git_sync_interval=configured)
        assert settings.git_sync_interval == configured
        assert settings.sync_interval_seconds == effective


class TestLoadSettings:
    """Test load_settings function."""

    def test_load_from_specified_root(self, tmp_path: Path):
        """Test loading settings from root/.env."""
        root = tmp_path / "project"
        root.mkdir()
        (root / ".env").write_text("TASKI_GIT_SYNC_INTERVAL=90\n")

        settings = load_settings(root)
        assert settings.git_sync_interval == 90

    def test_load_from_taski_subdir(self, tmp_path: Path):
        """Test falling back to root/.taski/.env."""
        root = tmp_path / "project"
        (root / ".taski").mkdir(parents=True)
        (root / ".taski" / ".env").write_text("TASKI_INCLUDE_WORKSPACE=true\n")

        settings = load_settings(root)
        assert settings.include_workspace is True

    def test_load_without_root(self):
        """Test loading settings without a root."""
        assert load_settings().git_auto_sync is True

    def test_invalid_value_exits(self, monkeypatch: pytest.MonkeyPatch, capsys):
        """Test an invalid value prints help and exits."""
        monkeypatch.setenv("TASKI_GIT_SYNC_INTERVAL", "soon")

        with pytest.raises(SystemExit) as exc_info:
            load_settings()

        assert exc_info.value.code == 1
        assert "taski Configuration Error" in capsys.readouterr().out
