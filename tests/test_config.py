"""Tests for environment-driven configuration in config.py"""

import pytest

from telemetry_analyst.config import (
    DEFAULT_MODEL,
    DEFAULT_THINKING_BUDGET,
    ModelSettings,
    load_env,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test from an empty dir with no TELEMETRY_* variables."""
    for var in ("TELEMETRY_MODEL", "TELEMETRY_THINKING_BUDGET", "TELEMETRY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestModelSettings:
    """Tests for ModelSettings validation."""
    def test_defaults(self):
        """Defaults are the standard model with the default thinking budget."""
        s = ModelSettings()
        assert s.model_name == DEFAULT_MODEL
        assert s.thinking_budget == DEFAULT_THINKING_BUDGET

    def test_negative_budget_rejected(self):
        """A negative thinking budget is invalid."""
        with pytest.raises(ValueError):
            ModelSettings(thinking_budget=-1)


class TestLoadSettings:
    """Tests for the load_settings function."""

    def test_defaults_without_env(self):
        """No environment variables means built-in defaults."""
        settings = load_settings()
        assert settings.model.model_name == DEFAULT_MODEL
        assert settings.log_level == "INFO"

    def test_reads_environment(self, monkeypatch):
        """Model, budget and log level come from TELEMETRY_* variables."""
        monkeypatch.setenv("TELEMETRY_MODEL", "gemini-2.5-flash")
        monkeypatch.setenv("TELEMETRY_THINKING_BUDGET", "512")
        monkeypatch.setenv("TELEMETRY_LOG_LEVEL", "debug")

        settings = load_settings()
        assert settings.model == ModelSettings("gemini-2.5-flash", 512)
        assert settings.log_level == "DEBUG"

    def test_invalid_budget(self, monkeypatch):
        """A non-integer budget names the offending variable."""
        monkeypatch.setenv("TELEMETRY_THINKING_BUDGET", "lots")
        with pytest.raises(ValueError, match="TELEMETRY_THINKING_BUDGET"):
            load_settings()

    def test_reads_dotenv_file(self, tmp_path, monkeypatch):
        """An explicit env file is loaded before reading settings."""
        # registered first so monkeypatch removes the dotenv value afterwards
        monkeypatch.setenv("TELEMETRY_THINKING_BUDGET", "0")
        env_file = tmp_path / "custom.env"
        env_file.write_text("TELEMETRY_THINKING_BUDGET=128\n", encoding="utf-8")

        settings = load_settings(env_file)
        assert settings.model.thinking_budget == 128

    def test_returns_fresh_values(self):
        """No module-level caching between calls."""
        assert load_settings() is not load_settings()


class TestLoadEnv:
    """Tests for the load_env function."""
    def test_missing_file(self, tmp_path):
        """A missing env file is reported, not raised."""
        assert load_env(tmp_path / "absent.env") is False

    def test_default_location(self, tmp_path, monkeypatch):
        """Without a path, .env in the working directory is used."""
        monkeypatch.setenv("TELEMETRY_MODEL", DEFAULT_MODEL)
        (tmp_path / ".env").write_text("TELEMETRY_MODEL=gemini-2.5-flash\n", encoding="utf-8")
        assert load_env() is True
