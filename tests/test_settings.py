"""Tests for engine settings."""
import pytest
from eos_manager.config.settings import EngineSettings


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self):
        settings = EngineSettings()
        assert settings.command_timeout == 30.0
        assert settings.history_max_size is None
        assert settings.min_command_interval == 0.0
        assert settings.stop_on_error is False

    def test_zero_history_means_unbounded(self):
        assert EngineSettings(history_max_size=0).history_max_size is None

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            EngineSettings(command_timeout=0)

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            EngineSettings(min_command_interval=-1)

    def test_from_dict_ignores_unknown(self):
        settings = EngineSettings.from_dict({"command_timeout": 5, "colour": "blue"})
        assert settings.command_timeout == 5

    def test_from_dict_none(self):
        assert EngineSettings.from_dict(None) == EngineSettings()


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides_base(self, monkeypatch):
        monkeypatch.setenv("EOS_MANAGER_COMMAND_TIMEOUT", "12.5")
        monkeypatch.setenv("EOS_MANAGER_HISTORY_MAX", "50")
        monkeypatch.setenv("EOS_MANAGER_COMMAND_INTERVAL", "0.2")
        monkeypatch.setenv("EOS_MANAGER_STOP_ON_ERROR", "1")
        settings = EngineSettings.from_env(EngineSettings(command_timeout=5))
        assert settings.command_timeout == 12.5
        assert settings.history_max_size == 50
        assert settings.min_command_interval == 0.2
        assert settings.stop_on_error is True

    def test_base_kept_without_env(self, monkeypatch):
        for var in (
            "EOS_MANAGER_COMMAND_TIMEOUT",
            "EOS_MANAGER_HISTORY_MAX",
            "EOS_MANAGER_COMMAND_INTERVAL",
            "EOS_MANAGER_STOP_ON_ERROR",
        ):
            monkeypatch.delenv(var, raising=False)
        base = EngineSettings(command_timeout=7, history_max_size=3)
        assert EngineSettings.from_env(base) == base

    def test_history_zero_from_env(self, monkeypatch):
        monkeypatch.setenv("EOS_MANAGER_HISTORY_MAX", "0")
        assert EngineSettings.from_env(EngineSettings(history_max_size=10)).history_max_size is None
