"""Tests for relisten.config -- environment-driven settings."""

import importlib

import pytest

import relisten.config


@pytest.fixture
def reload_config(monkeypatch):
    """Reload relisten.config after env changes, restoring it afterwards."""

    def _reload():
        return importlib.reload(relisten.config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(relisten.config)


class TestDefaults:

    def test_defaults(self, monkeypatch, reload_config):
        for name in (
            "RELISTEN_LOCALE",
            "RELISTEN_STT_MODEL",
            "RELISTEN_AUDIO_SAMPLE_RATE",
            "RELISTEN_FAILURE_DELAY",
        ):
            monkeypatch.delenv(name, raising=False)
        config = reload_config()
        assert config.LOCALE == "en-US"
        assert config.STT_MODEL == "whisper-1"
        assert config.AUDIO_SAMPLE_RATE == 16000
        assert config.STT_FAILURE_DELAY == 1.0
        assert config.MAX_ALTERNATIVES == 1
        assert config.GRAMMAR_WEIGHT == 1.0


class TestOverrides:

    def test_env_overrides(self, monkeypatch, reload_config):
        monkeypatch.setenv("RELISTEN_LOCALE", "de-DE")
        monkeypatch.setenv("RELISTEN_AUDIO_SAMPLE_RATE", "8000")
        monkeypatch.setenv("RELISTEN_SILENCE_DURATION", "1.5")
        config = reload_config()
        assert config.LOCALE == "de-DE"
        assert config.AUDIO_SAMPLE_RATE == 8000
        assert config.STT_SILENCE_DURATION == 1.5

    def test_invalid_numbers_fall_back(self, monkeypatch, reload_config):
        monkeypatch.setenv("RELISTEN_AUDIO_SAMPLE_RATE", "fast")
        monkeypatch.setenv("RELISTEN_STT_TIMEOUT", "soon")
        config = reload_config()
        assert config.AUDIO_SAMPLE_RATE == 16000
        assert config.STT_TIMEOUT == 10.0
