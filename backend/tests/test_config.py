"""
Tests for Configuration

Tests environment loading and validation of AppConfig.
"""

from pathlib import Path

import pytest

from config import AppConfig


ENV_VARS = [
    "MINUTES_DATA_DIR",
    "MINUTES_MODELS_DIR",
    "MINUTES_DEFAULT_MODEL",
    "MINUTES_POLL_INTERVAL",
    "MINUTES_POLL_MAX_ATTEMPTS",
    "MINUTES_HTTP_TIMEOUT",
    "MINUTES_ENFORCE_SIZE_LIMITS",
    "MINUTES_AWS_BUCKET",
    "MINUTES_OLLAMA_HOST",
    "MINUTES_SUMMARY_MODEL",
    "MINUTES_LOG_LEVEL",
    "AWS_REGION",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self, clean_env, tmp_path):
        clean_env.setenv("MINUTES_DATA_DIR", str(tmp_path))

        config = AppConfig.from_env()

        assert config.data_dir == tmp_path
        assert config.default_model == "whisper-base"
        assert config.poll_interval == 3.0
        assert config.poll_max_attempts == 200
        assert config.http_timeout is None
        assert config.enforce_size_limits is False
        assert config.aws_bucket is None
        assert config.settings_path == tmp_path / "settings.json"
        assert config.resolved_models_dir == tmp_path / "models"

    def test_overrides(self, clean_env, tmp_path):
        clean_env.setenv("MINUTES_DATA_DIR", str(tmp_path))
        clean_env.setenv("MINUTES_MODELS_DIR", str(tmp_path / "weights"))
        clean_env.setenv("MINUTES_DEFAULT_MODEL", "groq-whisper-v3")
        clean_env.setenv("MINUTES_POLL_INTERVAL", "0.5")
        clean_env.setenv("MINUTES_POLL_MAX_ATTEMPTS", "12")
        clean_env.setenv("MINUTES_HTTP_TIMEOUT", "30")
        clean_env.setenv("MINUTES_ENFORCE_SIZE_LIMITS", "yes")
        clean_env.setenv("MINUTES_AWS_BUCKET", "meeting-audio")
        clean_env.setenv("AWS_REGION", "eu-west-1")
        clean_env.setenv("MINUTES_LOG_LEVEL", "debug")

        config = AppConfig.from_env()

        assert config.resolved_models_dir == tmp_path / "weights"
        assert config.default_model == "groq-whisper-v3"
        assert config.poll_interval == 0.5
        assert config.poll_max_attempts == 12
        assert config.http_timeout == 30.0
        assert config.enforce_size_limits is True
        assert config.aws_bucket == "meeting-audio"
        assert config.aws_region == "eu-west-1"
        assert config.log_level == "DEBUG"

    def test_bad_number(self, clean_env):
        clean_env.setenv("MINUTES_POLL_MAX_ATTEMPTS", "lots")
        with pytest.raises(ValueError, match="MINUTES_POLL_MAX_ATTEMPTS"):
            AppConfig.from_env()

    def test_validate_ok(self, tmp_path):
        is_valid, errors = AppConfig(data_dir=tmp_path).validate()
        assert is_valid is True
        assert errors == []

    def test_validate_errors(self):
        config = AppConfig(
            data_dir=Path("/tmp"),
            poll_interval=-1,
            poll_max_attempts=0,
            http_timeout=0,
        )
        is_valid, errors = config.validate()
        assert is_valid is False
        assert len(errors) == 3
