"""
Tests for the Command-line Entry Point and Router Factory

Commands run against a temporary data directory; transcription uses a
router with mocked adapters.
"""

import json

import pytest
from moto import mock_aws
from unittest.mock import AsyncMock, Mock, patch

import main
from config import AppConfig
from transcription import (
    CredentialStore,
    MemoryStore,
    ModelFamily,
    ModelRegistry,
    ModelUnavailableError,
    RawTranscription,
    TranscriptionRouter,
    build_router,
)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("MINUTES_DATA_DIR", str(tmp_path))
    for name in ("MINUTES_MODELS_DIR", "MINUTES_DEFAULT_MODEL", "MINUTES_AWS_BUCKET"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def mock_router(text: str = "[00:02] Hello team", progress_sink=None) -> TranscriptionRouter:
    adapters = {}
    for family in ModelFamily:
        adapter = Mock()
        adapter.transcribe = AsyncMock(return_value=RawTranscription(text=text))
        adapter.aclose = AsyncMock()
        adapters[family] = adapter
    return TranscriptionRouter(
        registry=ModelRegistry(),
        credentials=CredentialStore(MemoryStore()),
        adapters=adapters,
        preferences=MemoryStore(),
        default_model_id="whisper-base",
        progress_sink=progress_sink,
    )


class TestBuildRouter:
    """Tests for build_router."""

    @pytest.mark.asyncio
    async def test_wires_every_family(self, tmp_path):
        router = build_router(AppConfig(data_dir=tmp_path))
        try:
            assert set(router.adapters) == set(ModelFamily)
            assert "aws" not in router.adapters[ModelFamily.SPEECH_API].providers
            assert router.get_active_model().id == "whisper-base"
        finally:
            await router.aclose()

    @pytest.mark.asyncio
    async def test_settings_persist(self, tmp_path):
        config = AppConfig(data_dir=tmp_path)
        router = build_router(config)
        router.set_credential("groq", "gsk-test")
        router.set_active_model("groq-whisper-v3")
        await router.aclose()

        reopened = build_router(config)
        try:
            assert reopened.get_active_model().id == "groq-whisper-v3"
            assert reopened.is_configured("groq-distil-whisper")
        finally:
            await reopened.aclose()

    @pytest.mark.asyncio
    async def test_aws_unavailable_without_bucket(self, tmp_path):
        """Amazon Transcribe cannot be selected when it is not wired."""
        router = build_router(AppConfig(data_dir=tmp_path))
        try:
            assert router.is_configured("aws-transcribe") is False
            assert router.registry.get_model("aws-transcribe").is_available is False
            with pytest.raises(ModelUnavailableError):
                router.set_active_model("aws-transcribe")
        finally:
            await router.aclose()

    @pytest.mark.asyncio
    async def test_aws_available_with_bucket(self, tmp_path):
        with mock_aws():
            router = build_router(AppConfig(data_dir=tmp_path, aws_bucket="meeting-audio"))
        try:
            assert "aws" in router.adapters[ModelFamily.SPEECH_API].providers
            assert router.is_configured("aws-transcribe") is True
            assert router.set_active_model("aws-transcribe").id == "aws-transcribe"
        finally:
            await router.aclose()


class TestParser:
    """Tests for build_parser."""

    def test_transcribe_args(self):
        args = main.build_parser().parse_args(["transcribe", "call.wav", "--model", "m", "--json"])
        assert args.command == "transcribe"
        assert args.file == "call.wav"
        assert args.model == "m"
        assert args.json is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args([])


class TestMain:
    """Tests for main()."""

    def test_models(self, data_dir, capsys):
        assert main.main(["models"]) == 0
        out = capsys.readouterr().out
        assert "* whisper-base" in out
        assert "revai" in out and "unavailable" in out
        assert "needs key 'gemini'" in out

    def test_set_key_then_use(self, data_dir, capsys):
        assert main.main(["set-key", "groq", "gsk-test"]) == 0
        assert main.main(["use", "groq-whisper-v3-turbo"]) == 0

        settings = json.loads((data_dir / "settings.json").read_text())
        assert settings["api_key.groq"] == "gsk-test"
        assert settings["active_transcription_model"] == "groq-whisper-v3-turbo"

    def test_set_key_rejects_blank(self, data_dir, capsys):
        assert main.main(["set-key", "groq", "  "]) == 1

    def test_use_without_key(self, data_dir, capsys):
        assert main.main(["use", "deepgram-nova"]) == 1
        err = capsys.readouterr().err
        assert "minutes set-key deepgram" in err

    def test_use_unknown_model(self, data_dir, capsys):
        assert main.main(["use", "nope"]) == 1
        assert "minutes models" in capsys.readouterr().err

    def test_transcribe_missing_weights(self, data_dir, wav_path, capsys):
        assert main.main(["transcribe", str(wav_path)]) == 1
        assert "MINUTES_MODELS_DIR" in capsys.readouterr().err

    def test_invalid_config(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv("MINUTES_POLL_MAX_ATTEMPTS", "0")
        assert main.main(["models"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_unparseable_number(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv("MINUTES_POLL_INTERVAL", "soon")
        assert main.main(["models"]) == 1
        assert "Configuration error: MINUTES_POLL_INTERVAL" in capsys.readouterr().err

    def test_unknown_default_model(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv("MINUTES_DEFAULT_MODEL", "whisper-huge")
        assert main.main(["models"]) == 1
        assert "whisper-huge" in capsys.readouterr().err

    def test_transcribe_prints_segments(self, data_dir, wav_path, capsys):
        def fake_build_router(config, progress_sink=None):
            return mock_router(progress_sink=progress_sink)

        with patch("main.build_router", side_effect=fake_build_router):
            assert main.main(["transcribe", str(wav_path)]) == 0

        captured = capsys.readouterr()
        assert "[00:02] Hello team" in captured.out
        assert "completed" in captured.err

    def test_transcribe_json(self, data_dir, wav_path, capsys):
        with patch("main.build_router", return_value=mock_router("plain words")):
            assert main.main(["transcribe", str(wav_path), "--json"]) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["text"] == "plain words"
        assert result["model_id"] == "whisper-base"
        assert result["segments"] is None
