"""
Tests for the Gemini Adapter

Tests request construction and response handling against a mocked
HTTP transport.
"""

import base64
import json

import httpx
import pytest

from transcription import (
    AudioFile,
    BackendError,
    CredentialRequiredError,
    ModelRegistry,
    ProgressPhase,
)
from transcription.adapters import GeminiAdapter, TranscriptionRequest


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_adapter(handler) -> GeminiAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiAdapter(client=client)


@pytest.fixture
def flash_request(wav_path):
    model = ModelRegistry().get_model("gemini-2.5-flash-exp")
    return TranscriptionRequest(audio=AudioFile(wav_path), model=model, credential="AIza-test")


class TestGeminiAdapter:
    """Tests for GeminiAdapter."""

    @pytest.mark.asyncio
    async def test_request_shape(self, flash_request, wav_path):
        """Key goes in the query string, audio inline as base64."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_response("[00:01] Hello"))

        adapter = make_adapter(handler)
        raw = await adapter.transcribe(flash_request)
        await adapter.aclose()

        assert raw.text == "[00:01] Hello"
        assert raw.provider == "gemini"
        assert seen["url"].params["key"] == "AIza-test"
        assert seen["url"].path.endswith("/models/gemini-2.0-flash-exp:generateContent")

        parts = seen["body"]["contents"][0]["parts"]
        inline = parts[1]["inline_data"]
        assert inline["mime_type"] == "audio/wav"
        assert base64.b64decode(inline["data"]) == wav_path.read_bytes()
        assert "[MM:SS]" in parts[0]["text"]
        assert seen["body"]["generationConfig"]["maxOutputTokens"] == 8192

    def test_alias_mapping(self):
        adapter = GeminiAdapter(client=httpx.AsyncClient())
        assert adapter.backend_model("gemini-live-2.5-flash-preview") == "gemini-2.0-flash-exp"
        assert adapter.backend_model("gemini-2.5-pro") == "gemini-2.5-pro"
        assert adapter.backend_model("gemini-custom") == "gemini-custom"

    @pytest.mark.asyncio
    async def test_reports_phases(self, flash_request):
        phases = []
        flash_request.on_phase = lambda phase, progress, message: phases.append(phase)
        adapter = make_adapter(lambda r: httpx.Response(200, json=gemini_response("hi")))

        await adapter.transcribe(flash_request)

        assert phases == [ProgressPhase.PREPARING, ProgressPhase.UPLOADING, ProgressPhase.PROCESSING]

    @pytest.mark.asyncio
    async def test_http_error_becomes_backend_error(self, flash_request):
        adapter = make_adapter(lambda r: httpx.Response(403, text="API key not valid"))

        with pytest.raises(BackendError) as exc_info:
            await adapter.transcribe(flash_request)

        assert exc_info.value.provider == "gemini"
        assert exc_info.value.status == 403
        assert "API key not valid" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_transport_error_becomes_backend_error(self, flash_request):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BackendError, match="Request failed"):
            await make_adapter(handler).transcribe(flash_request)

    @pytest.mark.asyncio
    async def test_missing_candidates(self, flash_request):
        adapter = make_adapter(lambda r: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(BackendError, match="no candidate text"):
            await adapter.transcribe(flash_request)

    @pytest.mark.asyncio
    async def test_malformed_body(self, flash_request):
        adapter = make_adapter(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(BackendError, match="Malformed"):
            await adapter.transcribe(flash_request)

    @pytest.mark.asyncio
    async def test_missing_credential(self, wav_path):
        model = ModelRegistry().get_model("gemini-2.5-pro")
        request = TranscriptionRequest(audio=AudioFile(wav_path), model=model)
        adapter = make_adapter(lambda r: httpx.Response(200, json=gemini_response("hi")))

        with pytest.raises(CredentialRequiredError):
            await adapter.transcribe(request)
