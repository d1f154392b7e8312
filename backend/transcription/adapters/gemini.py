"""
Multimodal LLM Adapter

Sends base64-encoded audio to the Gemini generateContent endpoint with a
fixed transcription prompt. The response is plain text; timestamps it may
contain are parsed later by the router.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..exceptions import BackendError
from ..models import ModelFamily, ProgressPhase, RawTranscription
from .base import (
    TranscriptionAdapter,
    TranscriptionRequest,
    create_http_client,
    send_json_request,
)

logger = logging.getLogger(__name__)

PROVIDER = "gemini"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Registry id -> backend model name. Several ids share one backend model.
GEMINI_MODEL_ALIASES: Mapping[str, str] = {
    "gemini-2.5-flash-exp": "gemini-2.0-flash-exp",
    "gemini-live-2.5-flash-preview": "gemini-2.0-flash-exp",
    "gemini-2.0-flash": "gemini-2.0-flash",
    "gemini-2.5-flash": "gemini-2.5-flash",
    "gemini-2.5-pro": "gemini-2.5-pro",
}

TRANSCRIPTION_PROMPT = (
    "Please transcribe this audio file completely and accurately. "
    "Start every line with a timestamp in [MM:SS] format marking when it "
    "is spoken. Use speaker labels if multiple speakers are detected. "
    "Output only the transcript."
)


class GeminiAdapter(TranscriptionAdapter):
    """Adapter for the multimodal-llm family."""

    family = ModelFamily.MULTIMODAL_LLM

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = DEFAULT_BASE_URL,
        aliases: Mapping[str, str] = GEMINI_MODEL_ALIASES,
        temperature: float = 0.1,
        max_output_tokens: int = 8192,
    ):
        self._client = client or create_http_client()
        self.base_url = base_url.rstrip("/")
        self.aliases = dict(aliases)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def backend_model(self, model_id: str) -> str:
        """Resolve the backend model name; unknown ids pass through as-is."""
        return self.aliases.get(model_id, model_id)

    def build_payload(self, audio_base64: str, mime_type: str) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [
                    {"text": TRANSCRIPTION_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": audio_base64}},
                ],
            }],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()
        backend_model = self.backend_model(request.model.id)

        request.report(ProgressPhase.PREPARING, 10, "Encoding audio...")
        payload = self.build_payload(request.audio.read_base64(), request.audio.mime_type)

        request.report(ProgressPhase.UPLOADING, 30, f"Sending audio to {backend_model}...")
        logger.info(f"Transcribing {request.audio.filename} with {backend_model}")
        data = await send_json_request(
            self._client,
            PROVIDER,
            "POST",
            f"{self.base_url}/models/{backend_model}:generateContent",
            params={"key": api_key},
            json=payload,
        )

        request.report(ProgressPhase.PROCESSING, 80, "Reading transcript...")
        text = self._extract_text(data)
        return RawTranscription(text=text.strip(), provider=PROVIDER)

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise BackendError(PROVIDER, "Response has no candidate text") from e

        if not text.strip():
            raise BackendError(PROVIDER, "Response has no candidate text")
        return text

    async def aclose(self) -> None:
        await self._client.aclose()
