"""
Speech API Adapter

Dispatches speech-api models to the client for their provider. Providers
either answer synchronously (OpenAI-compatible, Hugging Face, Deepgram) or
accept a job that is polled until it finishes (AssemblyAI, Replicate,
Amazon Transcribe).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from ..exceptions import BackendError, UnsupportedOperationError
from ..models import (
    ModelFamily,
    ProgressPhase,
    RawTranscription,
    TranscriptionSegment,
)
from .base import (
    TranscriptionAdapter,
    TranscriptionRequest,
    create_http_client,
    send_json_request,
)
from .polling import PollingPolicy, PollStatus, poll_until_done

logger = logging.getLogger(__name__)


def build_segments(
    provider: str,
    items: Optional[Iterable[Dict[str, Any]]],
    text_key: str = "text",
    start_key: str = "start",
    end_key: str = "end",
    scale: float = 1.0,
) -> Optional[List[TranscriptionSegment]]:
    """
    Convert provider segment dicts to TranscriptionSegments.

    Entries without a start time are skipped; a missing end falls back to
    the start. ``scale`` converts provider units to seconds.

    Raises:
        BackendError: If an entry is not an object or its times are not numbers
    """
    if not items:
        return None

    segments = []
    try:
        for item in items:
            start = item.get(start_key)
            if start is None:
                continue
            end = item.get(end_key)
            if end is None:
                end = start
            segments.append(TranscriptionSegment(
                text=str(item.get(text_key, "")).strip(),
                start_time=float(start) * scale,
                end_time=float(end) * scale,
                confidence=item.get("confidence"),
            ))
    except (AttributeError, TypeError, ValueError) as e:
        logger.error(f"{provider} returned malformed segments: {e}")
        raise BackendError(provider, "Malformed segment timestamps", body=str(e)) from e
    return segments or None


class SpeechProvider(ABC):
    """One speech-transcription vendor."""

    name: str

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        """Run the vendor's transcription flow for the request."""


class OpenAICompatibleProvider(SpeechProvider):
    """
    Provider exposing the OpenAI ``/audio/transcriptions`` endpoint.

    Used for OpenAI, Groq and Together, which differ only in base URL and
    backend model names.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        model_aliases: Mapping[str, str],
        default_model: str,
        client: httpx.AsyncClient,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.model_aliases = dict(model_aliases)
        self.default_model = default_model
        self._client = client

    def backend_model(self, model_id: str) -> str:
        return self.model_aliases.get(model_id, self.default_model)

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()
        backend_model = self.backend_model(request.model.id)

        request.report(ProgressPhase.UPLOADING, 20, f"Uploading audio to {self.name}...")
        data = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/audio/transcriptions",
            headers={"Authorization": f"Bearer {api_key}"},
            files={
                "file": (
                    request.audio.filename,
                    request.audio.read_bytes(),
                    request.audio.mime_type,
                ),
            },
            data={
                "model": backend_model,
                "response_format": "verbose_json",
                "timestamp_granularities[]": "segment",
            },
        )

        request.report(ProgressPhase.PROCESSING, 90, "Processing transcription...")
        if "text" not in data:
            raise BackendError(self.name, "Response has no transcript text")

        return RawTranscription(
            text=str(data["text"]).strip(),
            segments=build_segments(self.name, data.get("segments")),
            language=data.get("language"),
            duration=data.get("duration"),
            provider=self.name,
        )


class HuggingFaceProvider(SpeechProvider):
    """Hugging Face Inference API running Whisper on raw audio bytes."""

    name = "huggingface"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://api-inference.huggingface.co/models",
        model: str = "openai/whisper-large-v3",
    ):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()

        request.report(ProgressPhase.UPLOADING, 30, "Sending audio to Hugging Face...")
        data = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/{self.model}",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": request.audio.mime_type,
            },
            params={"return_timestamps": "true"},
            content=request.audio.read_bytes(),
        )

        request.report(ProgressPhase.PROCESSING, 90, "Processing transcription...")
        text = data.get("text") or data.get("transcription")
        if text is None:
            raise BackendError(self.name, "Response has no transcript text")

        chunks = [
            {
                "text": chunk.get("text", ""),
                "start": (chunk.get("timestamp") or [None, None])[0],
                "end": (chunk.get("timestamp") or [None, None])[-1],
            }
            for chunk in data.get("chunks") or []
        ]
        return RawTranscription(
            text=str(text).strip(),
            segments=build_segments(self.name, chunks),
            provider=self.name,
        )


class DeepgramProvider(SpeechProvider):
    """Deepgram pre-recorded audio endpoint."""

    name = "deepgram"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://api.deepgram.com/v1",
        model: str = "nova-2",
    ):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()

        request.report(ProgressPhase.UPLOADING, 30, "Sending audio to Deepgram...")
        data = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/listen",
            headers={
                "Authorization": f"Token {api_key}",
                "Content-Type": request.audio.mime_type,
            },
            params={
                "model": self.model,
                "smart_format": "true",
                "punctuate": "true",
                "utterances": "true",
            },
            content=request.audio.read_bytes(),
        )

        request.report(ProgressPhase.PROCESSING, 90, "Processing transcription...")
        results = data.get("results") or {}
        try:
            channel = results["channels"][0]
            transcript = channel["alternatives"][0]["transcript"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(self.name, "Response has no transcript") from e

        utterances = [
            {
                "text": utterance.get("transcript", ""),
                "start": utterance.get("start"),
                "end": utterance.get("end"),
                "confidence": utterance.get("confidence"),
            }
            for utterance in results.get("utterances") or []
        ]
        return RawTranscription(
            text=str(transcript).strip(),
            segments=build_segments(self.name, utterances),
            language=channel.get("detected_language"),
            duration=(data.get("metadata") or {}).get("duration"),
            provider=self.name,
        )


class AssemblyAIProvider(SpeechProvider):
    """AssemblyAI upload, submit and poll flow."""

    name = "assemblyai"

    def __init__(
        self,
        client: httpx.AsyncClient,
        polling: PollingPolicy,
        base_url: str = "https://api.assemblyai.com/v2",
        sleep=None,
    ):
        self._client = client
        self.polling = polling
        self.base_url = base_url.rstrip("/")
        self._sleep = sleep

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()
        headers = {"authorization": api_key}

        request.report(ProgressPhase.UPLOADING, 10, "Uploading audio to AssemblyAI...")
        upload = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/upload",
            headers={**headers, "content-type": "application/octet-stream"},
            content=request.audio.read_bytes(),
        )
        if not upload.get("upload_url"):
            raise BackendError(self.name, "Upload response has no upload_url")

        request.report(ProgressPhase.UPLOADING, 30, "Submitting transcription job...")
        job = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/transcript",
            headers=headers,
            json={"audio_url": upload["upload_url"], "speaker_labels": True},
        )
        job_id = job.get("id")
        if not job_id:
            raise BackendError(self.name, "Transcript response has no id")
        logger.info(f"AssemblyAI job {job_id} submitted")

        async def check() -> PollStatus:
            result = await send_json_request(
                self._client,
                self.name,
                "GET",
                f"{self.base_url}/transcript/{job_id}",
                headers=headers,
            )
            status = result.get("status")
            if status == "completed":
                return PollStatus.done(result)
            if status == "error":
                return PollStatus.failed(result.get("error") or "unknown error")
            return PollStatus.pending(f"AssemblyAI job {status}...")

        result = await poll_until_done(
            self.name,
            check,
            self.polling,
            on_progress=processing_reporter(request),
            sleep=self._sleep,
        )

        return RawTranscription(
            text=str(result.get("text") or "").strip(),
            segments=build_segments(self.name, result.get("utterances"), scale=0.001),
            language=result.get("language_code"),
            duration=result.get("audio_duration"),
            provider=self.name,
        )


class ReplicateProvider(SpeechProvider):
    """Replicate-hosted Whisper through the predictions API."""

    name = "replicate"

    def __init__(
        self,
        client: httpx.AsyncClient,
        polling: PollingPolicy,
        base_url: str = "https://api.replicate.com/v1",
        model: str = "openai/whisper",
        sleep=None,
    ):
        self._client = client
        self.polling = polling
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._sleep = sleep

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        api_key = request.require_credential()
        headers = {"Authorization": f"Bearer {api_key}"}

        request.report(ProgressPhase.UPLOADING, 20, "Creating Replicate prediction...")
        audio_uri = f"data:{request.audio.mime_type};base64,{request.audio.read_base64()}"
        prediction = await send_json_request(
            self._client,
            self.name,
            "POST",
            f"{self.base_url}/models/{self.model}/predictions",
            headers=headers,
            json={
                "input": {
                    "audio": audio_uri,
                    "model": "large-v3",
                    "transcription": "plain text",
                    "temperature": 0,
                },
            },
        )
        status_url = (prediction.get("urls") or {}).get("get")
        if not status_url:
            raise BackendError(self.name, "Prediction response has no status URL")

        async def check() -> PollStatus:
            result = await send_json_request(
                self._client, self.name, "GET", status_url, headers=headers
            )
            status = result.get("status")
            if status == "succeeded":
                return PollStatus.done(result)
            if status in ("failed", "canceled"):
                return PollStatus.failed(result.get("error") or status)
            return PollStatus.pending(f"Replicate prediction {status}...")

        result = await poll_until_done(
            self.name,
            check,
            self.polling,
            on_progress=processing_reporter(request),
            sleep=self._sleep,
        )

        output = result.get("output")
        if isinstance(output, dict):
            return RawTranscription(
                text=str(output.get("transcription") or "").strip(),
                segments=build_segments(self.name, output.get("segments")),
                language=output.get("detected_language"),
                provider=self.name,
            )
        return RawTranscription(text=str(output or "").strip(), provider=self.name)


def processing_reporter(request: TranscriptionRequest):
    """Map polling completion (0-100) into the adapter's processing band."""

    def report(progress: float, message: str) -> None:
        request.report(ProgressPhase.PROCESSING, 40 + 0.55 * progress, message)

    return report


OPENAI_MODELS = {"openai-whisper": "whisper-1"}
GROQ_MODELS = {
    "groq-distil-whisper": "distil-whisper-large-v3-en",
    "groq-whisper-v3-turbo": "whisper-large-v3-turbo",
    "groq-whisper-v3": "whisper-large-v3",
}
TOGETHER_MODELS = {"together-whisper-v3": "openai/whisper-large-v3"}


def default_speech_providers(
    client: httpx.AsyncClient,
    polling: Optional[PollingPolicy] = None,
) -> Dict[str, SpeechProvider]:
    """HTTP-based providers keyed by the registry's provider name."""
    polling = polling or PollingPolicy()
    providers: List[SpeechProvider] = [
        OpenAICompatibleProvider(
            "openai", "https://api.openai.com/v1", OPENAI_MODELS, "whisper-1", client
        ),
        OpenAICompatibleProvider(
            "groq", "https://api.groq.com/openai/v1", GROQ_MODELS, "whisper-large-v3", client
        ),
        OpenAICompatibleProvider(
            "together", "https://api.together.xyz/v1", TOGETHER_MODELS,
            "openai/whisper-large-v3", client,
        ),
        HuggingFaceProvider(client),
        DeepgramProvider(client),
        AssemblyAIProvider(client, polling),
        ReplicateProvider(client, polling),
    ]
    return {provider.name: provider for provider in providers}


class SpeechApiAdapter(TranscriptionAdapter):
    """Adapter for the speech-api family."""

    family = ModelFamily.SPEECH_API

    def __init__(
        self,
        providers: Optional[Mapping[str, SpeechProvider]] = None,
        client: Optional[httpx.AsyncClient] = None,
        polling: Optional[PollingPolicy] = None,
    ):
        """
        Initialize the adapter.

        Args:
            providers: Provider name -> client. Defaults to every HTTP
                       provider sharing ``client``.
            client: HTTP client for the default providers
            polling: Polling policy for the default job-based providers
        """
        self._client = client
        if providers is None:
            self._client = client or create_http_client()
            providers = default_speech_providers(self._client, polling)
        self.providers: Dict[str, SpeechProvider] = dict(providers)

    def register(self, provider: SpeechProvider) -> None:
        self.providers[provider.name] = provider

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        provider = self.providers.get(request.model.provider)
        if provider is None:
            raise UnsupportedOperationError(
                f"No speech API client for provider '{request.model.provider}'"
            )

        logger.info(
            f"Transcribing {request.audio.filename} with {request.model.id} "
            f"via {provider.name}"
        )
        return await provider.transcribe(request)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
