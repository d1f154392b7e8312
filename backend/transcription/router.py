"""
Transcription Router

Selects the model, validates its configuration, dispatches to the family
adapter, reports progress and normalizes the adapter's result.
"""

import asyncio
import logging
import time
from typing import Dict, Mapping, Optional, Tuple

from .audio import AudioFile
from .credentials import CredentialStore
from .exceptions import (
    BackendError,
    CredentialRequiredError,
    InvalidAudioError,
    ModelUnavailableError,
)
from .adapters.base import TranscriptionAdapter, TranscriptionRequest
from .models import (
    ModelFamily,
    RawTranscription,
    TranscriptionModel,
    TranscriptionResult,
)
from .progress import ProgressReporter, ProgressSink
from .registry import ModelRegistry
from .segments import extract_timestamp_segments, normalize_segments
from .store import KeyValueStore

logger = logging.getLogger(__name__)

ACTIVE_MODEL_KEY = "active_transcription_model"


class TranscriptionRouter:
    """
    Uniform transcription entry point over every registered backend.

    All collaborators are injected; the router holds no global state.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        credentials: CredentialStore,
        adapters: Mapping[ModelFamily, TranscriptionAdapter],
        preferences: KeyValueStore,
        default_model_id: str,
        progress_sink: Optional[ProgressSink] = None,
        enforce_size_limits: bool = False,
    ):
        """
        Initialize the router.

        Args:
            registry: Catalog of known models
            credentials: Credential store for API keys
            adapters: Family -> adapter table
            preferences: Store holding the active model id
            default_model_id: Model used when no preference is stored
            progress_sink: Receives progress events for every call
            enforce_size_limits: Reject audio larger than the model's
                                 declared maximum before dispatch

        Raises:
            ValueError: If a family in the registry has no adapter, or the
                        default model is not registered
        """
        missing = registry.families() - set(adapters)
        if missing:
            names = ", ".join(sorted(family.value for family in missing))
            raise ValueError(f"No adapter registered for model families: {names}")
        if default_model_id not in registry:
            raise ValueError(f"Default model is not registered: {default_model_id}")

        self.registry = registry
        self.credentials = credentials
        self.adapters: Dict[ModelFamily, TranscriptionAdapter] = dict(adapters)
        self.preferences = preferences
        self.default_model_id = default_model_id
        self.enforce_size_limits = enforce_size_limits
        self._progress_sink = progress_sink

    # Model selection

    def list_models(self) -> Tuple[TranscriptionModel, ...]:
        return self.registry.list_models()

    def get_active_model(self) -> TranscriptionModel:
        """
        Get the persisted active model.

        Falls back to the default model when nothing is stored or the
        stored id is no longer registered.
        """
        stored = self.preferences.get(ACTIVE_MODEL_KEY)
        if stored:
            model = self.registry.find_model(stored)
            if model is not None:
                return model
            logger.warning(f"Stored model '{stored}' is no longer registered, using default")
        return self.registry.get_model(self.default_model_id)

    def set_active_model(self, model_id: str) -> TranscriptionModel:
        """
        Validate and persist the active model.

        Raises:
            UnknownModelError: If the id is not registered
            ModelUnavailableError: If the model is not available yet
            CredentialRequiredError: If the model's credential is missing
        """
        model = self._resolve_dispatchable(model_id)
        self.preferences.set(ACTIVE_MODEL_KEY, model.id)
        logger.info(f"Active transcription model set to {model.id}")
        return model

    # Credentials

    def is_configured(self, model_id: str) -> bool:
        model = self.registry.find_model(model_id)
        if model is None:
            return False
        return self.credentials.is_configured(model)

    def set_credential(self, group: str, secret: str) -> bool:
        return self.credentials.set_credential(group, secret)

    def get_credential(self, group: str) -> Optional[str]:
        return self.credentials.get_credential(group)

    def model_stats(self) -> Dict[str, int]:
        """Count registered, available and configured models."""
        models = self.registry.list_models()
        return {
            "total": len(models),
            "available": sum(1 for model in models if model.is_available),
            "configured": sum(
                1 for model in models
                if model.is_available and self.credentials.is_configured(model)
            ),
        }

    # Progress

    def set_progress_sink(self, sink: Optional[ProgressSink]) -> None:
        self._progress_sink = sink

    async def aclose(self) -> None:
        """Close every adapter's network clients."""
        for adapter in self.adapters.values():
            await adapter.aclose()

    # Transcription

    def _resolve_dispatchable(self, model_id: str) -> TranscriptionModel:
        model = self.registry.get_model(model_id)
        if not model.is_available:
            raise ModelUnavailableError(model.id)
        if not self.credentials.is_configured(model):
            raise CredentialRequiredError(model.id, self.credentials.credential_group(model))
        return model

    def _check_audio(self, audio: AudioFile, model: TranscriptionModel) -> None:
        if not audio.exists():
            raise InvalidAudioError(str(audio.path), "file does not exist")

        size = audio.size()
        if size == 0:
            raise InvalidAudioError(str(audio.path), "file is empty")

        limit = model.max_file_size_bytes
        if limit is not None and size > limit:
            if self.enforce_size_limits:
                raise InvalidAudioError(
                    str(audio.path),
                    f"{size} bytes exceeds the {limit} byte limit of {model.id}",
                )
            logger.warning(
                f"{audio.filename} is {size} bytes, above the {limit} byte limit "
                f"declared for {model.id}"
            )

    async def transcribe(
        self,
        audio: AudioFile,
        model_id: Optional[str] = None,
        on_progress: Optional[ProgressSink] = None,
    ) -> TranscriptionResult:
        """
        Transcribe an audio file.

        Configuration problems are raised before any progress event or
        adapter call. Once dispatch starts, every call ends with exactly one
        ``completed`` or ``error`` event.

        Args:
            audio: Audio file to transcribe
            model_id: Model to use; defaults to the active model
            on_progress: Extra sink for this call only

        Returns:
            TranscriptionResult; ``segments`` is None when no timing
            information could be established

        Raises:
            UnknownModelError, ModelUnavailableError, CredentialRequiredError:
                Before dispatch
            InvalidAudioError: If the audio file is missing or empty
            TranscriptionError: Any failure reported by the adapter
        """
        if model_id is None:
            model_id = self.get_active_model().id
        model = self._resolve_dispatchable(model_id)
        credential = self.credentials.credential_for(model)

        reporter = ProgressReporter([self._progress_sink, on_progress])
        started = time.monotonic()

        try:
            reporter.preparing(f"Preparing {audio.filename} for {model.display_name}...")
            self._check_audio(audio, model)

            adapter = self.adapters[model.family]
            logger.info(f"Dispatching {audio.filename} to {model.id} ({model.family.value})")
            raw = await adapter.transcribe(TranscriptionRequest(
                audio=audio,
                model=model,
                credential=credential,
                on_phase=reporter.adapter_phase,
            ))

            result = self._normalize(raw, model, time.monotonic() - started)
        except asyncio.CancelledError:
            logger.warning(f"Transcription with {model.id} was cancelled")
            reporter.error("Transcription cancelled")
            raise
        except Exception as e:
            logger.error(f"Transcription with {model.id} failed: {e}")
            reporter.error(str(e))
            raise

        reporter.completed()
        segment_count = len(result.segments) if result.segments else 0
        logger.info(
            f"Transcribed {audio.filename} with {model.id} in "
            f"{result.processing_time:.1f}s ({segment_count} segments)"
        )
        return result

    @staticmethod
    def _normalize(
        raw: RawTranscription,
        model: TranscriptionModel,
        processing_time: float,
    ) -> TranscriptionResult:
        provider = raw.provider or model.provider
        if raw.segments:
            # Valid segments keep their text and order; an end that overlaps
            # the next start is clamped so segments never overlap.
            try:
                segments = normalize_segments(raw.segments)
            except ValueError as e:
                raise BackendError(provider, "Malformed segment timestamps", body=str(e)) from e
        else:
            segments = extract_timestamp_segments(raw.text)

        return TranscriptionResult(
            text=raw.text,
            model_id=model.id,
            processing_time=processing_time,
            segments=segments,
            provider=provider,
            language=raw.language,
            duration=raw.duration,
        )

