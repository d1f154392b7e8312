"""
Transcription Routing

Multi-provider transcription for minutes: model registry, credential
store, provider adapters and the router that ties them together.
"""

from .audio import AudioFile
from .credentials import CredentialStore, CREDENTIAL_GROUPS
from .exceptions import (
    TranscriptionError,
    UnknownModelError,
    ModelUnavailableError,
    CredentialRequiredError,
    BackendError,
    UnsupportedOperationError,
    TranscriptionTimedOutError,
    InvalidAudioError,
    ModelNotLoadedError,
    AudioDecodeError,
    TranscriptionInProgressError,
)
from .factory import build_router
from .models import (
    ModelFamily,
    ProgressPhase,
    ProgressEvent,
    RawTranscription,
    TranscriptionModel,
    TranscriptionResult,
    TranscriptionSegment,
)
from .registry import ModelRegistry, DEFAULT_MODELS
from .router import TranscriptionRouter, ACTIVE_MODEL_KEY
from .segments import extract_timestamp_segments, normalize_segments
from .store import KeyValueStore, MemoryStore, JsonFileStore, StoreError

__all__ = [
    "AudioFile",
    "CredentialStore",
    "CREDENTIAL_GROUPS",
    "TranscriptionError",
    "UnknownModelError",
    "ModelUnavailableError",
    "CredentialRequiredError",
    "BackendError",
    "UnsupportedOperationError",
    "TranscriptionTimedOutError",
    "InvalidAudioError",
    "ModelNotLoadedError",
    "AudioDecodeError",
    "TranscriptionInProgressError",
    "build_router",
    "ModelFamily",
    "ProgressPhase",
    "ProgressEvent",
    "RawTranscription",
    "TranscriptionModel",
    "TranscriptionResult",
    "TranscriptionSegment",
    "ModelRegistry",
    "DEFAULT_MODELS",
    "TranscriptionRouter",
    "ACTIVE_MODEL_KEY",
    "extract_timestamp_segments",
    "normalize_segments",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "StoreError",
]
