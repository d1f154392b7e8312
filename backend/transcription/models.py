"""
Transcription Data Models

Registry entries, results, segments and progress events shared by the
router and the provider adapters.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class ModelFamily(str, Enum):
    """Backend family; selects the adapter that handles a model."""
    MULTIMODAL_LLM = "multimodal-llm"
    SPEECH_API = "speech-api"
    ON_DEVICE = "on-device-inference"
    DEVICE_NATIVE = "device-native"


class ProgressPhase(str, Enum):
    """Lifecycle phases reported while a transcription runs."""
    PREPARING = "preparing"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ProgressPhase.COMPLETED, ProgressPhase.ERROR)


@dataclass(frozen=True)
class TranscriptionModel:
    """
    Registry entry describing one transcription backend.

    Capability metadata (file size, languages, speed, pricing) is
    informational and shown to users when picking a model.
    """
    id: str
    display_name: str
    description: str
    family: ModelFamily
    provider: str
    requires_credential: bool
    is_available: bool = True
    max_file_size_bytes: Optional[int] = None
    languages: Tuple[str, ...] = ()
    speed: str = ""
    accuracy: str = ""
    pricing: str = ""
    free_quota: str = ""
    credential_instructions: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "description": self.description,
            "family": self.family.value,
            "provider": self.provider,
            "requires_credential": self.requires_credential,
            "is_available": self.is_available,
            "max_file_size_bytes": self.max_file_size_bytes,
            "languages": list(self.languages),
            "speed": self.speed,
            "accuracy": self.accuracy,
            "pricing": self.pricing,
            "free_quota": self.free_quota,
        }


@dataclass(frozen=True)
class TranscriptionSegment:
    """A timestamped span of transcript text (seconds)."""
    text: str
    start_time: float
    end_time: float
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "confidence": self.confidence,
        }


@dataclass
class TranscriptionResult:
    """
    Normalized result returned to callers.

    ``segments`` is None when no timing information could be established;
    it is never an empty list.
    """
    text: str
    model_id: str
    processing_time: float
    segments: Optional[List[TranscriptionSegment]] = None
    provider: Optional[str] = None
    language: Optional[str] = None
    duration: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "model_id": self.model_id,
            "processing_time": self.processing_time,
            "segments": (
                [segment.to_dict() for segment in self.segments]
                if self.segments is not None else None
            ),
            "provider": self.provider,
            "language": self.language,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class ProgressEvent:
    """Progress update delivered to the caller's sink (0-100 scale)."""
    phase: ProgressPhase
    progress: float
    message: str

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "progress": self.progress,
            "message": self.message,
        }


@dataclass
class RawTranscription:
    """Unnormalized output of a provider adapter."""
    text: str
    segments: Optional[List[TranscriptionSegment]] = None
    language: Optional[str] = None
    duration: Optional[float] = None
    provider: Optional[str] = None
