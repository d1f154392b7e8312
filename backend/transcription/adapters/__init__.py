"""
Provider Adapters

One adapter per model family, all implementing TranscriptionAdapter.
"""

from .base import (
    PhaseCallback,
    TranscriptionAdapter,
    TranscriptionRequest,
    create_http_client,
)
from .polling import PollingPolicy, PollStatus, poll_until_done
from .gemini import GeminiAdapter, GEMINI_MODEL_ALIASES
from .speech_api import (
    SpeechApiAdapter,
    SpeechProvider,
    OpenAICompatibleProvider,
    HuggingFaceProvider,
    DeepgramProvider,
    AssemblyAIProvider,
    ReplicateProvider,
    default_speech_providers,
)
from .aws_transcribe import AWSTranscribeProvider
from .on_device import (
    OnDeviceAdapter,
    ModelAssetLocator,
    DirectoryModelLocator,
    decode_wav,
)
from .device_native import DeviceNativeAdapter

__all__ = [
    "PhaseCallback",
    "TranscriptionAdapter",
    "TranscriptionRequest",
    "create_http_client",
    "PollingPolicy",
    "PollStatus",
    "poll_until_done",
    "GeminiAdapter",
    "GEMINI_MODEL_ALIASES",
    "SpeechApiAdapter",
    "SpeechProvider",
    "OpenAICompatibleProvider",
    "HuggingFaceProvider",
    "DeepgramProvider",
    "AssemblyAIProvider",
    "ReplicateProvider",
    "default_speech_providers",
    "AWSTranscribeProvider",
    "OnDeviceAdapter",
    "ModelAssetLocator",
    "DirectoryModelLocator",
    "decode_wav",
    "DeviceNativeAdapter",
]
