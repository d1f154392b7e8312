"""
Model Registry

Static catalog of transcription backends and their declared capabilities.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from .exceptions import UnknownModelError
from .models import ModelFamily, TranscriptionModel

logger = logging.getLogger(__name__)

MB = 1024 * 1024

_GEMINI_KEY_HELP = "Get from https://aistudio.google.com/apikey"
_GROQ_KEY_HELP = "Get from https://console.groq.com"


DEFAULT_MODELS: Tuple[TranscriptionModel, ...] = (
    # Multimodal LLMs
    TranscriptionModel(
        id="gemini-2.0-flash",
        display_name="Gemini 2.0 Flash",
        description="Gemini with native audio support, 1M token context",
        family=ModelFamily.MULTIMODAL_LLM,
        provider="gemini",
        requires_credential=True,
        max_file_size_bytes=20 * MB,
        languages=("50+ languages",),
        speed="Fast",
        accuracy="Excellent",
        pricing="$0.0001875/1K chars",
        free_quota="Free tier via Google AI Studio",
        credential_instructions=_GEMINI_KEY_HELP,
    ),
    TranscriptionModel(
        id="gemini-2.5-flash",
        display_name="Gemini 2.5 Flash",
        description="Best price/performance ratio, multimodal input",
        family=ModelFamily.MULTIMODAL_LLM,
        provider="gemini",
        requires_credential=True,
        max_file_size_bytes=20 * MB,
        languages=("50+ languages",),
        speed="Very Fast",
        accuracy="Excellent",
        pricing="$0.0001875/1K chars",
        free_quota="5 RPM, 25 requests/day free",
        credential_instructions=_GEMINI_KEY_HELP,
    ),
    TranscriptionModel(
        id="gemini-2.5-flash-exp",
        display_name="Gemini 2.5 Flash (Experimental)",
        description="Fast, efficient transcription on the experimental Flash model",
        family=ModelFamily.MULTIMODAL_LLM,
        provider="gemini",
        requires_credential=True,
        max_file_size_bytes=20 * MB,
        languages=("50+ languages",),
        speed="Very Fast",
        accuracy="Very Good",
        credential_instructions=_GEMINI_KEY_HELP,
    ),
    TranscriptionModel(
        id="gemini-2.5-pro",
        display_name="Gemini 2.5 Pro",
        description="Most accurate Gemini model for transcription",
        family=ModelFamily.MULTIMODAL_LLM,
        provider="gemini",
        requires_credential=True,
        max_file_size_bytes=20 * MB,
        languages=("50+ languages",),
        speed="Moderate",
        accuracy="Best",
        credential_instructions=_GEMINI_KEY_HELP,
    ),
    TranscriptionModel(
        id="gemini-live-2.5-flash-preview",
        display_name="Gemini Live 2.5 Flash Preview",
        description="Preview of the low-latency Gemini Live model",
        family=ModelFamily.MULTIMODAL_LLM,
        provider="gemini",
        requires_credential=True,
        max_file_size_bytes=20 * MB,
        languages=("50+ languages",),
        speed="Fast",
        accuracy="Very Good",
        credential_instructions=_GEMINI_KEY_HELP,
    ),
    # Speech APIs
    TranscriptionModel(
        id="openai-whisper",
        display_name="OpenAI Whisper",
        description="Original Whisper API, reliable and accurate",
        family=ModelFamily.SPEECH_API,
        provider="openai",
        requires_credential=True,
        max_file_size_bytes=25 * MB,
        languages=("98 languages",),
        speed="Standard",
        accuracy="Excellent",
        pricing="$0.006/minute",
        free_quota="No free tier",
        credential_instructions="Get from https://platform.openai.com/api-keys",
    ),
    TranscriptionModel(
        id="groq-distil-whisper",
        display_name="Groq Distil-Whisper",
        description="Fastest transcription, English only, 240x real-time",
        family=ModelFamily.SPEECH_API,
        provider="groq",
        requires_credential=True,
        max_file_size_bytes=25 * MB,
        languages=("en",),
        speed="Ultra Fast (240x)",
        accuracy="Good",
        pricing="$0.02/hour audio",
        free_quota="25MB free tier",
        credential_instructions=_GROQ_KEY_HELP,
    ),
    TranscriptionModel(
        id="groq-whisper-v3-turbo",
        display_name="Groq Whisper v3 Turbo",
        description="Best overall: speed + accuracy, 216x real-time",
        family=ModelFamily.SPEECH_API,
        provider="groq",
        requires_credential=True,
        max_file_size_bytes=25 * MB,
        languages=("50+ languages",),
        speed="Ultra Fast (216x)",
        accuracy="Excellent",
        pricing="$0.04/hour audio",
        free_quota="25MB free tier",
        credential_instructions=_GROQ_KEY_HELP,
    ),
    TranscriptionModel(
        id="groq-whisper-v3",
        display_name="Groq Whisper v3 Large",
        description="Most accurate, 299x real-time speed",
        family=ModelFamily.SPEECH_API,
        provider="groq",
        requires_credential=True,
        max_file_size_bytes=25 * MB,
        languages=("50+ languages",),
        speed="Ultra Fast (299x)",
        accuracy="Best",
        pricing="$0.111/hour audio",
        free_quota="25MB free tier",
        credential_instructions=_GROQ_KEY_HELP,
    ),
    TranscriptionModel(
        id="together-whisper-v3",
        display_name="Together Whisper v3",
        description="15x faster than OpenAI, full accuracy",
        family=ModelFamily.SPEECH_API,
        provider="together",
        requires_credential=True,
        languages=("50+ languages",),
        speed="Very Fast (15x OpenAI)",
        accuracy="Excellent",
        pricing="Usage-based",
        free_quota="$25 free credits on signup",
        credential_instructions="Get from https://api.together.xyz/settings/api-keys",
    ),
    TranscriptionModel(
        id="huggingface-whisper",
        display_name="HF Whisper Large v3",
        description="Community-hosted Whisper with a free tier",
        family=ModelFamily.SPEECH_API,
        provider="huggingface",
        requires_credential=True,
        max_file_size_bytes=10 * MB,
        languages=("50+ languages",),
        speed="Moderate",
        accuracy="Very Good",
        pricing="Free tier + paid options",
        free_quota="Rate limited free tier",
        credential_instructions="Get from https://huggingface.co/settings/tokens",
    ),
    TranscriptionModel(
        id="assemblyai",
        display_name="AssemblyAI",
        description="Professional transcription with speaker detection",
        family=ModelFamily.SPEECH_API,
        provider="assemblyai",
        requires_credential=True,
        max_file_size_bytes=5 * 1024 * MB,
        languages=("Multiple languages",),
        speed="Fast",
        accuracy="Excellent",
        pricing="$0.00025/second",
        free_quota="5 hours free/month",
        credential_instructions="Get from https://www.assemblyai.com/app",
    ),
    TranscriptionModel(
        id="deepgram-nova",
        display_name="Deepgram Nova",
        description="Fast transcription with utterance timestamps",
        family=ModelFamily.SPEECH_API,
        provider="deepgram",
        requires_credential=True,
        max_file_size_bytes=2 * 1024 * MB,
        languages=("36+ languages",),
        speed="Real-time",
        accuracy="Excellent",
        pricing="$0.0043/minute",
        free_quota="$200 free credits",
        credential_instructions="Get from https://console.deepgram.com",
    ),
    TranscriptionModel(
        id="replicate-whisper",
        display_name="Replicate Whisper",
        description="Whisper large-v3 hosted on Replicate",
        family=ModelFamily.SPEECH_API,
        provider="replicate",
        requires_credential=True,
        languages=("Multiple languages",),
        speed="Moderate",
        accuracy="Excellent",
        pricing="Usage-based",
        credential_instructions="Get from https://replicate.com/account/api-tokens",
    ),
    TranscriptionModel(
        id="aws-transcribe",
        display_name="Amazon Transcribe",
        description="Batch transcription through Amazon Transcribe and S3",
        family=ModelFamily.SPEECH_API,
        provider="aws",
        requires_credential=False,
        max_file_size_bytes=2 * 1024 * MB,
        languages=("100+ languages",),
        speed="Moderate",
        accuracy="Excellent",
        pricing="$0.024/minute",
        free_quota="60 minutes/month for 12 months",
        credential_instructions="Uses the AWS credential chain and MINUTES_AWS_BUCKET",
    ),
    TranscriptionModel(
        id="revai",
        display_name="Rev AI (Coming Soon)",
        description="High accuracy with timestamps",
        family=ModelFamily.SPEECH_API,
        provider="revai",
        requires_credential=True,
        is_available=False,
        max_file_size_bytes=2 * 1024 * MB,
        languages=("36 languages",),
        speed="Fast",
        accuracy="Very High",
        pricing="$0.02/minute",
        free_quota="5 hours free",
        credential_instructions="Get from https://www.rev.ai",
    ),
    # On-device inference
    TranscriptionModel(
        id="whisper-tiny",
        display_name="Whisper Tiny (On-device)",
        description="Smallest local model, runs offline",
        family=ModelFamily.ON_DEVICE,
        provider="mlx",
        requires_credential=False,
        languages=("Multiple languages",),
        speed="Very Fast",
        accuracy="Fair",
        pricing="Free",
        free_quota="Unlimited (local)",
    ),
    TranscriptionModel(
        id="whisper-base",
        display_name="Whisper Base (On-device)",
        description="Balanced local model, runs offline",
        family=ModelFamily.ON_DEVICE,
        provider="mlx",
        requires_credential=False,
        languages=("Multiple languages",),
        speed="Fast",
        accuracy="Good",
        pricing="Free",
        free_quota="Unlimited (local)",
    ),
    TranscriptionModel(
        id="whisper-small",
        display_name="Whisper Small (On-device)",
        description="Most accurate local model, runs offline",
        family=ModelFamily.ON_DEVICE,
        provider="mlx",
        requires_credential=False,
        languages=("Multiple languages",),
        speed="Slow",
        accuracy="Very Good",
        pricing="Free",
        free_quota="Unlimited (local)",
    ),
    # Platform speech recognition
    TranscriptionModel(
        id="device-speech",
        display_name="Device Speech Recognition",
        description="Built-in speech recognition for live recordings",
        family=ModelFamily.DEVICE_NATIVE,
        provider="device",
        requires_credential=False,
        pricing="Free",
    ),
)


class ModelRegistry:
    """
    Read-only catalog of transcription models.

    Preserves the order models were given in so listings are stable.
    """

    def __init__(self, models: Iterable[TranscriptionModel] = DEFAULT_MODELS):
        """
        Build the registry.

        Raises:
            ValueError: If two models share an id
        """
        self._models: Tuple[TranscriptionModel, ...] = tuple(models)
        self._by_id: Dict[str, TranscriptionModel] = {}

        for model in self._models:
            if model.id in self._by_id:
                raise ValueError(f"Duplicate model id in registry: {model.id}")
            self._by_id[model.id] = model

        logger.debug(f"Model registry initialized with {len(self._models)} models")

    def list_models(self) -> Tuple[TranscriptionModel, ...]:
        return self._models

    def find_model(self, model_id: str) -> Optional[TranscriptionModel]:
        """Look up a model; None means the id is not registered."""
        return self._by_id.get(model_id)

    def get_model(self, model_id: str) -> TranscriptionModel:
        """
        Look up a model that must exist.

        Raises:
            UnknownModelError: If the id is not registered
        """
        model = self.find_model(model_id)
        if model is None:
            raise UnknownModelError(model_id)
        return model

    def families(self) -> FrozenSet[ModelFamily]:
        return frozenset(model.family for model in self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    def __len__(self) -> int:
        return len(self._models)
