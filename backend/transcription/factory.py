"""
Router Factory

Wires the default registry, persistent stores and every family adapter
into a TranscriptionRouter.
"""

import logging
from dataclasses import replace
from typing import Optional

from config import AppConfig

from .adapters import (
    AWSTranscribeProvider,
    DeviceNativeAdapter,
    DirectoryModelLocator,
    GeminiAdapter,
    OnDeviceAdapter,
    PollingPolicy,
    SpeechApiAdapter,
    create_http_client,
    default_speech_providers,
)
from .credentials import CredentialStore
from .models import ModelFamily
from .progress import ProgressSink
from .registry import DEFAULT_MODELS, ModelRegistry
from .router import TranscriptionRouter
from .store import JsonFileStore

logger = logging.getLogger(__name__)


def build_router(
    config: AppConfig,
    progress_sink: Optional[ProgressSink] = None,
) -> TranscriptionRouter:
    """
    Build a router from application configuration.

    Credentials and the active model share one JSON settings file in the
    data directory. Amazon Transcribe is only wired when a bucket is set;
    speech-api models without a wired provider are registered as unavailable.
    """
    store = JsonFileStore(config.settings_path)
    # Each HTTP adapter owns and closes its own client
    speech_client = create_http_client(config.http_timeout)
    polling = PollingPolicy(
        interval_seconds=config.poll_interval,
        max_attempts=config.poll_max_attempts,
    )

    providers = default_speech_providers(speech_client, polling)
    if config.aws_bucket:
        providers["aws"] = AWSTranscribeProvider(
            bucket_name=config.aws_bucket,
            polling=polling,
            region=config.aws_region,
        )
    else:
        logger.debug("MINUTES_AWS_BUCKET not set, Amazon Transcribe disabled")

    models = [
        replace(model, is_available=False)
        if model.family == ModelFamily.SPEECH_API and model.provider not in providers
        else model
        for model in DEFAULT_MODELS
    ]

    adapters = {
        ModelFamily.MULTIMODAL_LLM: GeminiAdapter(client=create_http_client(config.http_timeout)),
        ModelFamily.SPEECH_API: SpeechApiAdapter(providers=providers, client=speech_client),
        ModelFamily.ON_DEVICE: OnDeviceAdapter(
            DirectoryModelLocator(config.resolved_models_dir)
        ),
        ModelFamily.DEVICE_NATIVE: DeviceNativeAdapter(),
    }

    return TranscriptionRouter(
        registry=ModelRegistry(models),
        credentials=CredentialStore(store),
        adapters=adapters,
        preferences=store,
        default_model_id=config.default_model,
        progress_sink=progress_sink,
        enforce_size_limits=config.enforce_size_limits,
    )
