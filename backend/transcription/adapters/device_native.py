"""
Device-native Adapter

Platform speech recognition works on live microphone input only, so file
transcription through this family always fails fast.
"""

from ..exceptions import UnsupportedOperationError
from ..models import ModelFamily, RawTranscription
from .base import TranscriptionAdapter, TranscriptionRequest


class DeviceNativeAdapter(TranscriptionAdapter):
    """Adapter for the device-native family."""

    family = ModelFamily.DEVICE_NATIVE

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        raise UnsupportedOperationError(
            f"'{request.model.display_name}' only transcribes live recordings. "
            "Choose a cloud or on-device model to transcribe an audio file."
        )
