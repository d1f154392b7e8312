"""
On-device Inference Adapter

Runs Whisper locally with MLX. Model weights are downloaded by an external
model manager; this adapter only locates them. Audio is decoded to 16 kHz
mono float32 samples before inference.
"""

import asyncio
import io
import logging
import wave
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

import numpy as np

from ..exceptions import (
    AudioDecodeError,
    BackendError,
    ModelNotLoadedError,
    TranscriptionInProgressError,
    UnsupportedOperationError,
)
from ..models import ModelFamily, ProgressPhase, RawTranscription
from .base import TranscriptionAdapter, TranscriptionRequest
from .speech_api import build_segments

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000

Inference = Callable[[np.ndarray, Path], Dict[str, Any]]


class ModelAssetLocator(Protocol):
    """Finds already-downloaded model weights."""

    def resolve(self, model_id: str) -> Optional[Path]: ...


class DirectoryModelLocator:
    """
    Looks for model weights in ``<models_dir>/<model_id>``.

    A directory counts as downloaded once it contains at least one file.
    """

    def __init__(self, models_dir: Path):
        self.models_dir = Path(models_dir)

    def resolve(self, model_id: str) -> Optional[Path]:
        path = self.models_dir / model_id
        if path.is_dir() and any(path.iterdir()):
            return path
        return None


def decode_wav(data: bytes, target_rate: int = SAMPLE_RATE) -> np.ndarray:
    """
    Decode PCM WAV bytes into mono float32 samples at ``target_rate``.

    Raises:
        AudioDecodeError: If the bytes are not PCM WAV or hold no samples
    """
    try:
        with wave.open(io.BytesIO(data), "rb") as wav:
            channels = wav.getnchannels()
            sample_width = wav.getsampwidth()
            rate = wav.getframerate()
            frames = wav.readframes(wav.getnframes())
    except (wave.Error, EOFError) as e:
        raise AudioDecodeError(f"Unsupported audio, expected PCM WAV: {e}") from e

    if sample_width == 1:
        samples = (np.frombuffer(frames, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    elif sample_width == 2:
        samples = np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0
    elif sample_width == 4:
        samples = np.frombuffer(frames, dtype=np.int32).astype(np.float32) / 2147483648.0
    else:
        raise AudioDecodeError(f"Unsupported sample width: {sample_width * 8} bits")

    if channels > 1:
        usable = len(samples) - len(samples) % channels
        samples = samples[:usable].reshape(-1, channels).mean(axis=1)

    if len(samples) == 0:
        raise AudioDecodeError("Audio contains no samples")

    if rate != target_rate:
        duration = len(samples) / rate
        target_length = max(1, int(round(duration * target_rate)))
        positions = np.linspace(0, len(samples) - 1, num=target_length)
        samples = np.interp(positions, np.arange(len(samples)), samples)

    return samples.astype(np.float32)


def mlx_whisper_inference(samples: np.ndarray, model_path: Path) -> Dict[str, Any]:
    """Run mlx-whisper on decoded samples (blocking)."""
    import mlx_whisper

    return mlx_whisper.transcribe(
        samples,
        path_or_hf_repo=str(model_path),
        verbose=False,
    )


class OnDeviceAdapter(TranscriptionAdapter):
    """
    Adapter for the on-device-inference family.

    Only one transcription runs at a time; a second concurrent call is
    rejected instead of interleaving audio buffers.
    """

    family = ModelFamily.ON_DEVICE

    def __init__(
        self,
        locator: ModelAssetLocator,
        inference: Inference = mlx_whisper_inference,
    ):
        """
        Initialize the adapter.

        Args:
            locator: Resolves a model id to its downloaded weights
            inference: Blocking callable taking (samples, model_path) and
                       returning a Whisper-style result dict
        """
        self.locator = locator
        self._inference = inference
        self._lock = asyncio.Lock()

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        model_id = request.model.id
        if self._lock.locked():
            raise TranscriptionInProgressError(model_id)

        async with self._lock:
            model_path = self.locator.resolve(model_id)
            if model_path is None:
                raise ModelNotLoadedError(model_id)

            request.report(ProgressPhase.PREPARING, 10, "Decoding audio...")
            loop = asyncio.get_running_loop()
            data = await loop.run_in_executor(None, request.audio.read_bytes)
            samples = await loop.run_in_executor(None, decode_wav, data)
            duration = len(samples) / SAMPLE_RATE

            request.report(
                ProgressPhase.PROCESSING, 30, f"Transcribing {duration:.0f}s of audio locally..."
            )
            logger.info(f"Running local inference with {model_id} from {model_path}")
            try:
                result = await loop.run_in_executor(
                    None, self._inference, samples, model_path
                )
            except ImportError as e:
                logger.error("mlx-whisper not installed. Run: pip install mlx-whisper")
                raise UnsupportedOperationError(
                    "mlx-whisper not installed. Run: pip install mlx-whisper"
                ) from e
            except Exception as e:
                logger.error(f"Local inference failed for {model_id}: {e}")
                raise BackendError("mlx", f"Local inference failed: {e}") from e

            request.report(ProgressPhase.PROCESSING, 95, "Finalizing transcript...")

        return RawTranscription(
            text=str(result.get("text", "")).strip(),
            segments=build_segments("mlx", result.get("segments")),
            language=result.get("language"),
            duration=duration,
            provider="mlx",
        )
