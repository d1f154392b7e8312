"""
Shared test fixtures for the minutes backend.
"""

import sys
import wave
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest


def write_wav(path: Path, seconds: float = 1.0, rate: int = 16000, channels: int = 1) -> Path:
    """Write a 16-bit PCM sine tone."""
    t = np.linspace(0, seconds, int(rate * seconds), endpoint=False)
    tone = (0.5 * np.sin(2 * np.pi * 440 * t) * 32767).astype(np.int16)
    if channels > 1:
        tone = np.repeat(tone[:, None], channels, axis=1)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(tone.tobytes())
    return path


@pytest.fixture
def wav_path(tmp_path):
    """One second of 16 kHz mono audio."""
    return write_wav(tmp_path / "meeting.wav")


@pytest.fixture
def empty_audio_path(tmp_path):
    path = tmp_path / "empty.wav"
    path.write_bytes(b"")
    return path
