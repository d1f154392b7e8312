"""
Audio Handle

Thin wrapper around a recorded audio file. The core only checks that the
file exists and is non-empty; codec correctness is left to the backends.
"""

import base64
import mimetypes
from pathlib import Path
from typing import Union

# Extensions the stdlib table misses or maps inconsistently across platforms
_AUDIO_MIME_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mp3",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
}
DEFAULT_MIME_TYPE = "audio/wav"


class AudioFile:
    """Readable handle to an audio file on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def size(self) -> int:
        """File size in bytes."""
        return self.path.stat().st_size

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def read_base64(self) -> str:
        return base64.b64encode(self.read_bytes()).decode("ascii")

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def mime_type(self) -> str:
        """MIME type guessed from the file extension."""
        suffix = self.path.suffix.lower()
        if suffix in _AUDIO_MIME_TYPES:
            return _AUDIO_MIME_TYPES[suffix]
        guessed, _ = mimetypes.guess_type(self.path.name)
        if guessed and guessed.startswith("audio/"):
            return guessed
        return DEFAULT_MIME_TYPE

    def __repr__(self) -> str:
        return f"AudioFile({str(self.path)!r})"
