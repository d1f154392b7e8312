"""
Transcription Exceptions

Error kinds raised by the transcription router and its provider adapters.
Callers branch on the concrete class to show actionable guidance.
"""

from typing import Optional


class TranscriptionError(Exception):
    """Base exception for transcription errors."""
    pass


class UnknownModelError(TranscriptionError):
    """Raised when a model id is not in the registry."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Unknown transcription model: {model_id}")


class ModelUnavailableError(TranscriptionError):
    """Raised when a registered model is not implemented yet."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Model '{model_id}' is not yet available")


class CredentialRequiredError(TranscriptionError):
    """Raised when a model needs an API key that has not been configured."""

    def __init__(self, model_id: str, group: str):
        self.model_id = model_id
        self.group = group
        super().__init__(
            f"API key required for '{model_id}'. "
            f"Configure the '{group}' credential in settings."
        )


class BackendError(TranscriptionError):
    """
    Raised for transport or provider-side failures.

    Carries the provider name, the HTTP-equivalent status (if any) and a
    snippet of the backend's error body.
    """

    MAX_BODY_LENGTH = 500

    def __init__(
        self,
        provider: str,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.provider = provider
        self.status = status
        self.body = body[: self.MAX_BODY_LENGTH] if body else None

        detail = f"{provider} error"
        if status is not None:
            detail += f" ({status})"
        detail += f": {message}"
        if self.body:
            detail += f" - {self.body}"
        super().__init__(detail)


class UnsupportedOperationError(TranscriptionError):
    """Raised when a model family cannot perform the requested operation."""

    def __init__(self, message: str):
        super().__init__(message)


class TranscriptionTimedOutError(TranscriptionError):
    """Raised when polling an asynchronous job exceeds its bound."""

    def __init__(self, provider: str, attempts: int, interval_seconds: float):
        self.provider = provider
        self.attempts = attempts
        self.interval_seconds = interval_seconds
        super().__init__(
            f"{provider} transcription did not finish after {attempts} polls "
            f"({attempts * interval_seconds:.0f}s)"
        )


class InvalidAudioError(TranscriptionError):
    """Raised when the audio handle is missing, empty or too large."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid audio file '{path}': {reason}")


class ModelNotLoadedError(TranscriptionError):
    """Raised when an on-device model asset has not been downloaded."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(
            f"Model '{model_id}' is not downloaded. Download it before transcribing."
        )


class AudioDecodeError(TranscriptionError):
    """Raised when audio cannot be decoded for local inference."""
    pass


class TranscriptionInProgressError(TranscriptionError):
    """Raised when an exclusive adapter is already running a transcription."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(
            f"A transcription is already running on '{model_id}'. "
            "Wait for it to finish before starting another."
        )
