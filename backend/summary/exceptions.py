"""
Meeting Summary Exceptions

Custom exceptions for summary generation errors.
"""


class SummaryError(Exception):
    """Base exception for summary errors."""
    pass


class OllamaUnavailableError(SummaryError):
    """Raised when Ollama service is not running or unreachable."""

    def __init__(self, message: str = "Ollama service is unavailable"):
        super().__init__(message)


class ModelNotFoundError(SummaryError):
    """Raised when the requested model is not found in Ollama."""

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"Model '{model_name}' not found. Try: ollama pull {model_name}")


class SummaryTimeoutError(SummaryError):
    """Raised when summary generation times out."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Summary generation timed out after {timeout_seconds} seconds")


class InvalidSummaryError(SummaryError):
    """Raised when the model's response is not a usable summary."""

    def __init__(self, reason: str, response: str = ""):
        self.reason = reason
        self.response = response[:500]
        super().__init__(f"Invalid summary response: {reason}")


class EmptyTranscriptError(SummaryError):
    """Raised when a meeting has no transcript to summarize."""

    def __init__(self, meeting_id: str):
        self.meeting_id = meeting_id
        super().__init__(f"No transcription available for meeting '{meeting_id}'")
