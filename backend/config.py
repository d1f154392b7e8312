"""
minutes Configuration

Application settings loaded from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{value}'")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'")


@dataclass
class AppConfig:
    """
    Runtime configuration for the transcription backend.

    Attributes:
        data_dir: Directory holding settings.json (credentials, preferences)
        default_model: Model used when no active model has been chosen
        models_dir: Directory with downloaded on-device model weights
        poll_interval: Seconds between job status checks
        poll_max_attempts: Status checks before a job is considered timed out
        http_timeout: Network timeout in seconds; None disables it
        enforce_size_limits: Reject audio above a model's declared size limit
        aws_region: Region for Amazon Transcribe and S3
        aws_bucket: S3 bucket for Amazon Transcribe; None disables the provider
        ollama_host: Ollama server used for meeting summaries
        summary_model: Ollama model used for meeting summaries
        log_level: Logging level name
    """
    data_dir: Path
    default_model: str = "whisper-base"
    models_dir: Optional[Path] = None
    poll_interval: float = 3.0
    poll_max_attempts: int = 200
    http_timeout: Optional[float] = None
    enforce_size_limits: bool = False
    aws_region: str = "us-west-2"
    aws_bucket: Optional[str] = None
    ollama_host: str = "http://localhost:11434"
    summary_model: str = "llama3.2:3b"
    log_level: str = "INFO"

    @property
    def settings_path(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def resolved_models_dir(self) -> Path:
        return self.models_dir or self.data_dir / "models"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Load configuration from MINUTES_* (and AWS_REGION) variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        data_dir = Path(os.getenv("MINUTES_DATA_DIR", "~/.minutes")).expanduser()
        models_dir = os.getenv("MINUTES_MODELS_DIR")

        return cls(
            data_dir=data_dir,
            default_model=os.getenv("MINUTES_DEFAULT_MODEL", "whisper-base"),
            models_dir=Path(models_dir).expanduser() if models_dir else None,
            poll_interval=_env_float("MINUTES_POLL_INTERVAL", 3.0),
            poll_max_attempts=_env_int("MINUTES_POLL_MAX_ATTEMPTS", 200),
            http_timeout=_env_float("MINUTES_HTTP_TIMEOUT", None),
            enforce_size_limits=(
                os.getenv("MINUTES_ENFORCE_SIZE_LIMITS", "false").strip().lower() in _TRUE_VALUES
            ),
            aws_region=os.getenv("AWS_REGION", "us-west-2"),
            aws_bucket=os.getenv("MINUTES_AWS_BUCKET") or None,
            ollama_host=os.getenv("MINUTES_OLLAMA_HOST", "http://localhost:11434"),
            summary_model=os.getenv("MINUTES_SUMMARY_MODEL", "llama3.2:3b"),
            log_level=os.getenv("MINUTES_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check the configuration for invalid values.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if self.poll_interval < 0:
            errors.append("MINUTES_POLL_INTERVAL must not be negative")
        if self.poll_max_attempts < 1:
            errors.append("MINUTES_POLL_MAX_ATTEMPTS must be at least 1")
        if self.http_timeout is not None and self.http_timeout <= 0:
            errors.append("MINUTES_HTTP_TIMEOUT must be positive")
        if not self.default_model:
            errors.append("MINUTES_DEFAULT_MODEL must not be empty")

        for error in errors:
            logger.warning(f"Invalid configuration: {error}")
        return len(errors) == 0, errors
