"""
Credential Store

Persists per-provider API keys. Several models can share one credential
group (e.g. every Gemini variant uses the same Google AI Studio key).
"""

import logging
from typing import Mapping, Optional

from .models import TranscriptionModel
from .store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "api_key."

# Model id -> credential group. Models not listed use their own id.
CREDENTIAL_GROUPS: Mapping[str, str] = {
    "gemini-2.0-flash": "gemini",
    "gemini-2.5-flash": "gemini",
    "gemini-2.5-flash-exp": "gemini",
    "gemini-2.5-pro": "gemini",
    "gemini-live-2.5-flash-preview": "gemini",
    "openai-whisper": "openai",
    "groq-distil-whisper": "groq",
    "groq-whisper-v3-turbo": "groq",
    "groq-whisper-v3": "groq",
    "together-whisper-v3": "together",
    "huggingface-whisper": "huggingface",
    "deepgram-nova": "deepgram",
    "replicate-whisper": "replicate",
}


class CredentialStore:
    """
    Reads and writes API keys by credential group.

    Pure persistence: no network calls, no validation against providers.
    """

    def __init__(
        self,
        store: KeyValueStore,
        groups: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the credential store.

        Args:
            store: Backing key-value store
            groups: Model id -> group override table. Defaults to
                    CREDENTIAL_GROUPS.
        """
        self._store = store
        self._groups = dict(CREDENTIAL_GROUPS if groups is None else groups)

    def credential_group(self, model: TranscriptionModel) -> str:
        """Resolve the credential group for a model."""
        return self._groups.get(model.id, model.id)

    def set_credential(self, group: str, secret: str) -> bool:
        """
        Save a secret for a group, overwriting any previous value.

        The write reaches the backing store before this returns.

        Raises:
            ValueError: If the group or secret is empty
        """
        group = group.strip()
        secret = secret.strip()
        if not group:
            raise ValueError("Credential group must not be empty")
        if not secret:
            raise ValueError(f"Secret for '{group}' must not be empty")

        self._store.set(f"{KEY_PREFIX}{group}", secret)
        logger.info(f"Saved credential for group '{group}'")
        return True

    def get_credential(self, group: str) -> Optional[str]:
        return self._store.get(f"{KEY_PREFIX}{group}") or None

    def credential_for(self, model: TranscriptionModel) -> Optional[str]:
        """Get the secret that applies to a model, if any."""
        return self.get_credential(self.credential_group(model))

    def is_configured(self, model: TranscriptionModel) -> bool:
        """True if the model needs no credential or its group has one."""
        if not model.requires_credential:
            return True
        return self.credential_for(model) is not None
