"""
Adapter Interface

Common contract for provider adapters plus the HTTP plumbing the network
adapters share. Every transport or provider-side failure is turned into a
BackendError carrying the provider name, status and body snippet.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx

from ..audio import AudioFile
from ..exceptions import BackendError, CredentialRequiredError
from ..models import ModelFamily, ProgressPhase, RawTranscription, TranscriptionModel

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[ProgressPhase, float, str], None]


@dataclass
class TranscriptionRequest:
    """Everything an adapter needs for a single call."""
    audio: AudioFile
    model: TranscriptionModel
    credential: Optional[str] = None
    on_phase: Optional[PhaseCallback] = None

    def report(self, phase: ProgressPhase, progress: float, message: str) -> None:
        """Report a phase on the adapter's own 0-100 scale."""
        if self.on_phase is not None:
            self.on_phase(phase, progress, message)

    def require_credential(self) -> str:
        """
        Get the credential for a model that needs one.

        Raises:
            CredentialRequiredError: If no credential was resolved
        """
        if not self.credential:
            raise CredentialRequiredError(self.model.id, self.model.provider)
        return self.credential


class TranscriptionAdapter(ABC):
    """
    Base class for family adapters.

    An adapter turns the common request into one backend's protocol and
    returns the unnormalized result. It never swallows failures.
    """

    family: ModelFamily

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        """
        Transcribe the request's audio with its model.

        Raises:
            TranscriptionError: A subclass describing the failure
        """

    async def aclose(self) -> None:
        """Release network clients or model handles."""
        return None


def create_http_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """
    Create the shared async HTTP client.

    No timeout is applied unless one is configured; callers that need
    bounded latency wrap the call in ``asyncio.wait_for``.
    """
    return httpx.AsyncClient(timeout=timeout)


async def send_request(
    client: httpx.AsyncClient,
    provider: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request and reject transport failures and non-2xx responses.

    Raises:
        BackendError: If the request fails or the provider rejects it
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.error(f"{provider} request to {url} failed: {e}")
        raise BackendError(provider, f"Request failed: {e}") from e

    if response.is_error:
        logger.error(f"{provider} returned HTTP {response.status_code}")
        raise BackendError(
            provider,
            "Request rejected",
            status=response.status_code,
            body=response.text,
        )

    return response


def read_json(provider: str, response: httpx.Response) -> Dict[str, Any]:
    """
    Decode a JSON object body.

    Raises:
        BackendError: If the body is not a JSON object
    """
    try:
        data = response.json()
    except ValueError as e:
        raise BackendError(
            provider,
            "Malformed response body",
            status=response.status_code,
            body=response.text,
        ) from e

    if not isinstance(data, dict):
        raise BackendError(
            provider,
            "Expected a JSON object",
            status=response.status_code,
            body=response.text,
        )
    return data


async def send_json_request(
    client: httpx.AsyncClient,
    provider: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Send a request and decode its JSON object body."""
    response = await send_request(client, provider, method, url, **kwargs)
    return read_json(provider, response)
