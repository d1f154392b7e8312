"""
Job Polling

Shared await-sleep-recheck loop for providers that accept a job and
finish it asynchronously. The loop is bounded by an attempt ceiling.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..exceptions import BackendError, TranscriptionTimedOutError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
PollProgress = Callable[[float, str], None]


@dataclass(frozen=True)
class PollingPolicy:
    """Fixed polling interval and an upper bound on attempts."""
    interval_seconds: float = 3.0
    max_attempts: int = 200

    def __post_init__(self):
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


@dataclass
class PollStatus:
    """Outcome of one status check."""
    state: str
    result: Any = None
    progress: Optional[float] = None
    message: str = ""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"

    @classmethod
    def pending(cls, message: str = "", progress: Optional[float] = None) -> "PollStatus":
        return cls(state=cls.PENDING, progress=progress, message=message)

    @classmethod
    def done(cls, result: Any) -> "PollStatus":
        return cls(state=cls.DONE, result=result)

    @classmethod
    def failed(cls, message: str) -> "PollStatus":
        return cls(state=cls.FAILED, message=message)


async def poll_until_done(
    provider: str,
    check: Callable[[], Awaitable[PollStatus]],
    policy: PollingPolicy,
    on_progress: Optional[PollProgress] = None,
    sleep: Optional[Sleep] = None,
) -> Any:
    """
    Poll a job until it reaches a terminal state.

    Args:
        provider: Provider name used in errors and logs
        check: Coroutine returning the job's current PollStatus
        policy: Interval and attempt ceiling
        on_progress: Receives completion (0-100) while the job is pending.
                     Without a provider-reported value the fraction of
                     attempts used is reported instead.
        sleep: Awaitable sleep; defaults to asyncio.sleep

    Returns:
        The ``result`` of the DONE status

    Raises:
        BackendError: If the provider reports a terminal failure
        TranscriptionTimedOutError: If the job is still pending after
                                    ``policy.max_attempts`` checks
    """
    sleep = sleep or asyncio.sleep
    for attempt in range(1, policy.max_attempts + 1):
        status = await check()

        if status.state == PollStatus.DONE:
            logger.debug(f"{provider} job finished after {attempt} polls")
            return status.result

        if status.state == PollStatus.FAILED:
            logger.error(f"{provider} job failed: {status.message}")
            raise BackendError(provider, f"Transcription job failed: {status.message}")

        if on_progress is not None:
            progress = status.progress
            if progress is None:
                progress = 100.0 * attempt / policy.max_attempts
            on_progress(progress, status.message or f"Waiting for {provider}...")

        if attempt < policy.max_attempts:
            await sleep(policy.interval_seconds)

    logger.error(f"{provider} job still pending after {policy.max_attempts} polls")
    raise TranscriptionTimedOutError(provider, policy.max_attempts, policy.interval_seconds)
