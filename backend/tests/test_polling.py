"""
Tests for Job Polling

Tests the bounded poll loop with an injected sleep.
"""

import pytest

from transcription import BackendError, TranscriptionTimedOutError
from transcription.adapters import PollingPolicy, PollStatus, poll_until_done


class FakeSleep:
    """Records requested sleeps without waiting."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def scripted(*statuses):
    """Build a check coroutine returning the statuses in order."""
    remaining = list(statuses)
    calls = []

    async def check():
        calls.append(1)
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]

    check.calls = calls
    return check


class TestPollingPolicy:
    """Tests for PollingPolicy validation."""

    def test_defaults(self):
        policy = PollingPolicy()
        assert policy.interval_seconds == 3.0
        assert policy.max_attempts == 200

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            PollingPolicy(max_attempts=0)
        with pytest.raises(ValueError):
            PollingPolicy(interval_seconds=-1)


class TestPollUntilDone:
    """Tests for poll_until_done."""

    @pytest.mark.asyncio
    async def test_returns_result_when_done(self):
        sleep = FakeSleep()
        check = scripted(PollStatus.pending(), PollStatus.pending(), PollStatus.done({"text": "ok"}))

        result = await poll_until_done("test", check, PollingPolicy(1.5, 10), sleep=sleep)

        assert result == {"text": "ok"}
        assert len(check.calls) == 3
        assert sleep.calls == [1.5, 1.5]

    @pytest.mark.asyncio
    async def test_times_out_after_max_attempts(self):
        """A job that never finishes stops after exactly max_attempts checks."""
        sleep = FakeSleep()
        check = scripted(PollStatus.pending("queued"))

        with pytest.raises(TranscriptionTimedOutError) as exc_info:
            await poll_until_done("replicate", check, PollingPolicy(3.0, 5), sleep=sleep)

        assert len(check.calls) == 5
        assert len(sleep.calls) == 4
        assert exc_info.value.provider == "replicate"
        assert exc_info.value.attempts == 5

    @pytest.mark.asyncio
    async def test_failed_state_raises_backend_error(self):
        check = scripted(PollStatus.pending(), PollStatus.failed("bad audio"))

        with pytest.raises(BackendError, match="bad audio") as exc_info:
            await poll_until_done("assemblyai", check, PollingPolicy(0, 10), sleep=FakeSleep())

        assert exc_info.value.provider == "assemblyai"

    @pytest.mark.asyncio
    async def test_attempt_fraction_reported(self):
        reported = []
        check = scripted(PollStatus.pending(), PollStatus.pending(), PollStatus.done(None))

        await poll_until_done(
            "test", check, PollingPolicy(0, 4),
            on_progress=lambda p, m: reported.append(p),
            sleep=FakeSleep(),
        )

        assert reported == [25.0, 50.0]

    @pytest.mark.asyncio
    async def test_provider_progress_preferred(self):
        reported = []
        check = scripted(PollStatus.pending("half", progress=50.0), PollStatus.done(None))

        await poll_until_done(
            "test", check, PollingPolicy(0, 4),
            on_progress=lambda p, m: reported.append((p, m)),
            sleep=FakeSleep(),
        )

        assert reported == [(50.0, "half")]
