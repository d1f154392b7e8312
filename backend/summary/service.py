"""
Meeting Summary Service

Caches summaries per meeting so repeated requests do not hit the model.
"""

import logging
import time
from typing import Callable, Dict, Optional

from .agent import SummaryAgent, MeetingInfo, MeetingSummary

logger = logging.getLogger(__name__)


class MeetingSummaryService:
    """
    Service layer for meeting summaries.

    Summaries younger than ``cache_ttl_seconds`` are served from memory.
    """

    DEFAULT_CACHE_TTL = 24 * 60 * 60  # one day

    def __init__(
        self,
        agent: Optional[SummaryAgent] = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the summary service.

        Args:
            agent: SummaryAgent instance. Creates new one if not provided.
            cache_ttl_seconds: How long a cached summary stays fresh
            clock: Time source, returns seconds since the epoch
        """
        self.agent = agent or SummaryAgent()
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._cache: Dict[str, MeetingSummary] = {}

    def is_available(self) -> bool:
        return self.agent.is_available()

    def get_cached_summary(self, meeting_id: str) -> Optional[MeetingSummary]:
        """Return the cached summary if it is still fresh."""
        summary = self._cache.get(meeting_id)
        if summary is None:
            return None
        if self._clock() - summary.generated_at > self.cache_ttl_seconds:
            logger.debug(f"Cached summary for {meeting_id} expired")
            return None
        return summary

    async def generate_summary(self, meeting: MeetingInfo, force: bool = False) -> MeetingSummary:
        """
        Summarize a meeting, reusing a fresh cached summary.

        Args:
            meeting: Meeting to summarize
            force: Regenerate even if a fresh summary is cached

        Raises:
            SummaryError: If generation fails; the cache is left unchanged
        """
        if not force:
            cached = self.get_cached_summary(meeting.meeting_id)
            if cached is not None:
                logger.info(f"Using cached summary for meeting {meeting.meeting_id}")
                return cached

        summary = await self.agent.summarize(meeting)
        summary.generated_at = self._clock()
        self._cache[meeting.meeting_id] = summary
        return summary

    def clear_cache(self, meeting_id: Optional[str] = None) -> None:
        if meeting_id is None:
            self._cache.clear()
        else:
            self._cache.pop(meeting_id, None)

    async def stop(self) -> None:
        await self.agent.shutdown()
