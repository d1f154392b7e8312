"""
Meeting Summary Module

Local meeting summaries via Strands Agent with Ollama provider.
"""

from .agent import (
    SummaryAgent,
    MeetingInfo,
    MeetingSummary,
    ActionItem,
    parse_summary_response,
)
from .service import MeetingSummaryService
from .exceptions import (
    SummaryError,
    OllamaUnavailableError,
    ModelNotFoundError,
    SummaryTimeoutError,
    InvalidSummaryError,
    EmptyTranscriptError,
)

__all__ = [
    "SummaryAgent",
    "MeetingInfo",
    "MeetingSummary",
    "ActionItem",
    "parse_summary_response",
    "MeetingSummaryService",
    "SummaryError",
    "OllamaUnavailableError",
    "ModelNotFoundError",
    "SummaryTimeoutError",
    "InvalidSummaryError",
    "EmptyTranscriptError",
]
