"""
Meeting Summary Agent

Strands Agent wrapper for Ollama that turns a meeting transcript into a
structured summary.
"""

import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import ollama
from strands import Agent
from strands.models.ollama import OllamaModel

from .exceptions import (
    SummaryError,
    OllamaUnavailableError,
    ModelNotFoundError,
    SummaryTimeoutError,
    InvalidSummaryError,
    EmptyTranscriptError,
)

logger = logging.getLogger(__name__)

PRIORITIES = ("high", "medium", "low")

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class MeetingInfo:
    """Meeting metadata and transcript to summarize."""
    meeting_id: str
    transcript: str
    title: str = "Untitled meeting"
    date: str = ""
    duration_seconds: Optional[float] = None

    def duration_label(self) -> str:
        if not self.duration_seconds:
            return "Not specified"
        minutes, seconds = divmod(int(self.duration_seconds), 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return f"{hours}h {minutes}m"
        return f"{minutes}m {seconds}s"


@dataclass
class ActionItem:
    """Follow-up task extracted from a meeting."""
    task: str
    assignee: Optional[str] = None
    deadline: Optional[str] = None
    priority: str = "medium"

    def to_dict(self) -> dict:
        return {
            "task": self.task,
            "assignee": self.assignee,
            "deadline": self.deadline,
            "priority": self.priority,
        }


@dataclass
class MeetingSummary:
    """Structured summary of one meeting."""
    meeting_id: str
    model: str
    title: str
    short_summary: str
    overview: str = ""
    participants: List[str] = field(default_factory=list)
    key_points: List[str] = field(default_factory=list)
    decisions: List[str] = field(default_factory=list)
    action_items: List[ActionItem] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    generated_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "meeting_id": self.meeting_id,
            "model": self.model,
            "title": self.title,
            "short_summary": self.short_summary,
            "overview": self.overview,
            "participants": self.participants,
            "key_points": self.key_points,
            "decisions": self.decisions,
            "action_items": [item.to_dict() for item in self.action_items],
            "next_steps": self.next_steps,
            "generated_at": self.generated_at,
        }


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ("not specified", "none", "n/a"):
        return None
    return text


def parse_summary_response(response: str, meeting: MeetingInfo, model: str) -> MeetingSummary:
    """
    Parse the model's JSON answer into a MeetingSummary.

    Code fences and text around the JSON object are ignored.

    Raises:
        InvalidSummaryError: If no JSON object can be decoded or the
                             summary text is missing
    """
    cleaned = _CODE_FENCE_RE.sub("", response.strip())
    match = _JSON_OBJECT_RE.search(cleaned)
    if not match:
        raise InvalidSummaryError("no JSON object found", response)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise InvalidSummaryError(f"malformed JSON ({e.msg})", response) from e

    if not isinstance(data, dict):
        raise InvalidSummaryError("expected a JSON object", response)

    short_summary = str(data.get("short_summary") or "").strip()
    if not short_summary:
        raise InvalidSummaryError("missing short_summary", response)

    action_items = []
    for item in data.get("action_items") or []:
        if not isinstance(item, dict) or not str(item.get("task") or "").strip():
            continue
        priority = str(item.get("priority") or "medium").strip().lower()
        action_items.append(ActionItem(
            task=str(item["task"]).strip(),
            assignee=_optional_str(item.get("assignee")),
            deadline=_optional_str(item.get("deadline")),
            priority=priority if priority in PRIORITIES else "medium",
        ))

    return MeetingSummary(
        meeting_id=meeting.meeting_id,
        model=model,
        title=str(data.get("title") or meeting.title).strip(),
        short_summary=short_summary,
        overview=str(data.get("overview") or "").strip(),
        participants=_string_list(data.get("participants")),
        key_points=_string_list(data.get("key_points")),
        decisions=_string_list(data.get("decisions")),
        action_items=action_items,
        next_steps=_string_list(data.get("next_steps")),
    )


class SummaryAgent:
    """
    Strands Agent wrapper for Ollama summaries.

    Keeps meeting content on the local machine.
    """

    DEFAULT_MODEL = "llama3.2:3b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 120.0  # seconds

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        host: str = DEFAULT_HOST,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the summary agent.

        Args:
            model_name: Ollama model name (default: llama3.2:3b)
            host: Ollama server host URL
            timeout: Generation timeout in seconds
        """
        self.model_name = model_name
        self.host = host
        self.timeout = timeout

        self._agent: Optional[Agent] = None
        self._initialized = False

    async def initialize(self) -> None:
        """
        Initialize Strands Agent with Ollama provider.

        Raises:
            OllamaUnavailableError: If Ollama service is not running
            ModelNotFoundError: If the specified model is not available
        """
        if self._initialized:
            return

        logger.info(f"Initializing SummaryAgent with model: {self.model_name}")

        if not self.is_available():
            raise OllamaUnavailableError()

        if not self._check_model_exists():
            raise ModelNotFoundError(self.model_name)

        try:
            ollama_model = OllamaModel(
                model_id=self.model_name,
                host=self.host,
            )
            self._agent = Agent(
                model=ollama_model,
                system_prompt=self._get_system_prompt(),
            )
        except Exception as e:
            logger.error(f"Failed to initialize SummaryAgent: {e}")
            raise SummaryError(f"Failed to initialize agent: {e}") from e

        self._initialized = True
        logger.info(f"SummaryAgent initialized with {self.model_name}")

    def is_available(self) -> bool:
        """Check if Ollama service is running."""
        try:
            ollama.Client(host=self.host).list()
            return True
        except Exception as e:
            logger.warning(f"Ollama service check failed: {e}")
            return False

    def _check_model_exists(self) -> bool:
        """Check if the specified model is pulled in Ollama."""
        try:
            result = ollama.Client(host=self.host).list()
        except Exception as e:
            logger.error(f"Failed to check model availability: {e}")
            return False

        full_names = [m.model for m in result.models]
        base_names = [name.split(":")[0] for name in full_names]
        return (
            self.model_name in full_names
            or self.model_name.split(":")[0] in base_names
        )

    def _get_system_prompt(self) -> str:
        return (
            "You are an expert meeting analyst. You read meeting transcripts "
            "and produce accurate, concise summaries. You only report what the "
            "transcript supports and always answer with a single JSON object."
        )

    def build_prompt(self, meeting: MeetingInfo) -> str:
        """Build the summary prompt from transcript and metadata."""
        return f"""Analyze this meeting transcript and summarize it.

MEETING METADATA:
- Title: {meeting.title}
- Date: {meeting.date or "Not specified"}
- Duration: {meeting.duration_label()}

MEETING TRANSCRIPT:
{meeting.transcript}

Respond with JSON in exactly this shape:
{{
  "title": "Improved meeting title based on content",
  "short_summary": "A concise 2-3 sentence overview",
  "overview": "A paragraph on the purpose, main discussions and outcomes",
  "participants": ["Identified participants or speakers"],
  "key_points": ["Important points discussed"],
  "decisions": ["Decisions made during the meeting"],
  "action_items": [
    {{"task": "Action to take", "assignee": "Person responsible or null",
      "deadline": "Due date or null", "priority": "high/medium/low"}}
  ],
  "next_steps": ["Immediate follow-up items"]
}}

Use empty lists when information is not available."""

    async def summarize(self, meeting: MeetingInfo) -> MeetingSummary:
        """
        Generate a structured summary for a meeting.

        Raises:
            EmptyTranscriptError: If the meeting has no transcript
            OllamaUnavailableError: If Ollama is not running
            SummaryTimeoutError: If generation times out
            InvalidSummaryError: If the response cannot be parsed
            SummaryError: For other errors
        """
        if not meeting.transcript or not meeting.transcript.strip():
            raise EmptyTranscriptError(meeting.meeting_id)

        if not self._initialized:
            await self.initialize()

        prompt = self.build_prompt(meeting)
        logger.debug(f"Summarizing meeting {meeting.meeting_id} with {self.model_name}")

        try:
            loop = asyncio.get_running_loop()
            response = await asyncio.wait_for(
                loop.run_in_executor(None, self._agent, prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise SummaryTimeoutError(self.timeout)
        except Exception as e:
            error_str = str(e).lower()
            if "connection" in error_str or "refused" in error_str:
                raise OllamaUnavailableError() from e
            logger.error(f"Summary generation failed: {e}")
            raise SummaryError(f"Summary generation failed: {e}") from e

        summary = parse_summary_response(str(response), meeting, self.model_name)
        logger.info(
            f"Summarized meeting {meeting.meeting_id}: "
            f"{len(summary.action_items)} action items, {len(summary.decisions)} decisions"
        )
        return summary

    async def shutdown(self) -> None:
        """Clean up resources."""
        self._agent = None
        self._initialized = False
        logger.info("SummaryAgent shutdown complete")
