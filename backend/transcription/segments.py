"""
Segment Extraction

Pure helpers that turn provider output into ordered, non-overlapping
TranscriptionSegment lists. No I/O happens here.
"""

import re
from typing import Iterable, List, Optional

from .models import TranscriptionSegment

DEFAULT_SEGMENT_DURATION = 5.0

# Leading [MM:SS], (MM:SS), [H:MM:SS] or (H:MM:SS); brackets must pair up.
_TIMESTAMP_LINE_RE = re.compile(
    r"^\s*(?:\[(?P<square>\d{1,2}:\d{2}(?::\d{2})?)\]"
    r"|\((?P<round>\d{1,2}:\d{2}(?::\d{2})?)\))"
    r"\s*(?P<text>.*)$"
)


def parse_timestamp(token: str) -> Optional[float]:
    """
    Convert an ``MM:SS`` or ``H:MM:SS`` token to seconds.

    Returns None for malformed tokens (seconds >= 60, or minutes >= 60 when
    an hour field is present).
    """
    parts = token.split(":")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None

    if len(numbers) == 2:
        minutes, seconds = numbers
        if seconds >= 60:
            return None
        return float(minutes * 60 + seconds)
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        if minutes >= 60 or seconds >= 60:
            return None
        return float(hours * 3600 + minutes * 60 + seconds)
    return None


def extract_timestamp_segments(
    text: str,
    segment_duration: float = DEFAULT_SEGMENT_DURATION,
) -> Optional[List[TranscriptionSegment]]:
    """
    Extract segments from free text with leading bracketed timestamps.

    Each matching line becomes a segment starting at its timestamp. Free
    text rarely states an end time, so each segment ends ``segment_duration``
    seconds later, or at the next segment's start if that comes sooner.
    Lines sharing one timestamp are merged.

    Args:
        text: Transcript text, one utterance per line
        segment_duration: Estimated length of a segment in seconds

    Returns:
        Segments ordered by start time, or None if no line carries a
        timestamp
    """
    if not text:
        return None

    found = []
    for line in text.splitlines():
        match = _TIMESTAMP_LINE_RE.match(line)
        if not match:
            continue
        start = parse_timestamp(match.group("square") or match.group("round"))
        content = match.group("text").strip()
        if start is None or not content:
            continue
        found.append((start, content))

    if not found:
        return None

    # sort() is stable, so lines with equal timestamps keep document order
    found.sort(key=lambda item: item[0])

    merged: List[List] = []
    for start, content in found:
        if merged and merged[-1][0] == start:
            merged[-1][1] = f"{merged[-1][1]} {content}"
        else:
            merged.append([start, content])

    segments = []
    for index, (start, content) in enumerate(merged):
        end = start + segment_duration
        if index + 1 < len(merged):
            end = min(end, merged[index + 1][0])
        segments.append(
            TranscriptionSegment(text=content, start_time=start, end_time=end)
        )
    return segments


def normalize_segments(
    segments: Optional[Iterable[TranscriptionSegment]],
) -> Optional[List[TranscriptionSegment]]:
    """
    Order structured segments and remove overlaps.

    An end time that runs past the next segment's start is pulled back to
    that start. An empty input means no timing information and maps to None.

    Raises:
        ValueError: If a segment ends before it starts
    """
    if segments is None:
        return None

    ordered = sorted(segments, key=lambda segment: segment.start_time)
    if not ordered:
        return None

    for segment in ordered:
        if segment.end_time < segment.start_time:
            raise ValueError(
                f"Segment ends before it starts: "
                f"{segment.start_time} > {segment.end_time}"
            )

    normalized = []
    for index, segment in enumerate(ordered):
        if index + 1 < len(ordered):
            next_start = ordered[index + 1].start_time
            if segment.end_time > next_start:
                segment = TranscriptionSegment(
                    text=segment.text,
                    start_time=segment.start_time,
                    end_time=next_start,
                    confidence=segment.confidence,
                )
        normalized.append(segment)
    return normalized
