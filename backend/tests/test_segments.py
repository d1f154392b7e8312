"""
Tests for Segment Extraction

Tests timestamp parsing from free text and normalization of structured
segments.
"""

import pytest

from transcription.models import TranscriptionSegment
from transcription.segments import (
    DEFAULT_SEGMENT_DURATION,
    extract_timestamp_segments,
    normalize_segments,
    parse_timestamp,
)


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_minutes_seconds(self):
        assert parse_timestamp("00:05") == 5.0
        assert parse_timestamp("01:15") == 75.0
        assert parse_timestamp("5:07") == 307.0

    def test_hours_minutes_seconds(self):
        assert parse_timestamp("1:02:03") == 3723.0

    def test_rejects_seconds_out_of_range(self):
        assert parse_timestamp("00:60") is None
        assert parse_timestamp("1:00:75") is None

    def test_rejects_minutes_out_of_range_with_hours(self):
        assert parse_timestamp("1:60:00") is None

    def test_rejects_garbage(self):
        assert parse_timestamp("ab:cd") is None
        assert parse_timestamp("5") is None


class TestExtractTimestampSegments:
    """Tests for extract_timestamp_segments."""

    def test_two_lines(self):
        """Bracketed timestamps become ordered segments."""
        segments = extract_timestamp_segments("[00:05] Hello\n[01:15] World")

        assert segments is not None
        assert len(segments) == 2
        assert [s.start_time for s in segments] == [5.0, 75.0]
        assert [s.text for s in segments] == ["Hello", "World"]
        for segment in segments:
            assert segment.end_time > segment.start_time

    def test_no_timestamps_returns_none(self):
        """Text without timestamps yields no segments at all."""
        assert extract_timestamp_segments("Hello there.\nNo times here.") is None

    def test_empty_text_returns_none(self):
        assert extract_timestamp_segments("") is None

    def test_end_time_is_estimated(self):
        segments = extract_timestamp_segments("[00:10] Only line")
        assert segments[0].end_time == 10.0 + DEFAULT_SEGMENT_DURATION

    def test_end_time_clamped_to_next_start(self):
        """Close timestamps never overlap."""
        segments = extract_timestamp_segments("[00:01] First\n[00:03] Second")
        assert segments[0].end_time == 3.0
        assert segments[1].end_time == 8.0

    def test_parenthesized_and_hour_forms(self):
        text = "(00:30) Intro\n[1:00:00] Wrap up"
        segments = extract_timestamp_segments(text)
        assert [s.start_time for s in segments] == [30.0, 3600.0]

    def test_mismatched_brackets_ignored(self):
        assert extract_timestamp_segments("[00:05) Hello\n(00:06] World") is None

    def test_malformed_timestamp_line_skipped(self):
        segments = extract_timestamp_segments("[00:99] Bad\n[00:10] Good")
        assert len(segments) == 1
        assert segments[0].text == "Good"

    def test_timestamp_without_text_skipped(self):
        segments = extract_timestamp_segments("[00:05]\n[00:10] Speech")
        assert len(segments) == 1
        assert segments[0].start_time == 10.0

    def test_timestamp_must_lead_the_line(self):
        assert extract_timestamp_segments("Speaker said [00:05] hello") is None

    def test_leading_whitespace_allowed(self):
        segments = extract_timestamp_segments("   [00:05] Indented")
        assert segments[0].text == "Indented"

    def test_out_of_order_lines_sorted(self):
        segments = extract_timestamp_segments("[00:20] Later\n[00:05] Earlier")
        assert [s.text for s in segments] == ["Earlier", "Later"]

    def test_equal_starts_merged(self):
        segments = extract_timestamp_segments("[00:05] Hello\n[00:05] again")
        assert len(segments) == 1
        assert segments[0].text == "Hello again"

    def test_non_timestamp_lines_ignored(self):
        text = "Transcript:\n[00:05] Speaker 1: Hi\nSummary follows"
        segments = extract_timestamp_segments(text)
        assert len(segments) == 1
        assert segments[0].text == "Speaker 1: Hi"


class TestNormalizeSegments:
    """Tests for normalize_segments."""

    def test_none_passes_through(self):
        assert normalize_segments(None) is None

    def test_empty_list_becomes_none(self):
        assert normalize_segments([]) is None

    def test_valid_segments_unchanged(self):
        segments = [
            TranscriptionSegment("a", 0.0, 1.0, confidence=0.9),
            TranscriptionSegment("b", 1.0, 2.5),
        ]
        assert normalize_segments(segments) == segments

    def test_sorts_by_start(self):
        segments = [
            TranscriptionSegment("b", 2.0, 3.0),
            TranscriptionSegment("a", 0.0, 1.0),
        ]
        result = normalize_segments(segments)
        assert [s.text for s in result] == ["a", "b"]

    def test_clamps_overlap(self):
        segments = [
            TranscriptionSegment("a", 0.0, 2.0, confidence=0.8),
            TranscriptionSegment("b", 1.5, 3.0),
        ]
        result = normalize_segments(segments)
        assert result[0].end_time == 1.5
        assert result[0].confidence == 0.8
        assert result[1].end_time == 3.0

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            normalize_segments([TranscriptionSegment("bad", 5.0, 4.0)])
