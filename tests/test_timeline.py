"""Tests for confidence filtering and timeline merge ordering."""

from __future__ import annotations

import math

import pytest

from sign_context_mcp.models.analysis import (
    AnalysisResult,
    ContextAnalysis,
    SignDetection,
    TranscriptSegment,
)
from sign_context_mcp.timeline import (
    build_timeline,
    filter_signs,
    timeline_counts,
    timestamp_seconds,
)


def _sign(ts: str, confidence: float, gesture: str = "Wave") -> SignDetection:
    return SignDetection(timestamp=ts, gesture=gesture, meaning="m", confidence=confidence)


def _seg(ts: str, text: str = "t") -> TranscriptSegment:
    return TranscriptSegment(timestamp=ts, speaker="A", text=text)


def _result(signs=(), transcript=()) -> AnalysisResult:
    return AnalysisResult(signs=list(signs), transcript=list(transcript), context=ContextAnalysis())


class TestFilterSigns:
    @pytest.mark.parametrize("threshold", [0.0, 0.25, 0.5, 0.7, 0.9, 1.0])
    def test_keeps_exactly_at_or_above(self, threshold):
        signs = [_sign("00:01", c) for c in (0.0, 0.25, 0.5, 0.7, 0.9, 1.0)]
        kept = filter_signs(signs, threshold)
        assert kept == [s for s in signs if s.confidence >= threshold]

    def test_boundary_is_inclusive(self):
        sign = _sign("00:01", 0.7)
        assert filter_signs([sign], 0.7) == [sign]

    @pytest.mark.parametrize("threshold", [-0.1, 1.01])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ValueError, match="within"):
            filter_signs([], threshold)


class TestBuildTimeline:
    def test_no_result_is_empty(self):
        assert build_timeline(None, 0.5) == []

    def test_nothing_passes_is_empty(self):
        assert build_timeline(_result(signs=[_sign("00:01", 0.1)]), 0.5) == []

    def test_transcript_never_filtered(self):
        items = build_timeline(_result(transcript=[_seg("00:01"), _seg("00:02")]), 1.0)
        assert [i.kind for i in items] == ["transcript", "transcript"]

    def test_count_is_filtered_signs_plus_transcript(self):
        signs = [_sign(f"00:{i:02d}", i / 10) for i in range(10)]
        transcript = [_seg(f"00:{i:02d}") for i in range(0, 10, 3)]
        items = build_timeline(_result(signs, transcript), 0.45)
        assert len(items) == len(filter_signs(signs, 0.45)) + len(transcript)
        assert timeline_counts(items) == {"signs": 5, "transcript": 4, "total": 9}

    def test_does_not_mutate_source(self):
        result = _result([_sign("00:09", 0.9)], [_seg("00:01")])
        before = result.model_dump()
        build_timeline(result, 0.0)
        assert result.model_dump() == before

    def test_ascending_string_order_matches_numeric_under_100_minutes(self):
        stamps = ["09:59", "00:12", "01:00", "00:05"]
        items = build_timeline(_result(transcript=[_seg(s) for s in stamps]), 0.0)
        ordered = [i.timestamp for i in items]
        assert ordered == ["00:05", "00:12", "01:00", "09:59"]
        assert ordered == sorted(stamps, key=timestamp_seconds)

    def test_zero_five_before_fifty(self):
        items = build_timeline(_result(transcript=[_seg("00:50"), _seg("00:05")]), 0.0)
        assert [i.timestamp for i in items] == ["00:05", "00:50"]

    def test_lexicographic_limitation_past_100_minutes(self):
        """Known limitation: string order puts "100:00" before "20:00"."""
        items = build_timeline(_result(transcript=[_seg("20:00"), _seg("100:00")]), 0.0)
        assert [i.timestamp for i in items] == ["100:00", "20:00"]

    def test_numeric_order_handles_100_minutes(self):
        items = build_timeline(
            _result(transcript=[_seg("100:00"), _seg("20:00")]), 0.0, numeric=True,
        )
        assert [i.timestamp for i in items] == ["20:00", "100:00"]

    def test_equal_timestamps_keep_transcript_first(self):
        items = build_timeline(_result([_sign("00:10", 0.9)], [_seg("00:10")]), 0.5)
        assert [i.kind for i in items] == ["transcript", "sign"]

    def test_flat_item_carries_kind_and_fields(self):
        items = build_timeline(_result([_sign("00:10", 0.9)]), 0.5)
        assert items[0].flat() == {
            "kind": "sign",
            "timestamp": "00:10",
            "gesture": "Wave",
            "meaning": "m",
            "confidence": 0.9,
        }


class TestThresholdScenario:
    """Upload, analyze, then move the threshold slider."""

    def test_threshold_gates_sign_only(self):
        result = _result(
            signs=[SignDetection(timestamp="00:10", gesture="Wave", meaning="Hello", confidence=0.9)],
            transcript=[TranscriptSegment(timestamp="00:05", speaker="A", text="Hi")],
        )

        high = build_timeline(result, 0.95)
        assert [(i.kind, i.timestamp) for i in high] == [("transcript", "00:05")]

        low = build_timeline(result, 0.5)
        assert [(i.kind, i.timestamp) for i in low] == [
            ("transcript", "00:05"),
            ("sign", "00:10"),
        ]


class TestTimestampSeconds:
    @pytest.mark.parametrize("ts,expected", [
        ("00:05", 5),
        ("01:00", 60),
        ("100:00", 6000),
        ("1:02:03", 3723),
        ("42", 42),
        ("00:05.5", 5.5),
    ])
    def test_parses(self, ts, expected):
        assert timestamp_seconds(ts) == expected

    @pytest.mark.parametrize("ts", ["", "ab:cd", "1:2:3:4", "-1:00"])
    def test_unparsable_is_infinite(self, ts):
        assert timestamp_seconds(ts) == math.inf
