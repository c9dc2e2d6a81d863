"""Timeline derivation: confidence filtering and chronological merge.

Everything here is a pure function of (result, threshold); callers recompute
on every read instead of caching.

Ordering uses plain string comparison of the ``MM:SS`` timestamps. That is
correct for zero-padded values under 100 minutes only: ``"100:00"`` sorts
before ``"20:00"``. Pass ``numeric=True`` to order by parsed seconds instead.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from .models.analysis import AnalysisResult, SignDetection, TimelineItem


def _check_threshold(threshold: float) -> float:
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Confidence threshold must be within [0, 1], got {threshold}")
    return threshold


def filter_signs(signs: Iterable[SignDetection], threshold: float) -> list[SignDetection]:
    """Keep detections with ``confidence >= threshold`` (boundary included)."""
    _check_threshold(threshold)
    return [s for s in signs if s.confidence >= threshold]


def timestamp_seconds(timestamp: str) -> float:
    """Parse ``SS``, ``MM:SS`` or ``HH:MM:SS`` into seconds.

    Returns ``math.inf`` for anything unparsable so such items sort last.
    """
    parts = timestamp.strip().split(":")
    if not 1 <= len(parts) <= 3:
        return math.inf
    total = 0.0
    try:
        for part in parts:
            value = float(part)
            if value < 0:
                return math.inf
            total = total * 60 + value
    except ValueError:
        return math.inf
    return total


def build_timeline(
    result: AnalysisResult | None,
    threshold: float,
    *,
    numeric: bool = False,
) -> list[TimelineItem]:
    """Merge filtered signs and all transcript segments into one ordered list.

    Args:
        result: Current analysis, or None before any analysis succeeded.
        threshold: Minimum sign confidence in [0, 1]. Transcript is never filtered.
        numeric: Order by parsed seconds instead of by timestamp string.

    Returns:
        Tagged items in ascending timestamp order. Equal timestamps keep
        transcript entries ahead of signs.
    """
    _check_threshold(threshold)
    if result is None:
        return []

    items = [TimelineItem(kind="transcript", entry=t) for t in result.transcript]
    items += [TimelineItem(kind="sign", entry=s) for s in filter_signs(result.signs, threshold)]

    if numeric:
        items.sort(key=lambda item: (timestamp_seconds(item.timestamp), item.timestamp))
    else:
        items.sort(key=lambda item: item.timestamp)
    return items


def timeline_counts(items: Sequence[TimelineItem]) -> dict[str, int]:
    signs = sum(1 for item in items if item.kind == "sign")
    return {"signs": signs, "transcript": len(items) - signs, "total": len(items)}
