# ==============================================================================
# Trend Aggregator
# ==============================================================================
"""
Hourly trend buckets for dashboards.

Buckets are keyed by the UTC hour (``YYYY-MM-DDTHH``), returned in ascending
order, and sparse: hours without signal are omitted.
"""

from collections import Counter
from collections.abc import Iterable

from pagepulse.core.clicks import DEFAULT_RAGE_THRESHOLD, DEFAULT_RAGE_WINDOW_MS
from pagepulse.core.models import (
    EventType,
    InteractionEvent,
    PerformanceSample,
    TrendBucket,
    to_datetime,
)
from pagepulse.core.selectors import resolve_selector


def hour_bucket(timestamp_ms: int) -> str:
    """Truncate a timestamp to its UTC hour key, e.g. ``2024-05-01T13``."""
    return to_datetime(timestamp_ms).strftime("%Y-%m-%dT%H")


def _to_buckets(counts: dict[str, int]) -> list[TrendBucket]:
    return [TrendBucket(hour=hour, count=counts[hour]) for hour in sorted(counts) if counts[hour]]


def bucket_counts(timestamps: Iterable[int]) -> list[TrendBucket]:
    """Count any timestamped signal per hour."""
    return _to_buckets(Counter(hour_bucket(ts) for ts in timestamps))


def _session_has_rage(
    clicks: list[InteractionEvent],
    window_ms: int,
    threshold: int,
) -> bool:
    """
    Whether any sliding window over a session's clicks holds ``threshold``
    clicks on one selector.
    """
    selectors = [resolve_selector(c.metadata) for c in clicks]
    in_window: Counter[str] = Counter()
    i = 0
    for j, click in enumerate(clicks):
        in_window[selectors[j]] += 1
        while i < j and click.timestamp - clicks[i].timestamp > window_ms:
            in_window[selectors[i]] -= 1
            i += 1
        if in_window[selectors[j]] >= threshold:
            return True
    return False


def rage_trend(
    events: Iterable[InteractionEvent],
    window_ms: int = DEFAULT_RAGE_WINDOW_MS,
    threshold: int = DEFAULT_RAGE_THRESHOLD,
) -> list[TrendBucket]:
    """
    Distinct sessions per hour with at least one rage burst.

    Clicks are bucketed by hour first, so a burst straddling an hour
    boundary is judged separately on each side.
    """
    by_hour: dict[str, dict[str, list[InteractionEvent]]] = {}
    clicks = sorted(
        (e for e in events if e.event_type == EventType.CLICK),
        key=lambda e: e.timestamp,
    )
    for click in clicks:
        sessions = by_hour.setdefault(hour_bucket(click.timestamp), {})
        sessions.setdefault(click.session_id, []).append(click)

    counts = {
        hour: sum(
            1
            for session_clicks in sessions.values()
            if _session_has_rage(session_clicks, window_ms, threshold)
        )
        for hour, sessions in by_hour.items()
    }
    return _to_buckets(counts)


def error_trend(samples: Iterable[PerformanceSample]) -> list[TrendBucket]:
    """Total JS errors reported per hour."""
    counts: Counter[str] = Counter()
    for sample in samples:
        if sample.js_errors:
            counts[hour_bucket(sample.timestamp)] += len(sample.js_errors)
    return _to_buckets(counts)
