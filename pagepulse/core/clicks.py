# ==============================================================================
# Click Signal Detection - Rage and Dead Clicks
# ==============================================================================
"""
Pure detection logic for click frustration signals.

Rage clicks: bursts of repeated clicks on one target within a short window.
Dead clicks: clicks that produce no observable follow-up.

Both detectors resolve targets through ``resolve_selector`` and share the
sliding-window helper below, so they always agree on grouping identity.
All functions take already-fetched events and hold no state.
"""

import math
import re
from collections.abc import Iterable, Iterator

from pagepulse.core.models import (
    DeadClickRecord,
    DeadSpot,
    EventType,
    InteractionEvent,
    Position,
    RageIncident,
    RageSpot,
)
from pagepulse.core.selectors import resolve_selector

DEFAULT_RAGE_WINDOW_MS = 3000
DEFAULT_RAGE_THRESHOLD = 3
DEFAULT_IDLE_MS = 2000

MEANINGFUL_ACTION = re.compile(r"navigate|open|success", re.IGNORECASE)

SAMPLE_TEXT_LENGTH = 60


# ==============================================================================
# Shared Helpers
# ==============================================================================


def burst_windows(
    timestamps: list[int],
    window_ms: int,
    threshold: int,
) -> Iterator[tuple[int, int]]:
    """
    Yield non-overlapping ``(i, j)`` index ranges holding a burst.

    Two-pointer scan over ascending timestamps: ``j`` advances one step at a
    time and ``i`` catches up until the window spans at most ``window_ms``.
    Once ``j - i + 1 >= threshold`` the burst also absorbs any directly
    following clicks still within ``window_ms`` of its first click, the range
    is yielded, and the next window starts fresh after it. One burst is
    therefore never reported twice.
    """
    n = len(timestamps)
    i = 0
    j = 0
    while j < n:
        while i < j and timestamps[j] - timestamps[i] > window_ms:
            i += 1
        if j - i + 1 >= threshold:
            while j + 1 < n and timestamps[j + 1] - timestamps[i] <= window_ms:
                j += 1
            yield i, j
            i = j + 1
        j += 1


def _sample_text(events: Iterable[InteractionEvent]) -> str | None:
    for event in events:
        text = event.metadata.get("text")
        if text:
            return str(text)[:SAMPLE_TEXT_LENGTH]
    return None


def _mean_coordinate(events: list[InteractionEvent], axis: str) -> int:
    total = 0.0
    for event in events:
        value = event.metadata.get(axis)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total += value
    return math.floor(total / len(events) + 0.5)


# ==============================================================================
# Rage Clicks
# ==============================================================================


def detect_rage_clicks(
    events: Iterable[InteractionEvent],
    window_ms: int = DEFAULT_RAGE_WINDOW_MS,
    threshold: int = DEFAULT_RAGE_THRESHOLD,
) -> list[RageIncident]:
    """
    Find rage-click bursts.

    Clicks are grouped by ``session|page|selector``; within each group a
    burst is ``threshold`` or more clicks spanning at most ``window_ms``.
    Non-click events are ignored.

    Args:
        events: Interaction events in any order
        window_ms: Maximum time span of a burst
        threshold: Minimum clicks in a burst

    Returns:
        One RageIncident per non-overlapping burst, ordered by
        session, page and time
    """
    clicks = [e for e in events if e.event_type == EventType.CLICK]
    clicks.sort(key=lambda e: (e.session_id, e.page_url, e.timestamp))

    groups: dict[tuple[str, str, str], list[InteractionEvent]] = {}
    for click in clicks:
        key = (click.session_id, click.page_url, resolve_selector(click.metadata))
        groups.setdefault(key, []).append(click)

    incidents = []
    for (session_id, page_url, selector), group in groups.items():
        timestamps = [e.timestamp for e in group]
        for i, j in burst_windows(timestamps, window_ms, threshold):
            burst = group[i : j + 1]
            incidents.append(
                RageIncident(
                    session_id=session_id,
                    page_url=page_url,
                    selector=selector,
                    count=len(burst),
                    first_seen=burst[0].timestamp,
                    last_seen=burst[-1].timestamp,
                    position=Position(
                        x=_mean_coordinate(burst, "x"),
                        y=_mean_coordinate(burst, "y"),
                    ),
                    sample_text=_sample_text(burst),
                )
            )
    return incidents


def summarize_rage_spots(
    incidents: Iterable[RageIncident],
    limit: int | None = None,
) -> list[RageSpot]:
    """
    Roll incidents up per ``(page_url, selector)``.

    Returns:
        Spots sorted by incidents, then clicks, descending
    """
    spots: dict[tuple[str, str], RageSpot] = {}
    sessions: dict[tuple[str, str], set[str]] = {}

    for inc in incidents:
        key = (inc.page_url, inc.selector)
        spot = spots.get(key)
        if spot is None:
            spot = RageSpot(
                page_url=inc.page_url,
                selector=inc.selector,
                first_seen=inc.first_seen,
                last_seen=inc.last_seen,
                sample_text=inc.sample_text,
            )
            spots[key] = spot
            sessions[key] = set()
        spot.incidents += 1
        spot.clicks += inc.count
        spot.first_seen = min(spot.first_seen, inc.first_seen)
        spot.last_seen = max(spot.last_seen, inc.last_seen)
        if spot.sample_text is None:
            spot.sample_text = inc.sample_text
        sessions[key].add(inc.session_id)

    for key, spot in spots.items():
        spot.sessions = len(sessions[key])

    ranked = sorted(spots.values(), key=lambda s: (-s.incidents, -s.clicks))
    return ranked[:limit] if limit is not None else ranked


# ==============================================================================
# Dead Clicks
# ==============================================================================


def _is_meaningful(click_selector: str, follow_up: InteractionEvent) -> bool:
    """Whether ``follow_up`` shows the click had a visible effect."""
    if follow_up.event_type in (EventType.PAGEVIEW, EventType.SUBMIT):
        return True
    if (
        follow_up.event_type == EventType.CLICK
        and resolve_selector(follow_up.metadata) != click_selector
    ):
        return True
    action = follow_up.metadata.get("action")
    return bool(action) and MEANINGFUL_ACTION.search(str(action)) is not None


def detect_dead_clicks(
    events: Iterable[InteractionEvent],
    idle_ms: int = DEFAULT_IDLE_MS,
) -> list[DeadClickRecord]:
    """
    Find clicks with no observable effect.

    For each click, later events of the same session within ``idle_ms`` are
    scanned. The click counts as meaningful if one of them is a pageview or
    submit, a click on a different selector, or carries a
    navigate/open/success ``metadata.action``. A click with no later events
    is dead.

    Args:
        events: All interaction events (not only clicks), any order
        idle_ms: Idle window after each click

    Returns:
        Dead click records ordered by session and time
    """
    by_session: dict[str, list[InteractionEvent]] = {}
    for event in sorted(events, key=lambda e: (e.session_id, e.timestamp)):
        by_session.setdefault(event.session_id, []).append(event)

    records = []
    for session_events in by_session.values():
        for i, click in enumerate(session_events):
            if click.event_type != EventType.CLICK:
                continue
            selector = resolve_selector(click.metadata)
            meaningful = False
            for follow_up in session_events[i + 1 :]:
                if follow_up.timestamp - click.timestamp > idle_ms:
                    break
                if _is_meaningful(selector, follow_up):
                    meaningful = True
                    break
            if not meaningful:
                records.append(
                    DeadClickRecord(
                        session_id=click.session_id,
                        page_url=click.page_url,
                        selector=selector,
                        timestamp=click.timestamp,
                        sample_text=_sample_text([click]),
                    )
                )
    return records


def summarize_dead_spots(
    records: Iterable[DeadClickRecord],
    limit: int | None = None,
) -> list[DeadSpot]:
    """
    Roll dead clicks up per ``(page_url, selector)``.

    Returns:
        Spots sorted by dead click count, descending
    """
    spots: dict[tuple[str, str], DeadSpot] = {}
    sessions: dict[tuple[str, str], set[str]] = {}

    for rec in records:
        key = (rec.page_url, rec.selector)
        spot = spots.get(key)
        if spot is None:
            spot = DeadSpot(
                page_url=rec.page_url,
                selector=rec.selector,
                first_seen=rec.timestamp,
                last_seen=rec.timestamp,
                sample_text=rec.sample_text,
            )
            spots[key] = spot
            sessions[key] = set()
        spot.dead_clicks += 1
        spot.first_seen = min(spot.first_seen, rec.timestamp)
        spot.last_seen = max(spot.last_seen, rec.timestamp)
        sessions[key].add(rec.session_id)

    for key, spot in spots.items():
        spot.sessions = len(sessions[key])

    ranked = sorted(spots.values(), key=lambda s: -s.dead_clicks)
    return ranked[:limit] if limit is not None else ranked
