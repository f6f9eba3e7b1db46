# ==============================================================================
# Tests for Rage and Dead Click Detection
# ==============================================================================
"""
Unit tests for detect_rage_clicks(), detect_dead_clicks() and their
per-spot rollups.
"""

from pagepulse.core.clicks import (
    burst_windows,
    detect_dead_clicks,
    detect_rage_clicks,
    summarize_dead_spots,
    summarize_rage_spots,
)

from conftest import BASE_TS

# ==============================================================================
# burst_windows
# ==============================================================================


class TestBurstWindows:
    """Tests for the shared two-pointer window scan."""

    def test_no_burst_below_threshold(self):
        assert list(burst_windows([0, 100], 3000, 3)) == []

    def test_burst_absorbs_following_clicks(self):
        """Clicks still inside the window join the burst already reached."""
        assert list(burst_windows([0, 500, 1000, 1500], 3000, 3)) == [(0, 3)]

    def test_windows_do_not_overlap(self):
        """After a burst the scan restarts after its last click."""
        timestamps = [0, 100, 200, 5000, 5100, 5200]
        assert list(burst_windows(timestamps, 3000, 3)) == [(0, 2), (3, 5)]

    def test_window_slides_past_old_clicks(self):
        """Old clicks drop out of the window before the threshold test."""
        assert list(burst_windows([0, 4000, 4100, 4200], 3000, 3)) == [(1, 3)]


# ==============================================================================
# Rage Clicks
# ==============================================================================


class TestDetectRageClicks:
    """Tests for detect_rage_clicks()."""

    def test_four_quick_clicks_make_one_incident(self, make_event):
        """Four clicks at 0/500/1000/1500 ms on one button form one incident of 4."""
        events = [make_event("click", offset, elementId="buy", x=10, y=20) for offset in (0, 500, 1000, 1500)]

        incidents = detect_rage_clicks(events, window_ms=3000, threshold=3)

        assert len(incidents) == 1
        incident = incidents[0]
        assert incident.count == 4
        assert incident.selector == "#buy"
        assert incident.first_seen == BASE_TS
        assert incident.last_seen == BASE_TS + 1500
        assert (incident.position.x, incident.position.y) == (10, 20)

    def test_input_order_does_not_matter(self, make_event):
        """Events are sorted before scanning."""
        events = [make_event("click", offset, elementId="buy") for offset in (1500, 0, 1000, 500)]
        assert [i.count for i in detect_rage_clicks(events)] == [4]

    def test_flurry_within_one_window_is_one_incident(self, make_event):
        """Six clicks 500 ms apart all sit within 3 s of the first: one incident of 6."""
        events = [make_event("click", offset, elementId="buy") for offset in range(0, 3000, 500)]

        (incident,) = detect_rage_clicks(events, window_ms=3000, threshold=3)

        assert incident.count == 6
        assert incident.last_seen == BASE_TS + 2500

    def test_click_past_the_window_starts_a_new_scan(self, make_event):
        """The burst ends at the last click within 3 s of its first click."""
        offsets = (0, 500, 1000, 3000, 3100, 3200, 3300)
        events = [make_event("click", offset, elementId="buy") for offset in offsets]

        assert [i.count for i in detect_rage_clicks(events)] == [4, 3]

    def test_slow_clicks_are_not_rage(self, make_event):
        events = [make_event("click", offset, elementId="buy") for offset in (0, 2000, 4000, 6000)]
        assert detect_rage_clicks(events) == []

    def test_groups_by_selector_and_session(self, make_event):
        """Clicks on different targets or sessions never combine."""
        events = [
            make_event("click", 0, elementId="a"),
            make_event("click", 100, elementId="b"),
            make_event("click", 200, elementId="a"),
            make_event("click", 300, session_id="s2", elementId="a"),
        ]
        assert detect_rage_clicks(events) == []

    def test_ignores_non_click_events(self, make_event):
        events = [make_event("hover", offset, elementId="buy") for offset in (0, 10, 20)]
        assert detect_rage_clicks(events) == []

    def test_sample_text_is_truncated(self, make_event):
        """The first non-empty text is kept, truncated to 60 chars."""
        long_text = "x" * 100
        events = [
            make_event("click", 0, elementId="buy"),
            make_event("click", 10, elementId="buy", text=long_text),
            make_event("click", 20, elementId="buy", text="other"),
        ]
        (incident,) = detect_rage_clicks(events)
        assert incident.sample_text == "x" * 60

    def test_summarize_rage_spots(self, make_event):
        """Spots roll up per page and selector, ordered by incidents then clicks."""
        events = []
        for session in ("s1", "s2"):
            events += [make_event("click", o, session_id=session, elementId="buy") for o in (0, 10, 20)]
        events += [make_event("click", o, session_id="s3", elementId="menu") for o in (0, 10, 20, 30, 40)]

        spots = summarize_rage_spots(detect_rage_clicks(events))

        assert [s.selector for s in spots] == ["#buy", "#menu"]
        assert (spots[0].incidents, spots[0].clicks, spots[0].sessions) == (2, 6, 2)
        assert (spots[1].incidents, spots[1].clicks, spots[1].sessions) == (1, 5, 1)
        assert len(summarize_rage_spots(detect_rage_clicks(events), limit=1)) == 1


# ==============================================================================
# Dead Clicks
# ==============================================================================


class TestDetectDeadClicks:
    """Tests for detect_dead_clicks()."""

    def test_repeated_same_selector_click_is_dead(self, make_event):
        """A click followed only by a click on the same element is dead."""
        events = [
            make_event("click", 0, elementId="x"),
            make_event("click", 500, elementId="x"),
        ]
        records = detect_dead_clicks(events, idle_ms=2000)
        assert [r.timestamp for r in records] == [BASE_TS, BASE_TS + 500]

    def test_submit_makes_click_meaningful(self, make_event):
        """A submit inside the idle window means the click worked."""
        events = [
            make_event("click", 0, elementId="x"),
            make_event("submit", 500),
        ]
        assert detect_dead_clicks(events, idle_ms=2000) == []

    def test_pageview_and_other_selector_are_meaningful(self, make_event):
        events = [
            make_event("click", 0, elementId="a"),
            make_event("pageview", 100),
            make_event("click", 5000, elementId="b"),
            make_event("click", 5100, elementId="c"),
            make_event("pageview", 5200),
        ]
        assert detect_dead_clicks(events) == []

    def test_action_metadata_is_meaningful(self, make_event):
        """navigate/open/success actions count, case-insensitively."""
        events = [
            make_event("click", 0, elementId="a"),
            make_event("custom", 100, action="Modal_OPEN"),
        ]
        assert detect_dead_clicks(events) == []

    def test_follow_up_outside_window_does_not_count(self, make_event):
        events = [
            make_event("click", 0, elementId="a"),
            make_event("submit", 2500),
        ]
        assert len(detect_dead_clicks(events, idle_ms=2000)) == 1

    def test_other_sessions_are_not_follow_ups(self, make_event):
        events = [
            make_event("click", 0, elementId="a"),
            make_event("submit", 100, session_id="s2"),
        ]
        assert len(detect_dead_clicks(events)) == 1

    def test_summarize_dead_spots(self, make_event):
        events = [
            make_event("click", 0, session_id="s1", elementId="a"),
            make_event("click", 0, session_id="s2", elementId="a"),
            make_event("click", 0, session_id="s3", className="btn ghost", text="Help"),
        ]
        spots = summarize_dead_spots(detect_dead_clicks(events))

        assert [(s.selector, s.dead_clicks, s.sessions) for s in spots] == [
            ("#a", 2, 2),
            (".btn.ghost", 1, 1),
        ]
        assert spots[1].sample_text == "Help"
