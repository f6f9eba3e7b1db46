# ==============================================================================
# In-Memory Repository Implementations
# ==============================================================================
"""
List-backed sources and repositories.

Used by the CLI when analysing exported JSON files, and by tests.
"""

import threading

from pagepulse.base import AlertRuleRepository, InteractionSource, PerformanceSource
from pagepulse.core.models import AlertRule, InteractionEvent, PerformanceSample


class InMemoryInteractionSource(InteractionSource):
    """Filters a fixed list of interaction events."""

    def __init__(self, events: list[InteractionEvent] | None = None):
        self._events = list(events or [])

    def add(self, *events: InteractionEvent) -> None:
        self._events.extend(events)

    def fetch_interactions(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
        event_type: str | None = None,
    ) -> list[InteractionEvent]:
        matched = [
            e
            for e in self._events
            if e.project_id == project_id
            and start_ms <= e.timestamp <= end_ms
            and (page_url is None or e.page_url == page_url)
            and (event_type is None or e.event_type.value == event_type)
        ]
        return sorted(matched, key=lambda e: (e.session_id, e.timestamp))


class InMemoryPerformanceSource(PerformanceSource):
    """Filters a fixed list of performance samples."""

    def __init__(self, samples: list[PerformanceSample] | None = None):
        self._samples = list(samples or [])

    def add(self, *samples: PerformanceSample) -> None:
        self._samples.extend(samples)

    def fetch_samples(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
    ) -> list[PerformanceSample]:
        matched = [
            s
            for s in self._samples
            if s.project_id == project_id
            and start_ms <= s.timestamp <= end_ms
            and (page_url is None or s.page_url == page_url)
        ]
        return sorted(matched, key=lambda s: s.timestamp)


class InMemoryAlertRuleRepository(AlertRuleRepository):
    """Dict of rules keyed by id. Stores copies so callers can't mutate state."""

    def __init__(self, rules: list[AlertRule] | None = None):
        self._rules: dict[str, AlertRule] = {}
        self._lock = threading.Lock()
        for rule in rules or []:
            self.save(rule)

    def list_active(self) -> list[AlertRule]:
        with self._lock:
            return [r.model_copy() for r in self._rules.values() if r.is_active]

    def get(self, rule_id: str) -> AlertRule | None:
        with self._lock:
            rule = self._rules.get(rule_id)
            return rule.model_copy() if rule else None

    def save(self, rule: AlertRule) -> None:
        with self._lock:
            self._rules[rule.id] = rule.model_copy()

    def delete(self, rule_id: str) -> bool:
        with self._lock:
            return self._rules.pop(rule_id, None) is not None
