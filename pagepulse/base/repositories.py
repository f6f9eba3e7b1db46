# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Ports for the data the signal engine reads and the little state it writes.

These define the "what" (fetch a window of events, save a rule) not the
"how". Concrete implementations in infrastructure/ handle the specifics.

Includes:
- InteractionSource: interaction events filtered by project and time range
- PerformanceSource: performance samples (vitals + JS errors)
- AlertRuleRepository: alert rules and their trigger state
- HeatmapRepository: aggregated heatmaps keyed by (page, type, device)
"""

from abc import ABC, abstractmethod

from pagepulse.core.models import AlertRule, HeatmapAggregate, InteractionEvent, PerformanceSample


class InteractionSource(ABC):
    """Read access to stored interaction events."""

    @abstractmethod
    def fetch_interactions(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
        event_type: str | None = None,
    ) -> list[InteractionEvent]:
        """
        Fetch events in ``[start_ms, end_ms]``.

        Args:
            project_id: Project to read
            start_ms: Window start (epoch ms, inclusive)
            end_ms: Window end (epoch ms, inclusive)
            page_url: Optional page filter
            event_type: Optional event type filter

        Returns:
            Events sorted by session, then timestamp
        """
        ...

    def count_interactions(self, project_id: str, start_ms: int, end_ms: int) -> int:
        """Count events in the window. Override when the store can count cheaply."""
        return len(self.fetch_interactions(project_id, start_ms, end_ms))


class PerformanceSource(ABC):
    """Read access to stored performance samples."""

    @abstractmethod
    def fetch_samples(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
    ) -> list[PerformanceSample]:
        """
        Fetch samples in ``[start_ms, end_ms]``, sorted by timestamp.
        """
        ...


class AlertRuleRepository(ABC):
    """Persistence for alert rules."""

    @abstractmethod
    def list_active(self) -> list[AlertRule]:
        """Return every rule with ``is_active`` set."""
        ...

    @abstractmethod
    def get(self, rule_id: str) -> AlertRule | None:
        """Return one rule, or None if not found."""
        ...

    @abstractmethod
    def save(self, rule: AlertRule) -> None:
        """Insert or replace a rule (including ``last_triggered_at``)."""
        ...

    @abstractmethod
    def delete(self, rule_id: str) -> bool:
        """Remove a rule. Returns False if it did not exist."""
        ...


class HeatmapRepository(ABC):
    """Persistence for aggregated heatmaps."""

    @abstractmethod
    def save(self, aggregate: HeatmapAggregate) -> None:
        """Insert or replace the aggregate for its (page, type, device)."""
        ...

    @abstractmethod
    def get(self, page_url: str, heatmap_type: str, device: str = "unknown") -> HeatmapAggregate | None:
        """Return a stored aggregate, or None if not found."""
        ...
