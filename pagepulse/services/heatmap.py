# ==============================================================================
# Heatmap Service
# ==============================================================================
"""
Rebuilds and persists heatmap aggregates for a page.

Reads the page's interactions over a lookback window, clusters each
heatmap type and stores the result keyed by (page, type, device).
"""

import logging
from dataclasses import dataclass

from pagepulse.base import HeatmapRepository, InteractionSource
from pagepulse.core.heatmap import DEFAULT_RADIUS, HEATMAP_TYPES, aggregate_heatmap
from pagepulse.core.models import HeatmapAggregate

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_MS = 30 * 24 * 60 * 60 * 1000  # 30 days


@dataclass
class RegenerationResult:
    """Outcome for one heatmap type."""

    type: str
    success: bool
    point_count: int = 0
    error: str | None = None


class HeatmapService:
    """Builds heatmaps from an interaction source into a heatmap repository."""

    def __init__(
        self,
        interactions: InteractionSource,
        heatmaps: HeatmapRepository,
        project_id: str = "default",
        radius: float = DEFAULT_RADIUS,
        lookback_ms: int = DEFAULT_LOOKBACK_MS,
    ):
        self._interactions = interactions
        self._heatmaps = heatmaps
        self._project_id = project_id
        self._radius = radius
        self._lookback_ms = lookback_ms

    def update_heatmap(
        self,
        page_url: str,
        heatmap_type: str,
        now_ms: int,
        device: str = "unknown",
    ) -> HeatmapAggregate:
        """Rebuild and save one heatmap."""
        events = self._interactions.fetch_interactions(
            self._project_id,
            now_ms - self._lookback_ms,
            now_ms,
            page_url=page_url,
        )
        aggregate = aggregate_heatmap(events, page_url, heatmap_type, device, self._radius)
        self._heatmaps.save(aggregate)
        logger.info(
            "Saved %s heatmap for %s: %d raw points -> %d clusters",
            heatmap_type,
            page_url,
            aggregate.metadata.total_interactions,
            len(aggregate.points),
        )
        return aggregate

    def regenerate_page(self, page_url: str, now_ms: int) -> list[RegenerationResult]:
        """
        Rebuild every heatmap type for ``page_url``.

        A failing type is logged and reported; the other types still run.
        """
        results = []
        for heatmap_type in HEATMAP_TYPES:
            try:
                aggregate = self.update_heatmap(page_url, heatmap_type, now_ms)
            except Exception as e:
                logger.exception("Failed to regenerate %s heatmap for %s", heatmap_type, page_url)
                results.append(RegenerationResult(type=heatmap_type, success=False, error=str(e)))
                continue
            results.append(
                RegenerationResult(type=heatmap_type, success=True, point_count=len(aggregate.points))
            )
        return results
