# ==============================================================================
# Spatial Clustering Engine
# ==============================================================================
"""
Heatmap clustering and aggregation.

Nearby interaction points are merged into weighted centroids so a page with
thousands of clicks renders as a few hundred decals.

Known limitation: the merge is greedy and depends on input order. A point
joins the first earlier seed within ``radius`` of it, so reordering the
input can produce different clusters. Pass ``sort=True`` to cluster in
coordinate order when reproducibility under reordering matters.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from pagepulse.core.models import (
    HeatmapAggregate,
    HeatmapCluster,
    HeatmapMetadata,
    HeatmapPoint,
    InteractionEvent,
)

DEFAULT_RADIUS = 20

HEATMAP_TYPES = ("click", "scroll", "hover", "mousemove")


def _as_point(point: HeatmapPoint | Mapping) -> HeatmapPoint:
    if isinstance(point, HeatmapPoint):
        return point
    return HeatmapPoint.model_validate(point)


def _round_px(value: float) -> int:
    # Half-up: 2.5 -> 3
    return math.floor(value + 0.5)


def _weight(point: HeatmapPoint) -> float:
    # Zero or missing intensity still counts as one interaction
    return point.intensity or 1


def cluster_points(
    points: Iterable[HeatmapPoint | Mapping],
    radius: float = DEFAULT_RADIUS,
    sort: bool = False,
) -> list[HeatmapCluster]:
    """
    Cluster nearby points within ``radius`` pixels.

    Each unmerged point seeds a cluster and absorbs every later unmerged
    point within ``radius`` of the seed. The cluster position is the
    intensity-weighted centroid (rounded to whole pixels), its intensity the
    summed weight and its count the number of points merged. O(n^2).

    Args:
        points: HeatmapPoint objects or dicts with x, y and optional intensity
        radius: Clustering radius in pixels
        sort: Cluster in (x, y) order instead of input order

    Returns:
        List of clusters, in seed order
    """
    pts = [_as_point(p) for p in points]
    if sort:
        pts.sort(key=lambda p: (p.x, p.y))

    clusters: list[HeatmapCluster] = []
    merged = [False] * len(pts)

    for i, seed in enumerate(pts):
        if merged[i]:
            continue
        merged[i] = True
        members = [seed]

        for j in range(i + 1, len(pts)):
            if merged[j]:
                continue
            other = pts[j]
            if math.hypot(other.x - seed.x, other.y - seed.y) <= radius:
                members.append(other)
                merged[j] = True

        total_weight = sum(_weight(p) for p in members)
        if len(members) > 1:
            x = _round_px(sum(p.x * _weight(p) for p in members) / total_weight)
            y = _round_px(sum(p.y * _weight(p) for p in members) / total_weight)
        else:
            x, y = seed.x, seed.y

        clusters.append(
            HeatmapCluster(x=x, y=y, intensity=total_weight, count=len(members))
        )

    return clusters


def normalized_intensity(clusters: list[HeatmapCluster]) -> list[float]:
    """
    Intensity of each cluster relative to the hottest one (0..1].

    Renderers derive decal radius and opacity from this ratio.
    """
    if not clusters:
        return []
    peak = max(c.intensity for c in clusters)
    if peak <= 0:
        return [0.0 for _ in clusters]
    return [c.intensity / peak for c in clusters]


def points_from_events(
    events: Iterable[InteractionEvent],
    event_type: str | None = None,
) -> list[HeatmapPoint]:
    """
    Extract rounded coordinates from events carrying numeric ``metadata.x/y``.

    Args:
        events: Interaction events
        event_type: Keep only this type (e.g. "click"); None keeps all

    Returns:
        Points with intensity 1, tagged with their session
    """
    points = []
    for event in events:
        if event_type is not None and event.event_type.value != event_type:
            continue
        x = event.metadata.get("x")
        y = event.metadata.get("y")
        if not _is_number(x) or not _is_number(y):
            continue
        points.append(
            HeatmapPoint(x=_round_px(x), y=_round_px(y), intensity=1, session_id=event.session_id)
        )
    return points


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def aggregate_heatmap(
    events: Iterable[InteractionEvent],
    page_url: str,
    heatmap_type: str,
    device: str = "unknown",
    radius: float = DEFAULT_RADIUS,
) -> HeatmapAggregate:
    """
    Build the clustered heatmap for one page and interaction type.

    Events for other pages are ignored.

    Returns:
        HeatmapAggregate with clusters plus raw interaction, user and
        session counts
    """
    page_events = [e for e in events if e.page_url == page_url]
    raw_points = points_from_events(page_events, heatmap_type)

    session_ids = sorted({e.session_id for e in page_events})
    users = {e.user_id for e in page_events if e.user_id}

    return HeatmapAggregate(
        page_url=page_url,
        type=heatmap_type,
        device=device,
        points=cluster_points(raw_points, radius),
        metadata=HeatmapMetadata(
            total_interactions=len(raw_points),
            unique_users=len(users),
            session_count=len(session_ids),
            last_updated=datetime.now(timezone.utc),
        ),
        session_ids=session_ids,
    )
