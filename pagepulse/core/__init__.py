# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no external dependencies.

This module contains:
- Domain models (InteractionEvent, PerformanceSample, AlertRule, ...)
- Metadata sanitizing and selector resolution
- Heatmap clustering, rage/dead click detection, error fingerprinting
- Hourly trend aggregation

All code here is framework-agnostic and easily unit-testable.
"""

from pagepulse.core.clicks import (
    detect_dead_clicks,
    detect_rage_clicks,
    summarize_dead_spots,
    summarize_rage_spots,
)
from pagepulse.core.errors import (
    group_errors,
    make_fingerprint,
    normalize_stack,
    top_error_groups,
)
from pagepulse.core.heatmap import (
    HEATMAP_TYPES,
    aggregate_heatmap,
    cluster_points,
    normalized_intensity,
    points_from_events,
)
from pagepulse.core.models import (
    AlertRule,
    Channel,
    Comparator,
    DeadClickRecord,
    DeadSpot,
    ErrorGroup,
    ErrorRecord,
    EventType,
    HeatmapAggregate,
    HeatmapCluster,
    HeatmapPoint,
    InteractionEvent,
    PerformanceSample,
    RageIncident,
    RageSpot,
    TrendBucket,
)
from pagepulse.core.parsing import parse_interactions, parse_samples
from pagepulse.core.sanitizer import sanitize, sanitize_metadata
from pagepulse.core.selectors import resolve_selector
from pagepulse.core.trends import bucket_counts, error_trend, hour_bucket, rage_trend

__all__ = [
    # Models
    "AlertRule",
    "Channel",
    "Comparator",
    "DeadClickRecord",
    "DeadSpot",
    "ErrorGroup",
    "ErrorRecord",
    "EventType",
    "HeatmapAggregate",
    "HeatmapCluster",
    "HeatmapPoint",
    "InteractionEvent",
    "PerformanceSample",
    "RageIncident",
    "RageSpot",
    "TrendBucket",
    # Ingestion
    "parse_interactions",
    "parse_samples",
    "resolve_selector",
    "sanitize",
    "sanitize_metadata",
    # Heatmaps
    "HEATMAP_TYPES",
    "aggregate_heatmap",
    "cluster_points",
    "normalized_intensity",
    "points_from_events",
    # Click signals
    "detect_dead_clicks",
    "detect_rage_clicks",
    "summarize_dead_spots",
    "summarize_rage_spots",
    # Errors
    "group_errors",
    "make_fingerprint",
    "normalize_stack",
    "top_error_groups",
    # Trends
    "bucket_counts",
    "error_trend",
    "hour_bucket",
    "rage_trend",
]
