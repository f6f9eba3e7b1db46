# ==============================================================================
# Alert Metrics
# ==============================================================================
"""
Metrics that alert rules are evaluated against.

Supported metric names:
- events_per_minute: interactions in the window / window minutes
- js_errors_per_minute: JS errors reported in the window / window minutes
- <field>_p75: 75th percentile of a vitals field (lcp_p75, cls_p75, inp_p75,
  or any other numeric sample field)

Unknown metrics evaluate to 0.
"""

import logging
import math
import operator
from collections.abc import Callable, Iterable

from pagepulse.base import InteractionSource, PerformanceSource
from pagepulse.core.models import Comparator, PerformanceSample

logger = logging.getLogger(__name__)

EVENTS_PER_MINUTE = "events_per_minute"
JS_ERRORS_PER_MINUTE = "js_errors_per_minute"
P75_SUFFIX = "_p75"

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    Comparator.GT.value: operator.gt,
    Comparator.GTE.value: operator.ge,
    Comparator.LT.value: operator.lt,
    Comparator.LTE.value: operator.le,
    Comparator.EQ.value: operator.eq,
    Comparator.NE.value: operator.ne,
}


def compare(value: float, comparator: Comparator | str, threshold: float) -> bool:
    """Apply ``comparator``; unknown comparators never match."""
    key = comparator.value if isinstance(comparator, Comparator) else comparator
    op = _COMPARATORS.get(key)
    if op is None:
        return False
    return op(value, threshold)


def p75(values: Iterable[float]) -> float:
    """Value at index ``floor(0.75 * (n - 1))`` of the sorted values; 0 if empty."""
    ordered = sorted(values)
    if not ordered:
        return 0
    return ordered[math.floor(0.75 * (len(ordered) - 1))]


def _field_values(samples: Iterable[PerformanceSample], field: str) -> list[float]:
    values = []
    for sample in samples:
        value = sample.metric_value(field)
        if value is not None:
            values.append(value)
    return values


class MetricsCalculator:
    """
    Computes rule metrics over a trailing window from the event sources.
    """

    def __init__(self, interactions: InteractionSource, samples: PerformanceSource):
        self._interactions = interactions
        self._samples = samples

    def compute(self, metric: str, project_id: str, window_minutes: float, now_ms: int) -> float:
        """
        Compute ``metric`` over ``[now - window_minutes, now]``.

        Args:
            metric: Metric name
            project_id: Project to read
            window_minutes: Trailing window length
            now_ms: Window end (epoch ms)

        Returns:
            The metric value; 0 for unknown metrics
        """
        start_ms = now_ms - int(window_minutes * 60 * 1000)

        if metric == EVENTS_PER_MINUTE:
            count = self._interactions.count_interactions(project_id, start_ms, now_ms)
            return count / window_minutes

        if metric == JS_ERRORS_PER_MINUTE:
            samples = self._samples.fetch_samples(project_id, start_ms, now_ms)
            return sum(len(s.js_errors) for s in samples) / window_minutes

        if metric.endswith(P75_SUFFIX) and len(metric) > len(P75_SUFFIX):
            field = metric[: -len(P75_SUFFIX)]
            samples = self._samples.fetch_samples(project_id, start_ms, now_ms)
            return p75(_field_values(samples, field))

        logger.debug("Unknown alert metric '%s', evaluating as 0", metric)
        return 0

    def close(self) -> None:
        """Close the sources that hold connections."""
        for source in (self._interactions, self._samples):
            close = getattr(source, "close", None)
            if close is not None:
                close()
