# ==============================================================================
# Alerting
# ==============================================================================
"""
Threshold alert rules evaluated on a schedule, with cooldown.

- metrics.py: metric computation and comparators
- evaluator.py: AlertEvaluator (single-flight ticks, start/stop scheduler)
- factory.py: evaluator wiring from settings
- runner.py: foreground runner for 'pagepulse alerts run'
"""

from pagepulse.alerts.evaluator import AlertEvaluator, RuleEvaluation, format_message
from pagepulse.alerts.metrics import MetricsCalculator, compare, p75

__all__ = [
    "AlertEvaluator",
    "MetricsCalculator",
    "RuleEvaluation",
    "compare",
    "format_message",
    "p75",
]
