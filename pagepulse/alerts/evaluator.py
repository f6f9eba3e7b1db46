# ==============================================================================
# Alert Evaluator
# ==============================================================================
"""
Threshold alerting with cooldown.

Each tick loads the active rules, computes every rule's metric over its
trailing window and dispatches a notification for rules whose condition
holds and whose cooldown has elapsed.

State handling:
- ``last_triggered_at`` is only updated (and the rule saved) after a
  successful dispatch, so a failed delivery is retried on the next tick.
- Ticks are single-flight. A tick that starts while another is still
  running is skipped, so one rule can never fire twice inside its cooldown.
- A rule that raises is logged and recorded; the remaining rules are
  still evaluated.

The evaluator owns its scheduler thread; several evaluators can run side by
side in one process.
"""

import logging
import threading
import time
from dataclasses import dataclass

from pagepulse.alerts.metrics import MetricsCalculator, compare
from pagepulse.base import AlertRuleRepository, NotificationError, Notifier
from pagepulse.core.models import AlertRule

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60
DEFAULT_STOP_TIMEOUT = 30.0


def now_ms() -> int:
    return int(time.time() * 1000)


def format_message(rule: AlertRule, value: float) -> str:
    """Notification text, e.g. ``Alert 'Traffic' (events_per_minute) value=150.00 > 100``."""
    return (
        f"Alert '{rule.name}' ({rule.metric}) "
        f"value={value:.2f} {rule.comparator.value} {rule.threshold:g}"
    )


@dataclass
class RuleEvaluation:
    """Outcome of evaluating one rule in one tick."""

    rule_id: str
    rule_name: str
    value: float | None = None
    triggered: bool = False  # condition held
    fired: bool = False  # notification delivered and rule marked
    error: str | None = None


class AlertEvaluator:
    """
    Evaluates alert rules on a fixed interval.

    Usage:
        evaluator = AlertEvaluator(rules, metrics, notifier, interval_seconds=60)
        evaluator.start()
        ...
        evaluator.stop()
    """

    def __init__(
        self,
        rules: AlertRuleRepository,
        metrics: MetricsCalculator,
        notifier: Notifier,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        """
        Args:
            rules: Source of active rules; also persists trigger state
            metrics: Computes rule metrics over a trailing window
            notifier: Delivers fired alerts
            interval_seconds: Seconds between ticks
        """
        self._rules = rules
        self._metrics = metrics
        self._notifier = notifier
        self._interval = interval_seconds

        self._tick_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        """True while the scheduler thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    # ==========================================================================
    # Evaluation
    # ==========================================================================

    def evaluate(self, now: int | None = None) -> list[RuleEvaluation]:
        """
        Run one tick.

        Args:
            now: Evaluation time in epoch ms. Defaults to the current time.

        Returns:
            One RuleEvaluation per active rule, or an empty list if another
            tick was still in flight and this one was skipped
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Previous alert evaluation still running, skipping tick")
            return []

        try:
            now = now_ms() if now is None else now
            try:
                rules = self._rules.list_active()
            except Exception:
                logger.exception("Failed to load alert rules")
                return []

            logger.debug("Evaluating %d alert rule(s)", len(rules))
            return [self._evaluate_rule(rule, now) for rule in rules]
        finally:
            self._tick_lock.release()

    def _evaluate_rule(self, rule: AlertRule, now: int) -> RuleEvaluation:
        result = RuleEvaluation(rule_id=rule.id, rule_name=rule.name)
        try:
            value = self._metrics.compute(rule.metric, rule.project_id, rule.window_minutes, now)
            result.value = value
            result.triggered = compare(value, rule.comparator, rule.threshold)

            if not result.triggered or not rule.is_cooled_down(now):
                return result

            message = format_message(rule, value)
            try:
                delivered = self._notifier.notify(rule, message, value)
            except NotificationError as e:
                logger.error("Failed delivering alert '%s': %s", rule.name, e)
                result.error = str(e)
                return result

            if not delivered:
                return result

            rule.last_triggered_at = now
            self._rules.save(rule)
            result.fired = True
            logger.info("Alert '%s' fired (value=%.2f)", rule.name, value)
        except Exception as e:
            logger.exception("Error evaluating alert rule '%s'", rule.name)
            result.error = str(e)
        return result

    # ==========================================================================
    # Scheduling
    # ==========================================================================

    def start(self) -> None:
        """Start the background scheduler. Calling it again is a no-op."""
        with self._state_lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._loop,
                name="pagepulse-alert-evaluator",
                daemon=True,
            )
            self._thread.start()
        logger.info("Alert evaluator started (interval: %.1fs)", self._interval)

    def stop(self, timeout: float | None = DEFAULT_STOP_TIMEOUT) -> None:
        """
        Stop the scheduler and wait for an in-flight tick to finish.

        Args:
            timeout: Seconds to wait for the thread to exit (None waits forever)
        """
        with self._state_lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Alert evaluator did not stop within %.1fs", timeout)
                return
            self._thread = None
        logger.info("Alert evaluator stopped")

    def _loop(self) -> None:
        while not self._stop_event.wait(timeout=self._interval):
            results = self.evaluate()
            fired = sum(1 for r in results if r.fired)
            if fired:
                logger.info("Alert tick complete: %d rule(s), %d fired", len(results), fired)

    def close(self) -> None:
        """Stop the scheduler and release source and rule store connections."""
        self.stop()
        self._metrics.close()
        close_rules = getattr(self._rules, "close", None)
        if close_rules is not None:
            close_rules()
