# ==============================================================================
# Tests for Alert Evaluation
# ==============================================================================
"""
Tests for alert metrics, rule evaluation with cooldown, and the scheduler.

Sources and rule stores are in-memory; the notifier is a Mock.
"""

import time
from unittest.mock import Mock

import pytest

from pagepulse.alerts import AlertEvaluator, MetricsCalculator, compare, format_message, p75
from pagepulse.base import NotificationError, Notifier
from pagepulse.core.models import AlertRule, Comparator
from pagepulse.infrastructure.repositories import (
    InMemoryAlertRuleRepository,
    InMemoryInteractionSource,
    InMemoryPerformanceSource,
)

from conftest import BASE_TS

MINUTE_MS = 60_000

# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture()
def interactions(make_event):
    """Ten clicks in the minute before NOW."""
    return InMemoryInteractionSource([make_event("click", -i * 1000) for i in range(10)])


@pytest.fixture()
def samples(make_sample):
    return InMemoryPerformanceSource(
        [
            make_sample(-1000, lcp=1000, js_errors=[{"message": "a"}, {"message": "b"}]),
            make_sample(-2000, lcp=2000),
            make_sample(-3000, lcp=3000, js_errors=[{"message": "c"}]),
            make_sample(-4000, lcp=4000),
            make_sample(-5000, lcp=5000, domReadyTime=800),
        ]
    )


@pytest.fixture()
def metrics(interactions, samples):
    return MetricsCalculator(interactions, samples)


@pytest.fixture()
def notifier():
    mock = Mock(spec=Notifier)
    mock.notify.return_value = True
    return mock


def make_rule(**overrides) -> AlertRule:
    fields = {
        "name": "Traffic",
        "metric": "events_per_minute",
        "comparator": Comparator.GT,
        "threshold": 5,
        "window_minutes": 1,
        "cooldown_ms": MINUTE_MS,
        "slack_webhook": "https://hooks.example.com/T000",
    }
    fields.update(overrides)
    return AlertRule(**fields)


# ==============================================================================
# Metric Helpers
# ==============================================================================


class TestMetricHelpers:
    """Tests for compare(), p75() and format_message()."""

    @pytest.mark.parametrize(
        "comparator,expected",
        [(">", True), (">=", True), ("<", False), ("<=", False), ("==", False), ("!=", True)],
    )
    def test_compare(self, comparator, expected):
        assert compare(10, comparator, 5) is expected

    def test_compare_unknown_operator_never_matches(self):
        assert compare(10, "~", 5) is False

    def test_p75_uses_floor_index(self):
        # floor(0.75 * 3) = 2
        assert p75([40, 10, 30, 20]) == 30
        assert p75([7]) == 7
        assert p75([]) == 0

    def test_format_message(self):
        rule = make_rule(threshold=100)
        assert format_message(rule, 150) == "Alert 'Traffic' (events_per_minute) value=150.00 > 100"


class TestMetricsCalculator:
    """Tests for MetricsCalculator.compute()."""

    def test_events_per_minute(self, metrics):
        assert metrics.compute("events_per_minute", "default", 1, BASE_TS) == 10
        assert metrics.compute("events_per_minute", "default", 2, BASE_TS) == 5

    def test_other_project_sees_nothing(self, metrics):
        assert metrics.compute("events_per_minute", "other", 1, BASE_TS) == 0

    def test_js_errors_per_minute(self, metrics):
        assert metrics.compute("js_errors_per_minute", "default", 1, BASE_TS) == 3

    def test_vitals_p75(self, metrics):
        assert metrics.compute("lcp_p75", "default", 1, BASE_TS) == 4000

    def test_p75_of_extra_field(self, metrics):
        assert metrics.compute("domReadyTime_p75", "default", 1, BASE_TS) == 800

    def test_unknown_metric_is_zero(self, metrics):
        assert metrics.compute("bounce_rate", "default", 1, BASE_TS) == 0


# ==============================================================================
# Evaluation
# ==============================================================================


class TestAlertEvaluator:
    """Tests for AlertEvaluator.evaluate()."""

    def test_fires_and_marks_rule(self, metrics, notifier):
        rule = make_rule()
        repo = InMemoryAlertRuleRepository([rule])
        evaluator = AlertEvaluator(repo, metrics, notifier)

        (result,) = evaluator.evaluate(now=BASE_TS)

        assert result.value == 10
        assert result.triggered and result.fired
        assert repo.get(rule.id).last_triggered_at == BASE_TS
        notifier.notify.assert_called_once()
        _, message, value = notifier.notify.call_args.args
        assert message == "Alert 'Traffic' (events_per_minute) value=10.00 > 5"
        assert value == 10

    def test_cooldown_prevents_refire(self, metrics, notifier):
        """A second tick 10 s later with a 60 s cooldown does not notify."""
        repo = InMemoryAlertRuleRepository([make_rule()])
        evaluator = AlertEvaluator(repo, metrics, notifier)

        evaluator.evaluate(now=BASE_TS)
        (second,) = evaluator.evaluate(now=BASE_TS + 10_000)

        assert second.triggered and not second.fired
        assert notifier.notify.call_count == 1

    def test_fires_again_after_cooldown(self, metrics, notifier):
        repo = InMemoryAlertRuleRepository([make_rule(threshold=0)])
        evaluator = AlertEvaluator(repo, metrics, notifier)

        evaluator.evaluate(now=BASE_TS)
        (later,) = evaluator.evaluate(now=BASE_TS + MINUTE_MS)

        assert later.fired
        assert notifier.notify.call_count == 2

    def test_condition_not_met(self, metrics, notifier):
        repo = InMemoryAlertRuleRepository([make_rule(threshold=50)])
        (result,) = AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS)

        assert not result.triggered
        notifier.notify.assert_not_called()

    def test_failed_dispatch_leaves_rule_untouched(self, metrics, notifier):
        """last_triggered_at only moves after a successful dispatch."""
        rule = make_rule()
        repo = InMemoryAlertRuleRepository([rule])
        notifier.notify.side_effect = NotificationError("503 from hook")

        (result,) = AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS)

        assert result.triggered and not result.fired
        assert result.error == "503 from hook"
        assert repo.get(rule.id).last_triggered_at is None

    def test_missing_target_is_not_marked(self, metrics, notifier):
        rule = make_rule(slack_webhook=None)
        repo = InMemoryAlertRuleRepository([rule])
        notifier.notify.return_value = False

        (result,) = AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS)

        assert result.triggered and not result.fired
        assert result.error is None
        assert repo.get(rule.id).last_triggered_at is None

    def test_rule_error_does_not_stop_other_rules(self, notifier):
        broken = make_rule(name="Broken")
        healthy = make_rule(name="Healthy")
        metrics = Mock(spec=MetricsCalculator)

        def compute(metric, project_id, window_minutes, now_ms):
            if metrics.compute.call_count == 1:
                raise RuntimeError("source unavailable")
            return 10

        metrics.compute.side_effect = compute
        repo = InMemoryAlertRuleRepository([broken, healthy])

        results = AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS)

        assert [r.rule_name for r in results] == ["Broken", "Healthy"]
        assert results[0].error == "source unavailable"
        assert results[1].fired

    def test_inactive_rules_are_skipped(self, metrics, notifier):
        repo = InMemoryAlertRuleRepository([make_rule(is_active=False)])
        assert AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS) == []

    def test_failing_rule_store_yields_no_results(self, metrics, notifier):
        repo = Mock(spec=InMemoryAlertRuleRepository)
        repo.list_active.side_effect = RuntimeError("store down")
        assert AlertEvaluator(repo, metrics, notifier).evaluate(now=BASE_TS) == []

    def test_overlapping_tick_is_skipped(self, metrics, notifier):
        repo = InMemoryAlertRuleRepository([make_rule()])
        evaluator = AlertEvaluator(repo, metrics, notifier)

        evaluator._tick_lock.acquire()
        try:
            assert evaluator.evaluate(now=BASE_TS) == []
        finally:
            evaluator._tick_lock.release()

        notifier.notify.assert_not_called()


# ==============================================================================
# Scheduling
# ==============================================================================


class TestScheduler:
    """Tests for start()/stop()."""

    @pytest.fixture()
    def metrics(self):
        # Ticks evaluate at wall-clock time, so the window contents are stubbed
        mock = Mock(spec=MetricsCalculator)
        mock.compute.return_value = 10
        return mock

    def test_start_and_stop(self, metrics, notifier):
        repo = InMemoryAlertRuleRepository([make_rule(cooldown_ms=0)])
        evaluator = AlertEvaluator(repo, metrics, notifier, interval_seconds=0.01)

        evaluator.start()
        evaluator.start()  # no second thread
        assert evaluator.is_running

        deadline = time.monotonic() + 5
        while notifier.notify.call_count == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        evaluator.stop(timeout=5)
        assert not evaluator.is_running
        assert notifier.notify.call_count >= 1

    def test_stop_without_start(self, metrics, notifier):
        evaluator = AlertEvaluator(InMemoryAlertRuleRepository(), metrics, notifier)
        evaluator.stop()
        assert not evaluator.is_running

    def test_restart_after_stop(self, metrics, notifier):
        evaluator = AlertEvaluator(InMemoryAlertRuleRepository(), metrics, notifier, interval_seconds=0.01)
        evaluator.start()
        evaluator.stop(timeout=5)
        evaluator.start()
        assert evaluator.is_running
        evaluator.stop(timeout=5)
