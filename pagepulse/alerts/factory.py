# ==============================================================================
# Alert Evaluator Factory
# ==============================================================================
"""
Wires an AlertEvaluator to the configured stores.

Interactions and performance samples are always read from PostgreSQL. Alert
rules live in Valkey or PostgreSQL depending on ALERTS_RULE_STORE.
"""

import logging

from pagepulse.alerts.evaluator import AlertEvaluator
from pagepulse.alerts.metrics import MetricsCalculator
from pagepulse.base import AlertRuleRepository, ConfigurationError
from pagepulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_rule_repository(settings: Settings | None = None) -> AlertRuleRepository:
    """
    Get the alert rule repository selected by configuration.

    Raises:
        ConfigurationError: If an unknown rule store is configured
    """
    settings = settings or get_settings()
    store = settings.alerts.rule_store

    match store:
        case "valkey":
            from pagepulse.infrastructure.repositories import ValkeyAlertRuleRepository
            from pagepulse.infrastructure.store import ValkeyDocumentStore

            return ValkeyAlertRuleRepository(
                ValkeyDocumentStore(settings.valkey),
                project_id=settings.alerts.project_id,
            )
        case "postgres":
            from pagepulse.infrastructure.repositories import PostgreSQLAlertRuleRepository

            repo = PostgreSQLAlertRuleRepository(settings)
            repo.connect()
            return repo
        case _:
            raise ConfigurationError(
                f"Unknown alert rule store: '{store}'. Valid options are: valkey, postgres"
            )


def create_evaluator(settings: Settings | None = None) -> AlertEvaluator:
    """
    Build an evaluator backed by PostgreSQL sources and webhook delivery.

    Connections are opened here; the caller owns them through the evaluator's
    lifetime (see AlertsRunner).
    """
    from pagepulse.infrastructure.repositories import (
        PostgreSQLInteractionSource,
        PostgreSQLPerformanceSource,
    )
    from pagepulse.infrastructure.webhooks import WebhookNotifier

    settings = settings or get_settings()

    interactions = PostgreSQLInteractionSource(settings)
    interactions.connect()
    samples = PostgreSQLPerformanceSource(settings)
    samples.connect()

    logger.info(
        "Alert rules from %s, interval %.0fs",
        settings.alerts.rule_store,
        settings.alerts.interval_seconds,
    )
    return AlertEvaluator(
        rules=get_rule_repository(settings),
        metrics=MetricsCalculator(interactions, samples),
        notifier=WebhookNotifier(timeout=settings.alerts.webhook_timeout),
        interval_seconds=settings.alerts.interval_seconds,
    )
