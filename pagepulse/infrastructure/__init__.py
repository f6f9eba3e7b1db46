# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains concrete implementations of the ports in base/:
- repositories/ - Event sources and rule/heatmap stores (PostgreSQL, Valkey, in-memory)
- store.py - JSON document store (Valkey/Redis)
- webhooks.py - Alert delivery over chat and generic webhooks
"""

from pagepulse.infrastructure.repositories import (
    InMemoryAlertRuleRepository,
    InMemoryInteractionSource,
    InMemoryPerformanceSource,
    PostgreSQLAlertRuleRepository,
    PostgreSQLInteractionSource,
    PostgreSQLPerformanceSource,
    ValkeyAlertRuleRepository,
    ValkeyHeatmapRepository,
    check_postgresql_connection,
)
from pagepulse.infrastructure.store import ValkeyDocumentStore, check_valkey_connection
from pagepulse.infrastructure.webhooks import WebhookNotifier

__all__ = [
    # Repositories
    "InMemoryAlertRuleRepository",
    "InMemoryInteractionSource",
    "InMemoryPerformanceSource",
    "PostgreSQLAlertRuleRepository",
    "PostgreSQLInteractionSource",
    "PostgreSQLPerformanceSource",
    "ValkeyAlertRuleRepository",
    "ValkeyHeatmapRepository",
    "check_postgresql_connection",
    # Document store
    "ValkeyDocumentStore",
    "check_valkey_connection",
    # Notifications
    "WebhookNotifier",
]
