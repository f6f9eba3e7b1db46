# ==============================================================================
# Repository Adapters
# ==============================================================================
"""
Adapters implementing the source and repository interfaces from base/repositories.py.

Currently supported:
- PostgreSQL (postgresql.py): interaction/performance sources, alert rules
- Valkey (valkey.py): alert rules, heatmap aggregates
- In-memory (memory.py): file-backed analysis and tests
"""

from pagepulse.infrastructure.repositories.memory import (
    InMemoryAlertRuleRepository,
    InMemoryInteractionSource,
    InMemoryPerformanceSource,
)
from pagepulse.infrastructure.repositories.postgresql import (
    PostgreSQLAlertRuleRepository,
    PostgreSQLInteractionSource,
    PostgreSQLPerformanceSource,
    check_postgresql_connection,
)
from pagepulse.infrastructure.repositories.valkey import (
    ALERT_RULE_KEY_PREFIX,
    HEATMAP_KEY_PREFIX,
    ValkeyAlertRuleRepository,
    ValkeyHeatmapRepository,
)

__all__ = [
    # In-memory
    "InMemoryAlertRuleRepository",
    "InMemoryInteractionSource",
    "InMemoryPerformanceSource",
    # PostgreSQL
    "PostgreSQLAlertRuleRepository",
    "PostgreSQLInteractionSource",
    "PostgreSQLPerformanceSource",
    "check_postgresql_connection",
    # Valkey
    "ALERT_RULE_KEY_PREFIX",
    "HEATMAP_KEY_PREFIX",
    "ValkeyAlertRuleRepository",
    "ValkeyHeatmapRepository",
]
