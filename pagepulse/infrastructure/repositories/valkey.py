# ==============================================================================
# Valkey Repository Implementations
# ==============================================================================
"""
Valkey-backed repositories for alert rules and heatmap aggregates.

Provides:
- ValkeyAlertRuleRepository: one JSON document per rule
- ValkeyHeatmapRepository: one JSON document per (page, type, device), with TTL
"""

import hashlib
import logging

from pydantic import ValidationError

from pagepulse.base import AlertRuleRepository, DocumentStore, HeatmapRepository
from pagepulse.core.models import AlertRule, HeatmapAggregate
from pagepulse.utils.config import get_settings

logger = logging.getLogger(__name__)

# ==============================================================================
# Key Prefixes
# ==============================================================================

ALERT_RULE_KEY_PREFIX = "pagepulse:alert:rule:"
HEATMAP_KEY_PREFIX = "pagepulse:heatmap:"


class ValkeyAlertRuleRepository(AlertRuleRepository):
    """Alert rules stored as JSON documents under ``pagepulse:alert:rule:{id}``."""

    def __init__(self, store: DocumentStore, project_id: str | None = None):
        """
        Args:
            store: Document store holding the rules
            project_id: Only expose rules of this project. None exposes all.
        """
        self._store = store
        self._project_id = project_id

    def _key(self, rule_id: str) -> str:
        return f"{ALERT_RULE_KEY_PREFIX}{rule_id}"

    def list_active(self) -> list[AlertRule]:
        rules = []
        for key, doc in self._store.scan(ALERT_RULE_KEY_PREFIX).items():
            try:
                rule = AlertRule.model_validate(doc)
            except ValidationError as e:
                logger.warning("Skipping invalid alert rule %s: %s", key, e)
                continue
            if not rule.is_active:
                continue
            if self._project_id is not None and rule.project_id != self._project_id:
                continue
            rules.append(rule)
        return rules

    def get(self, rule_id: str) -> AlertRule | None:
        doc = self._store.get(self._key(rule_id))
        if doc is None:
            return None
        return AlertRule.model_validate(doc)

    def save(self, rule: AlertRule) -> None:
        self._store.put(self._key(rule.id), rule.model_dump(mode="json"))

    def delete(self, rule_id: str) -> bool:
        return self._store.delete(self._key(rule_id))

    def close(self) -> None:
        self._store.close()


class ValkeyHeatmapRepository(HeatmapRepository):
    """Heatmap aggregates keyed by a hash of (page_url, type, device)."""

    def __init__(self, store: DocumentStore, ttl_seconds: int | None = None):
        """
        Args:
            store: Document store holding the aggregates
            ttl_seconds: Expiry for stored aggregates. Defaults to settings.
        """
        self._store = store
        if ttl_seconds is None:
            ttl_seconds = get_settings().valkey.heatmap_ttl_hours * 3600
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(page_url: str, heatmap_type: str, device: str) -> str:
        # URLs may contain ':' and '*', which clash with key patterns
        digest = hashlib.sha1(page_url.encode("utf-8")).hexdigest()
        return f"{HEATMAP_KEY_PREFIX}{heatmap_type}:{device}:{digest}"

    def save(self, aggregate: HeatmapAggregate) -> None:
        key = self.key_for(aggregate.page_url, aggregate.type, aggregate.device)
        self._store.put(key, aggregate.model_dump(mode="json"), ttl_seconds=self._ttl_seconds)
        logger.debug(
            "Saved %s heatmap for %s (%d clusters)",
            aggregate.type,
            aggregate.page_url,
            len(aggregate.points),
        )

    def get(self, page_url: str, heatmap_type: str, device: str = "unknown") -> HeatmapAggregate | None:
        doc = self._store.get(self.key_for(page_url, heatmap_type, device))
        if doc is None:
            return None
        return HeatmapAggregate.model_validate(doc)
