# ==============================================================================
# Tests for Valkey Repositories
# ==============================================================================
"""
Tests for the Valkey document store and the alert rule and heatmap
repositories built on it, using fakeredis through the shared fixtures.
"""

from unittest.mock import Mock

import pytest

from pagepulse.base import DocumentStore
from pagepulse.core.models import AlertRule, HeatmapAggregate, HeatmapCluster
from pagepulse.infrastructure.repositories import (
    ALERT_RULE_KEY_PREFIX,
    HEATMAP_KEY_PREFIX,
    ValkeyAlertRuleRepository,
    ValkeyHeatmapRepository,
)


class TestValkeyDocumentStore:
    """Tests for ValkeyDocumentStore itself."""

    def test_ping(self, fake_store):
        assert fake_store.ping() is True

    def test_put_and_get(self, fake_store, fake_redis):
        fake_store.put("p:1", {"v": 1})
        fake_store.put("p:2", {"v": 2}, ttl_seconds=60)

        assert fake_store.get("p:1") == {"v": 1}
        assert fake_redis.ttl("p:1") == -1
        assert 0 < fake_redis.ttl("p:2") <= 60

    def test_get_unreadable_document(self, fake_store, fake_redis):
        fake_redis.set("a", "not json")
        fake_redis.set("b", "[1, 2]")

        assert fake_store.get("a") is None
        assert fake_store.get("b") is None
        assert fake_store.get("missing") is None

    def test_scan_is_prefix_scoped_and_sorted(self, fake_store):
        for key in ("p:2", "p:1", "q:1"):
            fake_store.put(key, {"k": key})

        assert list(fake_store.scan("p:")) == ["p:1", "p:2"]
        assert fake_store.scan("none:") == {}

    def test_scan_skips_undecodable(self, fake_store, fake_redis):
        fake_store.put("p:a", {"v": 1})
        fake_redis.set("p:b", "not json")

        assert fake_store.scan("p:") == {"p:a": {"v": 1}}

    def test_delete(self, fake_store):
        fake_store.put("p:1", {})

        assert fake_store.delete("p:1") is True
        assert fake_store.delete("p:1") is False


class TestValkeyAlertRuleRepository:
    """Tests for ValkeyAlertRuleRepository."""

    @pytest.fixture()
    def repo(self, fake_store):
        return ValkeyAlertRuleRepository(fake_store)

    def test_round_trip(self, repo):
        rule = AlertRule(name="Traffic", threshold=100, slack_webhook="https://hooks.example.com/T1")
        repo.save(rule)

        loaded = repo.get(rule.id)
        assert loaded == rule

    def test_trigger_state_is_persisted(self, repo):
        rule = AlertRule(name="Traffic", threshold=100)
        repo.save(rule)
        rule.last_triggered_at = 1714564800000
        repo.save(rule)

        assert repo.get(rule.id).last_triggered_at == 1714564800000

    def test_list_active_skips_inactive(self, repo):
        repo.save(AlertRule(name="On", threshold=1))
        repo.save(AlertRule(name="Off", threshold=1, is_active=False))

        assert [r.name for r in repo.list_active()] == ["On"]

    def test_list_active_filters_project(self, fake_store):
        ValkeyAlertRuleRepository(fake_store).save(AlertRule(name="A", threshold=1, project_id="shop"))
        ValkeyAlertRuleRepository(fake_store).save(AlertRule(name="B", threshold=1, project_id="blog"))

        scoped = ValkeyAlertRuleRepository(fake_store, project_id="shop")
        assert [r.name for r in scoped.list_active()] == ["A"]

    def test_list_active_skips_invalid_documents(self, repo, fake_store):
        repo.save(AlertRule(name="Valid", threshold=1))
        fake_store.put(f"{ALERT_RULE_KEY_PREFIX}broken", {"name": "No threshold"})

        assert [r.name for r in repo.list_active()] == ["Valid"]

    def test_accepts_camel_case_documents(self, repo, fake_store):
        fake_store.put(
            f"{ALERT_RULE_KEY_PREFIX}r1",
            {"id": "r1", "name": "Imported", "threshold": 5, "windowMinutes": 10, "isActive": True},
        )

        rule = repo.get("r1")
        assert rule.window_minutes == 10

    def test_delete(self, repo):
        rule = AlertRule(name="Traffic", threshold=1)
        repo.save(rule)

        assert repo.delete(rule.id) is True
        assert repo.delete(rule.id) is False
        assert repo.get(rule.id) is None

    def test_close_releases_store(self):
        store = Mock(spec=DocumentStore)
        ValkeyAlertRuleRepository(store).close()
        store.close.assert_called_once_with()


class TestValkeyHeatmapRepository:
    """Tests for ValkeyHeatmapRepository."""

    @pytest.fixture()
    def repo(self, fake_store):
        return ValkeyHeatmapRepository(fake_store, ttl_seconds=3600)

    def test_round_trip_with_ttl(self, repo, fake_redis):
        aggregate = HeatmapAggregate(
            page_url="https://shop.example.com/cart?x=1",
            type="click",
            points=[HeatmapCluster(x=10, y=20, intensity=3, count=3)],
        )
        repo.save(aggregate)

        key = repo.key_for(aggregate.page_url, "click", "unknown")
        assert key.startswith(f"{HEATMAP_KEY_PREFIX}click:unknown:")
        assert 0 < fake_redis.ttl(key) <= 3600

        loaded = repo.get(aggregate.page_url, "click")
        assert loaded.points == aggregate.points

    def test_missing(self, repo):
        assert repo.get("/nowhere", "click") is None

    def test_key_is_per_type_and_device(self):
        keys = {
            ValkeyHeatmapRepository.key_for("/a", "click", "unknown"),
            ValkeyHeatmapRepository.key_for("/a", "hover", "unknown"),
            ValkeyHeatmapRepository.key_for("/a", "click", "mobile"),
        }
        assert len(keys) == 3
