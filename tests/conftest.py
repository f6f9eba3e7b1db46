# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeyDocumentStore instances
- Factories for interaction events and performance samples
"""

import fakeredis
import pytest

from pagepulse.core.models import InteractionEvent, PerformanceSample
from pagepulse.infrastructure.store import ValkeyDocumentStore

# 2024-05-01T12:00:00Z
BASE_TS = 1714564800000


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real ValkeyDocumentStore behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def fake_store(fake_redis):
    """A ValkeyDocumentStore wrapping the fakeredis client."""
    return ValkeyDocumentStore.from_client(fake_redis)


@pytest.fixture()
def make_event():
    """Factory for InteractionEvents with sensible defaults.

    Timestamps are offsets in ms from BASE_TS; extra keyword arguments
    become metadata.
    """

    def _make(
        event_type: str = "click",
        offset_ms: int = 0,
        session_id: str = "s1",
        page_url: str = "/home",
        project_id: str = "default",
        user_id: str | None = None,
        **metadata,
    ) -> InteractionEvent:
        return InteractionEvent(
            session_id=session_id,
            user_id=user_id,
            project_id=project_id,
            event_type=event_type,
            page_url=page_url,
            timestamp=BASE_TS + offset_ms,
            metadata=metadata,
        )

    return _make


@pytest.fixture()
def make_sample():
    """Factory for PerformanceSamples."""

    def _make(
        offset_ms: int = 0,
        js_errors: list | None = None,
        session_id: str | None = "s1",
        page_url: str = "/home",
        project_id: str = "default",
        **vitals,
    ) -> PerformanceSample:
        return PerformanceSample(
            session_id=session_id,
            page_url=page_url,
            project_id=project_id,
            timestamp=BASE_TS + offset_ms,
            js_errors=js_errors or [],
            **vitals,
        )

    return _make
