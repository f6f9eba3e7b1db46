# ==============================================================================
# Valkey Document Store
# ==============================================================================
"""
Valkey/Redis implementation of DocumentStore.

Each document is a JSON string under its own key. Prefix scans use SCAN
with a ``<prefix>*`` match and fetch the values in one MGET, so listing
alert rules costs two round trips regardless of how many there are.
"""

import json
import logging

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from pagepulse.base import DocumentStore
from pagepulse.utils.config import ValkeySettings, get_settings
from pagepulse.utils.retry import VALKEY_RETRIES

logger = logging.getLogger(__name__)


class ValkeyDocumentStore(DocumentStore):
    """
    JSON documents in Valkey.

    Transient timeouts and dropped connections are retried by the client with
    exponential backoff; anything else surfaces as a redis exception.
    """

    def __init__(self, settings: ValkeySettings | None = None, socket_timeout: int = 10):
        settings = settings or get_settings().valkey
        self._client = redis.from_url(
            settings.url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(ExponentialBackoff(cap=32, base=1), retries=VALKEY_RETRIES),
            retry_on_error=[RedisTimeoutError, RedisConnectionError],
            health_check_interval=30,
        )

    @classmethod
    def from_client(cls, client: redis.Redis) -> "ValkeyDocumentStore":
        """Wrap an existing client (e.g. a fakeredis instance in tests)."""
        store = cls.__new__(cls)
        store._client = client
        return store

    @property
    def client(self) -> redis.Redis:
        return self._client

    @staticmethod
    def _decode(key: str, raw: str) -> dict | None:
        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Failed to decode JSON for key %s", key)
            return None
        if not isinstance(document, dict):
            logger.warning("Ignoring non-object document at %s", key)
            return None
        return document

    def get(self, key: str) -> dict | None:
        raw = self._client.get(key)
        if raw is None:
            return None
        return self._decode(key, raw)

    def put(self, key: str, document: dict, ttl_seconds: int | None = None) -> None:
        raw = json.dumps(document, default=str)
        if ttl_seconds is not None:
            self._client.setex(key, ttl_seconds, raw)
        else:
            self._client.set(key, raw)

    def delete(self, key: str) -> bool:
        return self._client.delete(key) > 0

    def scan(self, prefix: str) -> dict[str, dict]:
        keys = sorted(self._client.scan_iter(match=f"{prefix}*"))
        if not keys:
            return {}

        documents = {}
        # A key may expire between SCAN and MGET
        for key, raw in zip(keys, self._client.mget(keys)):
            if raw is None:
                continue
            document = self._decode(key, raw)
            if document is not None:
                documents[key] = document
        return documents

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.debug("Valkey ping failed: %s", e)
            return False

    def close(self) -> None:
        self._client.close()


def check_valkey_connection(settings: ValkeySettings | None = None) -> bool:
    """
    Check if Valkey is reachable, with a 5 second timeout.

    Returns:
        True if Valkey responds to ping, False otherwise
    """
    store = ValkeyDocumentStore(settings, socket_timeout=5)
    try:
        return store.ping()
    finally:
        store.close()
