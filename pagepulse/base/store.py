# ==============================================================================
# Document Store Abstract Base Class
# ==============================================================================
"""
Port for the JSON documents PagePulse keeps outside PostgreSQL.

Alert rules and heatmap aggregates are stored as one document per key, and
each kind lives under its own key prefix (``pagepulse:alert:rule:``,
``pagepulse:heatmap:``). Heatmaps are rebuilt on demand and therefore
expire; rules never do.
"""

from abc import ABC, abstractmethod


class DocumentStore(ABC):
    """JSON documents keyed by ``<prefix><id>``, with optional expiry."""

    @abstractmethod
    def get(self, key: str) -> dict | None:
        """Return the document at ``key``, or None if missing or unreadable."""
        ...

    @abstractmethod
    def put(self, key: str, document: dict, ttl_seconds: int | None = None) -> None:
        """
        Write ``document`` at ``key``, replacing any previous one.

        Args:
            key: Full document key, including its prefix
            document: JSON-serializable document
            ttl_seconds: Expire after this many seconds; None keeps it forever
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a document. Returns False if there was none."""
        ...

    @abstractmethod
    def scan(self, prefix: str) -> dict[str, dict]:
        """
        Load every readable document under ``prefix``.

        Returns:
            Documents by key, in key order
        """
        ...

    def close(self) -> None:
        """Release the connection, if the store holds one."""
