# ==============================================================================
# PostgreSQL Repository Implementations
# ==============================================================================
"""
PostgreSQL implementations of the source and repository interfaces.

Provides:
- PostgreSQLInteractionSource: windowed reads of interaction events
- PostgreSQLPerformanceSource: windowed reads of performance samples
- PostgreSQLAlertRuleRepository: alert rules with upsert on save

Timestamps are stored as TIMESTAMPTZ for events and samples and converted
to epoch milliseconds at the boundary.
"""

import logging
from contextlib import contextmanager

import psycopg2
from psycopg2.extras import RealDictCursor

from pagepulse.base import AlertRuleRepository, InteractionSource, PerformanceSource
from pagepulse.core.models import AlertRule, InteractionEvent, PerformanceSample, to_datetime
from pagepulse.core.parsing import parse_interactions, parse_samples
from pagepulse.utils.config import Settings, get_settings
from pagepulse.utils.db import add_connect_timeout
from pagepulse.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)


class _PostgreSQLRepository:
    """Connection handling shared by the PostgreSQL adapters."""

    def __init__(self, settings: Settings | None = None):
        """
        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()
        self._conn: psycopg2.extensions.connection | None = None
        self._schema = self._settings.postgres.schema_name

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    def connect(self) -> None:
        """Establish connection to PostgreSQL."""
        conn_string = add_connect_timeout(self._settings.postgres.connection_string)
        self._conn = psycopg2.connect(conn_string)
        logger.info("%s connected (schema=%s)", type(self).__name__, self._schema)

    def _cursor(self):
        if self._conn is None:
            raise RuntimeError("PostgreSQL connection not established. Call connect() first.")
        return self._conn.cursor(cursor_factory=RealDictCursor)

    @contextmanager
    def _transaction(self):
        """
        Cursor whose statements are committed together on success.

        Any error rolls the transaction back before propagating, so a failed
        statement never leaves the connection aborted for later calls. Reads
        commit too and do not hold the connection idle in transaction.
        """
        cur = self._cursor()
        try:
            with cur:
                yield cur
            self._conn.commit()
        except Exception:
            self.rollback()
            raise

    def rollback(self) -> None:
        """Roll back the current transaction."""
        if self._conn:
            try:
                self._conn.rollback()
            except psycopg2.Error as e:
                logger.warning("Rollback failed: %s", e)

    def close(self) -> None:
        """Close connection and release resources."""
        if self._conn:
            try:
                self._conn.close()
                logger.info("%s connection closed", type(self).__name__)
            except psycopg2.Error as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._conn = None


def _window_filters(
    time_column: str,
    project_id: str,
    start_ms: int,
    end_ms: int,
    page_url: str | None,
) -> tuple[list[str], list]:
    clauses = ["project_id = %s", f"{time_column} BETWEEN %s AND %s"]
    params: list = [project_id, to_datetime(start_ms), to_datetime(end_ms)]
    if page_url is not None:
        clauses.append("page_url = %s")
        params.append(page_url)
    return clauses, params


class PostgreSQLInteractionSource(_PostgreSQLRepository, InteractionSource):
    """Reads interaction events from ``{schema}.interactions``."""

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def fetch_interactions(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
        event_type: str | None = None,
    ) -> list[InteractionEvent]:
        clauses, params = _window_filters("event_time", project_id, start_ms, end_ms, page_url)
        if event_type is not None:
            clauses.append("event_type = %s")
            params.append(event_type)

        with self._transaction() as cur:
            cur.execute(
                f"""
                SELECT session_id, user_id, project_id, event_type, page_url,
                       event_time, metadata
                FROM {self._schema}.interactions
                WHERE {" AND ".join(clauses)}
                ORDER BY session_id, event_time, id
                """,
                params,
            )
            rows = cur.fetchall()

        return list(parse_interactions(_interaction_record(row) for row in rows))

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def count_interactions(self, project_id: str, start_ms: int, end_ms: int) -> int:
        clauses, params = _window_filters("event_time", project_id, start_ms, end_ms, None)
        with self._transaction() as cur:
            cur.execute(
                f"SELECT COUNT(*) AS n FROM {self._schema}.interactions WHERE {' AND '.join(clauses)}",
                params,
            )
            row = cur.fetchone()
        return int(row["n"]) if row else 0


def _interaction_record(row: dict) -> dict:
    return {
        "session_id": row["session_id"],
        "user_id": row["user_id"],
        "project_id": row["project_id"],
        "event_type": row["event_type"],
        "page_url": row["page_url"],
        "timestamp": row["event_time"],
        "metadata": row["metadata"] or {},
    }


class PostgreSQLPerformanceSource(_PostgreSQLRepository, PerformanceSource):
    """Reads performance samples from ``{schema}.performance_samples``."""

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def fetch_samples(
        self,
        project_id: str,
        start_ms: int,
        end_ms: int,
        page_url: str | None = None,
    ) -> list[PerformanceSample]:
        clauses, params = _window_filters("sample_time", project_id, start_ms, end_ms, page_url)
        with self._transaction() as cur:
            cur.execute(
                f"""
                SELECT project_id, session_id, page_url, sample_time,
                       lcp, cls, inp, fcp, ttfb, fid, js_errors
                FROM {self._schema}.performance_samples
                WHERE {" AND ".join(clauses)}
                ORDER BY sample_time, id
                """,
                params,
            )
            rows = cur.fetchall()

        records = []
        for row in rows:
            record = dict(row)
            record["timestamp"] = record.pop("sample_time")
            record["js_errors"] = record["js_errors"] or []
            records.append(record)
        return list(parse_samples(records))


class PostgreSQLAlertRuleRepository(_PostgreSQLRepository, AlertRuleRepository):
    """Alert rules in ``{schema}.alert_rules``; ``save`` upserts by id."""

    _COLUMNS = (
        "id",
        "name",
        "project_id",
        "metric",
        "comparator",
        "threshold",
        "window_minutes",
        "cooldown_ms",
        "channel",
        "slack_webhook",
        "webhook_url",
        "is_active",
        "last_triggered_at",
    )

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def list_active(self) -> list[AlertRule]:
        with self._transaction() as cur:
            cur.execute(
                f"SELECT {', '.join(self._COLUMNS)} FROM {self._schema}.alert_rules "
                "WHERE is_active ORDER BY id"
            )
            rows = cur.fetchall()
        return [AlertRule.model_validate(dict(row)) for row in rows]

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def get(self, rule_id: str) -> AlertRule | None:
        with self._transaction() as cur:
            cur.execute(
                f"SELECT {', '.join(self._COLUMNS)} FROM {self._schema}.alert_rules WHERE id = %s",
                (rule_id,),
            )
            row = cur.fetchone()
        return AlertRule.model_validate(dict(row)) if row else None

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def save(self, rule: AlertRule) -> None:
        record = rule.model_dump(mode="json", include=set(self._COLUMNS))
        columns = ", ".join(self._COLUMNS)
        placeholders = ", ".join(f"%({c})s" for c in self._COLUMNS)
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in self._COLUMNS if c != "id")
        with self._transaction() as cur:
            cur.execute(
                f"""
                INSERT INTO {self._schema}.alert_rules ({columns})
                VALUES ({placeholders})
                ON CONFLICT (id) DO UPDATE SET {updates}
                """,
                record,
            )
        logger.debug("Saved alert rule %s", rule.id)

    @retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
    def delete(self, rule_id: str) -> bool:
        with self._transaction() as cur:
            cur.execute(f"DELETE FROM {self._schema}.alert_rules WHERE id = %s", (rule_id,))
            deleted = cur.rowcount > 0
        return deleted


def check_postgresql_connection(settings: Settings | None = None) -> bool:
    """
    Check if PostgreSQL is reachable.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        True if connection successful, False otherwise
    """
    try:
        settings = settings or get_settings()
        conn = psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))
        conn.close()
        return True
    except psycopg2.Error:
        return False
