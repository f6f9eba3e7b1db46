# ==============================================================================
# Database Utilities
# ==============================================================================
"""
Database utility functions.

Provides schema initialization and other database helpers.
Includes retry logic with exponential backoff for network resilience.
"""

import logging

import psycopg2
from jinja2 import Template

from pagepulse.utils.config import Settings, get_settings
from pagepulse.utils.paths import get_init_sql_path
from pagepulse.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)

# Connection timeout
CONNECT_TIMEOUT = 10


def add_connect_timeout(conn_string: str) -> str:
    """Add connect_timeout to connection string if not present."""
    if "connect_timeout" not in conn_string:
        separator = "&" if "?" in conn_string else "?"
        return f"{conn_string}{separator}connect_timeout={CONNECT_TIMEOUT}"
    return conn_string


def render_schema_sql(schema_name: str) -> str:
    """Render the schema SQL template with the given schema name."""
    schema_file = get_init_sql_path()
    if not schema_file.exists():
        raise RuntimeError(f"Schema file not found: {schema_file}")

    template = Template(schema_file.read_text())
    return template.render(schema_name=schema_name)


@retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
def ensure_schema(settings: Settings | None = None) -> None:
    """
    Create the schema and tables if they don't exist.

    Idempotent; every statement in the template uses IF NOT EXISTS.
    Retries on connection errors with exponential backoff (10 attempts, ~60 seconds).

    Raises:
        RuntimeError: If the template is missing or initialization fails
    """
    settings = settings or get_settings()
    schema_name = settings.postgres.schema_name

    logger.info("Initializing database schema '%s'...", schema_name)
    schema_sql = render_schema_sql(schema_name)

    conn = psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))
    try:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    except POSTGRES_RETRY_EXCEPTIONS:
        raise
    except psycopg2.Error as e:
        raise RuntimeError(f"Failed to initialize schema: {e}") from e
    finally:
        conn.close()
    logger.info("Database schema '%s' initialized.", schema_name)

