# ==============================================================================
# PagePulse Utilities
# ==============================================================================
"""
Shared utilities: configuration, database setup, retry policies and paths.
"""

from pagepulse.utils.config import (
    AlertSettings,
    DetectionSettings,
    PostgresSettings,
    Settings,
    ValkeySettings,
    get_settings,
)
from pagepulse.utils.db import ensure_schema, render_schema_sql

__all__ = [
    # Config
    "AlertSettings",
    "DetectionSettings",
    "PostgresSettings",
    "Settings",
    "ValkeySettings",
    "get_settings",
    # Database
    "ensure_schema",
    "render_schema_sql",
]
