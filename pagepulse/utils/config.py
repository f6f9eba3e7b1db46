# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL username")
    password: str = Field(default="postgres", description="PostgreSQL password")
    database: str = Field(default="pagepulse", description="Database name")
    schema_name: str = Field(default="pagepulse", description="Schema name")
    sslmode: str = Field(default="prefer", description="SSL mode")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for rules and heatmaps."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    # Aggregated heatmaps are cheap to rebuild, so they expire
    heatmap_ttl_hours: int = Field(default=24, description="TTL for heatmap aggregates in hours")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class DetectionSettings(BaseSettings):
    """Thresholds for the behavioral signal detectors."""

    model_config = SettingsConfigDict(env_prefix="DETECTION_")

    rage_window_ms: int = Field(default=3000, description="Rage-click time window in ms")
    rage_threshold: int = Field(default=3, description="Clicks within the window for a rage burst")
    dead_idle_ms: int = Field(default=2000, description="Idle window after a click in ms")
    cluster_radius: float = Field(default=20, description="Heatmap clustering radius in px")
    error_group_limit: int = Field(default=50, description="Max error groups returned")
    spot_limit: int = Field(default=10, description="Max rage/dead spots returned")


class AlertSettings(BaseSettings):
    """Alert evaluator settings."""

    model_config = SettingsConfigDict(env_prefix="ALERTS_")

    interval_seconds: float = Field(default=60, description="Seconds between evaluation ticks")
    webhook_timeout: float = Field(default=10, description="Webhook request timeout in seconds")
    rule_store: Literal["valkey", "postgres"] = Field(
        default="valkey",
        description="Where alert rules and their trigger state live (valkey, postgres)",
    )
    project_id: str = Field(default="default", description="Project whose rules are evaluated")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
