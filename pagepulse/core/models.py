# ==============================================================================
# PagePulse Domain Models
# ==============================================================================
"""
Pydantic models for tracked events and the signals derived from them.

These models are used for:
- Validating raw records sent by the tracking client (camelCase aliases)
- Carrying detector output (clusters, incidents, error groups, trends)
- Persisting alert rules and their trigger state

Timestamps are Unix epoch milliseconds throughout. Inputs may also be
ISO-8601 strings or datetime objects; naive datetimes are treated as UTC.

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import math
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pagepulse.core.sanitizer import sanitize_metadata

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_ms(value: Any) -> int:
    """
    Coerce a timestamp to Unix epoch milliseconds.

    Args:
        value: int/float milliseconds, a numeric string, an ISO-8601 string,
               or a datetime

    Returns:
        Milliseconds since the epoch, within the range of ``datetime``

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        timestamp_ms = int(value)
    elif isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            timestamp_ms = int(value.timestamp() * 1000)
        except OverflowError:
            raise ValueError(f"timestamp out of range: {value!r}") from None
    elif isinstance(value, str):
        text = value.strip()
        if not text.lstrip("-").isdigit():
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return to_epoch_ms(datetime.fromisoformat(text))
        timestamp_ms = int(text)
    else:
        raise ValueError(f"invalid timestamp: {value!r}")

    # Every timestamp must be bucketable and printable later on
    try:
        to_datetime(timestamp_ms)
    except OverflowError:
        raise ValueError(f"timestamp out of range: {value!r}") from None
    return timestamp_ms


def to_datetime(timestamp_ms: int) -> datetime:
    """
    Convert epoch milliseconds to an aware UTC datetime.

    Raises:
        OverflowError: If the timestamp falls outside years 1-9999
    """
    return _EPOCH + timedelta(milliseconds=timestamp_ms)


# ==============================================================================
# Raw Telemetry
# ==============================================================================


class EventType(str, Enum):
    """Interaction event types emitted by the tracking client."""

    CLICK = "click"
    HOVER = "hover"
    SCROLL = "scroll"
    PAGEVIEW = "pageview"
    SUBMIT = "submit"
    MOUSEMOVE = "mousemove"
    CUSTOM = "custom"


class InteractionEvent(BaseModel):
    """
    A single user interaction captured by the tracking client.

    Attributes:
        session_id: Recording session the event belongs to
        user_id: Identified user, when known
        project_id: Tracked project
        event_type: Kind of interaction
        page_url: Page the interaction happened on
        timestamp: Unix timestamp in milliseconds
        metadata: Sanitized client payload (x, y, elementId, className,
                  element, text, action, ...)
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    session_id: str = Field(..., alias="sessionId", description="Session identifier")
    user_id: str | None = Field(None, alias="userId", description="User identifier")
    project_id: str = Field("default", alias="projectId", description="Project identifier")
    event_type: EventType = Field(..., alias="eventType", description="Event type")
    page_url: str = Field("", alias="pageURL", description="Page URL")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    metadata: dict = Field(default_factory=dict, description="Sanitized event metadata")

    @field_validator("session_id", "user_id", "project_id", "page_url", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        return to_epoch_ms(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _sanitize_metadata(cls, value: Any) -> dict:
        return sanitize_metadata(value)

    @property
    def event_time(self) -> datetime:
        """Convert timestamp to an aware UTC datetime."""
        return to_datetime(self.timestamp)


class ErrorRecord(BaseModel):
    """A JavaScript error reported alongside a performance sample."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field("", description="Error class name")
    message: str = Field("", description="Error message")
    stack: str = Field("", description="Raw stack trace")
    timestamp: int | None = Field(None, description="Client-side time of the error")

    @field_validator("name", "message", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("stack", mode="before")
    @classmethod
    def _stack_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int | None:
        if value is None:
            return None
        try:
            return to_epoch_ms(value)
        except ValueError:
            return None


class PerformanceSample(BaseModel):
    """
    A page performance beacon: web vitals plus the JS errors seen on the page.

    Vitals not modelled explicitly (e.g. ``domReadyTime``) are kept as extra
    fields and remain reachable through ``metric_value()``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    page_url: str = Field("", alias="pageURL", description="Page URL")
    session_id: str | None = Field(None, alias="sessionId", description="Session identifier")
    project_id: str = Field("default", alias="projectId", description="Project identifier")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    js_errors: list[ErrorRecord] = Field(
        default_factory=list, alias="jsErrors", description="JS errors on the page"
    )

    lcp: float | None = Field(None, alias="LCP")
    cls: float | None = Field(None, alias="CLS")
    inp: float | None = Field(None, alias="INP")
    fcp: float | None = Field(None, alias="FCP")
    ttfb: float | None = Field(None, alias="TTFB")
    fid: float | None = Field(None, alias="FID")

    @field_validator("session_id", "project_id", "page_url", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        return to_epoch_ms(value)

    @field_validator("js_errors", mode="before")
    @classmethod
    def _error_list(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [e for e in value if isinstance(e, (dict, ErrorRecord))]

    def metric_value(self, field: str) -> float | None:
        """
        Look up a numeric vitals field by name (case-insensitive).

        Returns:
            The value, or None if missing or not numeric
        """
        value = getattr(self, field.lower(), None)
        if value is None and self.model_extra:
            for key, extra in self.model_extra.items():
                if key.lower() == field.lower():
                    value = extra
                    break
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


# ==============================================================================
# Heatmaps
# ==============================================================================


class HeatmapPoint(BaseModel):
    """A raw interaction coordinate."""

    x: float
    y: float
    intensity: float = 1
    session_id: str | None = None


class HeatmapCluster(BaseModel):
    """Weighted centroid of one or more raw points within the clustering radius."""

    x: float
    y: float
    intensity: float
    count: int


class HeatmapMetadata(BaseModel):
    total_interactions: int = 0
    unique_users: int = 0
    session_count: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HeatmapAggregate(BaseModel):
    """Clustered heatmap for one page, interaction type and device class."""

    page_url: str
    type: str
    device: str = "unknown"
    points: list[HeatmapCluster] = Field(default_factory=list)
    metadata: HeatmapMetadata = Field(default_factory=HeatmapMetadata)
    session_ids: list[str] = Field(default_factory=list)


# ==============================================================================
# Click Signals
# ==============================================================================


class Position(BaseModel):
    x: int = 0
    y: int = 0


class RageIncident(BaseModel):
    """One non-overlapping burst of repeated clicks on the same target."""

    session_id: str
    page_url: str
    selector: str
    count: int
    first_seen: int
    last_seen: int
    position: Position = Field(default_factory=Position)
    sample_text: str | None = None


class DeadClickRecord(BaseModel):
    """A click with no observable follow-up inside the idle window."""

    session_id: str
    page_url: str
    selector: str
    timestamp: int
    sample_text: str | None = None


class RageSpot(BaseModel):
    """Rage incidents rolled up per (page, selector)."""

    page_url: str
    selector: str
    incidents: int = 0
    clicks: int = 0
    sessions: int = 0
    first_seen: int
    last_seen: int
    sample_text: str | None = None


class DeadSpot(BaseModel):
    """Dead clicks rolled up per (page, selector)."""

    page_url: str
    selector: str
    dead_clicks: int = 0
    sessions: int = 0
    first_seen: int
    last_seen: int
    sample_text: str | None = None


# ==============================================================================
# Errors and Trends
# ==============================================================================


class ErrorGroup(BaseModel):
    """Error records sharing one fingerprint."""

    fingerprint: str
    name: str
    message: str
    normalized_stack: str
    count: int = 0
    sessions: set[str] = Field(default_factory=set)
    pages: set[str] = Field(default_factory=set)
    first_seen: int
    last_seen: int


class TrendBucket(BaseModel):
    """Signal count for one UTC hour (``YYYY-MM-DDTHH``)."""

    hour: str
    count: int


# ==============================================================================
# Alerting
# ==============================================================================


class Comparator(str, Enum):
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    EQ = "=="
    NE = "!="


class Channel(str, Enum):
    """Notification channel kinds."""

    SLACK = "slack"
    WEBHOOK = "webhook"


class AlertRule(BaseModel):
    """
    Threshold rule over a metric computed on a trailing window.

    ``last_triggered_at`` (epoch ms) is the only state that survives between
    evaluations; it gates firings through ``cooldown_ms``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    project_id: str = Field("default", alias="projectId")
    metric: str = "events_per_minute"
    comparator: Comparator = Comparator.GT
    threshold: float
    window_minutes: float = Field(5, alias="windowMinutes", gt=0)
    cooldown_ms: int = Field(300_000, alias="cooldownMs", ge=0)
    channel: Channel = Channel.SLACK
    slack_webhook: str | None = Field(None, alias="slackWebhook")
    webhook_url: str | None = Field(None, alias="webhookUrl")
    is_active: bool = Field(True, alias="isActive")
    last_triggered_at: int | None = Field(None, alias="lastTriggeredAt")

    @field_validator("last_triggered_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int | None:
        if value is None:
            return None
        return to_epoch_ms(value)

    def is_cooled_down(self, now_ms: int) -> bool:
        """True if the rule has never fired or its cooldown has elapsed."""
        if self.last_triggered_at is None:
            return True
        return now_ms - self.last_triggered_at >= self.cooldown_ms
