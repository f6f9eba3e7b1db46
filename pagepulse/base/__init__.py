# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the ports of the signal engine.

Detectors in core/ are pure functions; everything they read or write
beyond their arguments goes through one of these interfaces.
"""

from pagepulse.base.exceptions import ConfigurationError, NotificationError, PagePulseError
from pagepulse.base.notifier import Notifier
from pagepulse.base.repositories import (
    AlertRuleRepository,
    HeatmapRepository,
    InteractionSource,
    PerformanceSource,
)
from pagepulse.base.store import DocumentStore

__all__ = [
    "AlertRuleRepository",
    "ConfigurationError",
    "DocumentStore",
    "HeatmapRepository",
    "InteractionSource",
    "NotificationError",
    "Notifier",
    "PagePulseError",
    "PerformanceSource",
]
