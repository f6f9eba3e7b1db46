# ==============================================================================
# Exceptions
# ==============================================================================


class PagePulseError(Exception):
    """Base class for errors raised by pagepulse."""


class NotificationError(PagePulseError):
    """An alert notification could not be delivered."""


class ConfigurationError(PagePulseError):
    """Settings are missing or inconsistent."""
