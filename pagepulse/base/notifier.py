# ==============================================================================
# Notifier Abstract Base Class
# ==============================================================================
"""
Abstract interface for delivering alert notifications.

Implementations: chat/generic webhooks, email, logging-only, etc.
"""

from abc import ABC, abstractmethod

from pagepulse.core.models import AlertRule


class Notifier(ABC):
    """Delivers a fired alert through the rule's channel."""

    @abstractmethod
    def notify(self, rule: AlertRule, message: str, value: float) -> bool:
        """
        Deliver a notification for ``rule``.

        Args:
            rule: The rule that fired
            message: Human-readable alert text
            value: Computed metric value

        Returns:
            True if something was delivered, False if the rule has no
            delivery target for its channel

        Raises:
            NotificationError: If delivery was attempted and failed
        """
        ...
