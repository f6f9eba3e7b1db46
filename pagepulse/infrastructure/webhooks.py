# ==============================================================================
# Webhook Notifications
# ==============================================================================
"""
Alert delivery over HTTP webhooks.

Two payload shapes are supported:
- slack: ``{"text": message}`` posted to the rule's ``slack_webhook``
- webhook: ``{"message", "metric", "value"}`` posted to ``webhook_url``

Includes light retry logic (3 attempts, ~7 seconds) on connection errors,
timeouts and error statuses.
"""

import logging
from typing import Any

import requests

from pagepulse.base import NotificationError, Notifier
from pagepulse.core.models import AlertRule, Channel
from pagepulse.utils.retry import HTTP_RETRY_EXCEPTIONS, RETRY_WAIT_MIN, retry_light

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds

WEBHOOK_RETRY_EXCEPTIONS = HTTP_RETRY_EXCEPTIONS + (requests.exceptions.HTTPError,)


# ==============================================================================
# HTTP Helpers
# ==============================================================================


def post_json(url: str, body: dict[str, Any], timeout: float = DEFAULT_TIMEOUT) -> None:
    """
    POST a JSON body and fail on non-2xx responses.

    Raises:
        requests.exceptions.RequestException: On transport errors or error status
    """
    response = requests.post(url, json=body, timeout=timeout)
    response.raise_for_status()


def slack_payload(message: str) -> dict[str, Any]:
    return {"text": message}


def webhook_payload(rule: AlertRule, message: str, value: float) -> dict[str, Any]:
    return {"message": message, "metric": rule.metric, "value": value}


# ==============================================================================
# Notifier
# ==============================================================================


class WebhookNotifier(Notifier):
    """
    Delivers alerts to chat or generic webhooks based on ``rule.channel``.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, retry_wait_min: float = RETRY_WAIT_MIN):
        """
        Args:
            timeout: Per-request timeout in seconds
            retry_wait_min: Minimum backoff between attempts (tests pass 0)
        """
        self._timeout = timeout
        self._post = retry_light(WEBHOOK_RETRY_EXCEPTIONS, logger, wait_min=retry_wait_min)(post_json)

    @staticmethod
    def target_for(rule: AlertRule) -> str | None:
        """Return the URL the rule's channel delivers to, if configured."""
        if rule.channel == Channel.SLACK:
            return rule.slack_webhook or None
        if rule.channel == Channel.WEBHOOK:
            return rule.webhook_url or None
        return None

    def notify(self, rule: AlertRule, message: str, value: float) -> bool:
        url = self.target_for(rule)
        if url is None:
            logger.warning(
                "Alert rule '%s' has no %s target configured, not dispatching",
                rule.name,
                rule.channel.value,
            )
            return False

        if rule.channel == Channel.SLACK:
            body = slack_payload(message)
        else:
            body = webhook_payload(rule, message, value)

        try:
            self._post(url, body, self._timeout)
        except requests.exceptions.RequestException as e:
            raise NotificationError(
                f"Failed to deliver alert '{rule.name}' via {rule.channel.value}: {e}"
            ) from e

        logger.info("Delivered alert '%s' via %s", rule.name, rule.channel.value)
        return True
