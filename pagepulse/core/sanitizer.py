# ==============================================================================
# Event Sanitizer
# ==============================================================================
"""
Strips sensitive keys from client-supplied metadata before it is stored or
analysed. Matching is case-insensitive and applies at every nesting depth.
"""

from typing import Any

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "pwd",
        "creditcard",
        "cc",
        "ssn",
        "token",
        "auth",
        "authorization",
        "value",
    }
)


def sanitize(obj: Any) -> Any:
    """
    Recursively rebuild ``obj`` without any deny-listed key.

    Dicts and lists are rebuilt (list-ness preserved); any other value is
    returned unchanged.
    """
    if isinstance(obj, dict):
        return {
            key: sanitize(value)
            for key, value in obj.items()
            if str(key).lower() not in SENSITIVE_KEYS
        }
    if isinstance(obj, (list, tuple)):
        return [sanitize(item) for item in obj]
    return obj


def sanitize_metadata(obj: Any) -> dict:
    """Sanitize event metadata; anything that is not a dict becomes ``{}``."""
    if not isinstance(obj, dict):
        return {}
    return sanitize(obj)
