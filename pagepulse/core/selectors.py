# ==============================================================================
# Selector Resolver
# ==============================================================================
"""
Derives a stable string identity for the element an interaction targeted.

The selector is the join key for rage clicks, dead clicks and the rage trend,
so every detector must resolve it through this module.
"""

from typing import Any

UNKNOWN_SELECTOR = "unknown"


def resolve_selector(metadata: Any) -> str:
    """
    Resolve a selector from event metadata.

    Priority:
        1. ``#<elementId>``
        2. ``.<class1>.<class2>`` from the first two className tokens
        3. lower-cased ``element`` tag name
        4. ``"unknown"``

    Args:
        metadata: Event metadata dict (anything else resolves to "unknown")

    Returns:
        Selector string
    """
    if not isinstance(metadata, dict):
        return UNKNOWN_SELECTOR

    element_id = metadata.get("elementId")
    if element_id:
        return f"#{element_id}"

    class_name = metadata.get("className")
    if isinstance(class_name, str):
        return "." + ".".join(class_name.split(" ")[:2])

    element = metadata.get("element")
    if element:
        return str(element).lower()

    return UNKNOWN_SELECTOR
