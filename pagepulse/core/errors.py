# ==============================================================================
# Error Fingerprint Engine
# ==============================================================================
"""
Groups JavaScript error reports by a normalized fingerprint.

Stack traces are normalized by masking ``line:col`` pairs and parenthesized
file paths, so the same bug reported from different builds or hosts lands in
one group.
"""

import re
from collections.abc import Iterable

from pagepulse.core.models import ErrorGroup, ErrorRecord, PerformanceSample

LINE_COL_PATTERN = re.compile(r":\d+:\d+")
PAREN_PATTERN = re.compile(r"\(.*?\)")

STACK_LINES = 5
FINGERPRINT_LENGTH = 1000
DEFAULT_GROUP_LIMIT = 50


def normalize_stack(stack) -> str:
    """
    Mask volatile details of a stack trace.

    - ``:12:34`` becomes ``:__:__``
    - ``(https://cdn/app.js:1:2)`` becomes ``(...)``
    - only the first 5 lines are kept

    Non-string or empty input yields "".
    """
    if not stack or not isinstance(stack, str):
        return ""
    masked = LINE_COL_PATTERN.sub(":__:__", stack)
    masked = PAREN_PATTERN.sub("(...)", masked)
    return "\n".join(masked.split("\n")[:STACK_LINES])


def make_fingerprint(error: ErrorRecord) -> str:
    """Build ``name|message|normalized_stack``, truncated to 1000 chars."""
    name = error.name.strip()
    message = error.message.strip()
    return f"{name}|{message}|{normalize_stack(error.stack)}"[:FINGERPRINT_LENGTH]


def group_errors(samples: Iterable[PerformanceSample]) -> list[ErrorGroup]:
    """
    Group every JS error in ``samples`` by fingerprint.

    Each occurrence increments ``count``; the sample's session and page are
    collected as sets and its timestamp widens ``first_seen``/``last_seen``.

    Returns:
        Groups in order of first occurrence
    """
    groups: dict[str, ErrorGroup] = {}

    for sample in samples:
        for error in sample.js_errors:
            fingerprint = make_fingerprint(error)
            group = groups.get(fingerprint)
            if group is None:
                group = ErrorGroup(
                    fingerprint=fingerprint,
                    name=error.name or "Error",
                    message=error.message or "Unknown error",
                    normalized_stack=normalize_stack(error.stack),
                    first_seen=sample.timestamp,
                    last_seen=sample.timestamp,
                )
                groups[fingerprint] = group
            group.count += 1
            if sample.session_id:
                group.sessions.add(sample.session_id)
            if sample.page_url:
                group.pages.add(sample.page_url)
            group.first_seen = min(group.first_seen, sample.timestamp)
            group.last_seen = max(group.last_seen, sample.timestamp)

    return list(groups.values())


def top_error_groups(
    samples: Iterable[PerformanceSample],
    limit: int = DEFAULT_GROUP_LIMIT,
) -> list[ErrorGroup]:
    """Error groups sorted by occurrence count, descending."""
    ranked = sorted(group_errors(samples), key=lambda g: -g.count)
    return ranked[:limit]
