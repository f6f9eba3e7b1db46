# ==============================================================================
# Record Parsing
# ==============================================================================
"""
Turns raw telemetry records into validated models.

Records arrive from the tracking client, document stores, or JSON files in
slightly different shapes. Malformed records (missing timestamp, unknown
event type, non-dict payloads) are skipped rather than raised, so a single
bad beacon never hides the signal in the rest of the batch.
"""

import logging
from collections.abc import Generator, Iterable
from typing import Any

from pydantic import ValidationError

from pagepulse.core.models import InteractionEvent, PerformanceSample

logger = logging.getLogger(__name__)

REQUIRED_INTERACTION_FIELDS = ("timestamp",)


def _unwrap(record: Any) -> Any:
    # Some exporters nest the payload under 'data' or 'value'
    if isinstance(record, dict):
        for key in ("data", "value"):
            if isinstance(record.get(key), dict) and "timestamp" in record[key]:
                return record[key]
    return record


def parse_interactions(records: Iterable[Any]) -> Generator[InteractionEvent, None, None]:
    """
    Yield valid InteractionEvents, skipping malformed records.

    Args:
        records: Raw dicts (camelCase or snake_case) or InteractionEvents

    Yields:
        Validated, metadata-sanitized events
    """
    for record in records:
        if isinstance(record, InteractionEvent):
            yield record
            continue
        record = _unwrap(record)
        if not isinstance(record, dict) or not all(k in record for k in REQUIRED_INTERACTION_FIELDS):
            logger.debug("Skipping interaction record without timestamp")
            continue
        try:
            yield InteractionEvent.model_validate(record)
        except ValidationError as e:
            logger.debug("Skipping malformed interaction record: %s", e)


def parse_samples(records: Iterable[Any]) -> Generator[PerformanceSample, None, None]:
    """
    Yield valid PerformanceSamples, skipping malformed records.

    Args:
        records: Raw dicts or PerformanceSamples

    Yields:
        Validated samples
    """
    for record in records:
        if isinstance(record, PerformanceSample):
            yield record
            continue
        record = _unwrap(record)
        if not isinstance(record, dict) or "timestamp" not in record:
            logger.debug("Skipping performance record without timestamp")
            continue
        try:
            yield PerformanceSample.model_validate(record)
        except ValidationError as e:
            logger.debug("Skipping malformed performance record: %s", e)
