"""Parsing of storage notifications into ingest events."""

from typing import Any, Dict, List, Optional

from ..keys import decode_event_key
from .logging_config import get_logger
from .models import IngestEvent

logger = get_logger("events")

EVENTBRIDGE_CREATED = "Object Created"
S3_CREATED_PREFIX = "ObjectCreated"


def is_create_event(event_type: str) -> bool:
    """True for EventBridge "Object Created" and S3 "ObjectCreated:*" types."""
    return event_type == EVENTBRIDGE_CREATED or event_type.startswith(S3_CREATED_PREFIX)


def _nested(container: Dict[str, Any], section: str, field: str) -> str:
    value = container.get(section)
    if not isinstance(value, dict):
        return ""
    result = value.get(field)
    return result if isinstance(result, str) else ""


def _from_eventbridge(payload: Dict[str, Any]) -> Optional[IngestEvent]:
    detail = payload.get("detail")
    if not isinstance(detail, dict):
        return None
    bucket = _nested(detail, "bucket", "name")
    key = _nested(detail, "object", "key")
    return IngestEvent(
        bucket=bucket,
        key=decode_event_key(key),
        event_type=str(payload.get("detail-type", EVENTBRIDGE_CREATED)),
    )


def _from_s3_record(record: Dict[str, Any]) -> Optional[IngestEvent]:
    s3 = record.get("s3")
    if not isinstance(s3, dict):
        return None
    bucket = _nested(s3, "bucket", "name")
    key = _nested(s3, "object", "key")
    return IngestEvent(
        bucket=bucket,
        key=decode_event_key(key),
        event_type=str(record.get("eventName", "")),
    )


def parse_events(payload: Any) -> List[IngestEvent]:
    """
    Extract ingest events from an EventBridge event or an S3 notification.

    Unrecognised payloads and malformed records are logged and skipped, so
    they become no-ops rather than failures.

    Args:
        payload: Decoded JSON event delivered to the worker

    Returns:
        Zero or more ingest events
    """
    if not isinstance(payload, dict):
        logger.warning(f"Ignoring non-object event payload: {type(payload).__name__}")
        return []

    events: List[IngestEvent] = []

    if "Records" in payload:
        for record in payload.get("Records") or []:
            event = _from_s3_record(record) if isinstance(record, dict) else None
            if event is None:
                logger.warning("Skipping malformed S3 notification record")
                continue
            events.append(event)
        return events

    if "detail" in payload:
        event = _from_eventbridge(payload)
        if event is not None:
            events.append(event)
            return events

    logger.warning("Unsupported event payload")
    return events
