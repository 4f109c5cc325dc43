"""AWS Lambda entry point for the conversion worker."""

from typing import Any, Dict, Optional

from .core import get_logger, quiet_third_party_loggers, setup_logger
from .core.events import parse_events
from .core.factories import WorkerFactory
from .core.services import ConversionWorker

setup_logger()
quiet_third_party_loggers()

# Reused across invocations in a warm container.
_worker: Optional[ConversionWorker] = None


def get_worker() -> ConversionWorker:
    """Create the worker on first use."""
    global _worker
    if _worker is None:
        _worker = WorkerFactory.create_worker()
    return _worker


def set_worker(worker: Optional[ConversionWorker]) -> None:
    """Replace the cached worker (used by tests and local runs)."""
    global _worker
    _worker = worker


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Convert every object named by an EventBridge or S3 notification event.

    Permanent failures are reported in the response. SourceUnavailable is
    raised so the platform redelivers the event; replaying already written
    variants is harmless.
    """
    logger = get_logger("handler")
    ingest_events = parse_events(event)
    if not ingest_events:
        return {"message": "Unsupported event payload", "results": []}

    request_id = getattr(context, "aws_request_id", None)
    worker = get_worker()

    results = []
    for ingest_event in ingest_events:
        result = worker.process(ingest_event, correlation_id=request_id)
        results.append(result.model_dump(mode="json"))

    failed = [r for r in results if r["status"] in ("failed", "partial")]
    if failed:
        logger.warning(f"{len(failed)} of {len(results)} object(s) not fully converted")
        message = "Processed with errors"
    else:
        message = "Successfully processed image"

    return {"message": message, "results": results}
