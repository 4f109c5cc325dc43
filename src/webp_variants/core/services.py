"""Conversion worker: one ingest event in, a set of WebP variants out."""

import functools
import time
from typing import Any, List, Optional

from .error_handling import VariantBatchContext
from .events import is_create_event
from .exceptions import CorruptInput, SourceUnavailable, UnsupportedFormat
from .formats import decode
from ..keys import is_output_key
from .models import (
    DecodedImage,
    ImageFormat,
    IngestEvent,
    ProcessingResult,
    ProcessingStatus,
    SourceObject,
    VariantConfig,
    VariantResult,
    VariantSpec,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .planner import plan
from .protocols import LoggerProtocol, S3ClientProtocol, VariantRunner
from ..processors import get_processor
from ..processors.common import download_source, process_variant


class ConversionWorker:
    """
    Converts one source object into its WebP variants.

    Every invocation is safe to replay: output keys depend only on the
    source key and the breakpoint ladder, and every write overwrites.
    """

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        config: VariantConfig,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
        runner: Optional[VariantRunner] = None,
    ):
        self._s3_client = s3_client
        self._config = config
        self._logger = logger
        self._metrics_collector = metrics_collector
        self._runner = runner or get_processor(config.processor)

    @property
    def config(self) -> VariantConfig:
        return self._config

    @staticmethod
    def skip_reason(event: IngestEvent) -> Optional[str]:
        """Why an event must be ignored, or None if it should be processed."""
        # Loop guard: outputs land in the bucket that raises the events.
        if is_output_key(event.key):
            return "key matches output naming pattern"
        if not event.bucket or not event.key:
            return "missing bucket or key"
        if event.key.endswith("/"):
            return "key is a folder marker"
        if not is_create_event(event.event_type):
            return f"unsupported event type {event.event_type!r}"
        return None

    def process(
        self, event: IngestEvent, correlation_id: Optional[str] = None
    ) -> ProcessingResult:
        """
        Process one ingest event.

        Returns:
            Aggregate result; permanent failures are reported here

        Raises:
            SourceUnavailable: If the source cannot be fetched, so the
                delivery layer redelivers the event
        """
        start_time = time.time()
        log_context = LogContext(
            operation="process", component="conversion_worker"
        ).with_metadata(bucket=event.bucket, source_key=event.key)
        if correlation_id:
            log_context.correlation_id = correlation_id

        if self._metrics_collector is not None:
            self._metrics_collector.clear_metrics()

        result = ProcessingResult(bucket=event.bucket, source_key=event.key)

        reason = self.skip_reason(event)
        if reason:
            self._logger.info(f"Skipping event: {reason}", log_context)
            result.status = ProcessingStatus.SKIPPED
            result.skip_reason = reason
            return result

        # Fetch
        try:
            self._logger.debug("Fetching source", log_context.with_operation("fetch"))
            source = SourceObject(
                bucket=event.bucket,
                key=event.key,
                body=download_source(self._s3_client, event.bucket, event.key),
                format_hint=ImageFormat.from_extension(event.key),
            )
        except SourceUnavailable as e:
            self._logger.error(
                "Source unavailable; leaving retry to the event source",
                log_context.with_metadata(error=str(e)),
            )
            self._record("fetch", start_time, False, str(e))
            raise

        # Decode and plan
        try:
            decoded = decode(source.body, source.format_hint)
            specs = plan(decoded.width, decoded.height, self._config.breakpoints)
        except (UnsupportedFormat, CorruptInput) as e:
            result.status = ProcessingStatus.FAILED
            result.error_type = type(e).__name__
            result.error = str(e)
            result.processing_time = time.time() - start_time
            self._logger.error(
                "Permanent failure, dropping event",
                log_context.with_metadata(error_type=result.error_type, error=str(e)),
            )
            self._record("decode", start_time, False, str(e))
            return result

        result.source_format = decoded.format
        result.width = decoded.width
        result.height = decoded.height
        self._logger.info(
            f"Planned {len(specs)} variant(s)",
            log_context.with_operation("plan"),
            format=decoded.format.value if decoded.format else "unknown",
            width=decoded.width,
            height=decoded.height,
        )

        # Resize + encode + upload each variant independently
        output_bucket = self._config.output_bucket or event.bucket
        task = functools.partial(
            self._produce_variant, decoded, event.key, output_bucket, log_context
        )
        with VariantBatchContext(event.key) as batch:
            variants = self._runner(event.key, specs, task, self._config.max_workers)
            for variant in variants:
                if not variant.success:
                    batch.add_error(variant.error, variant.key, variant.error_type)

        result.variants = variants
        result.status = self._aggregate_status(variants)
        if result.status is ProcessingStatus.FAILED:
            result.error_type = "AllVariantsFailed"
            result.error = "; ".join(f"{v.key}: {v.error}" for v in variants)
        result.processing_time = time.time() - start_time

        self._log_summary(result, log_context)
        return result

    def _produce_variant(
        self,
        image: DecodedImage,
        source_key: str,
        bucket: str,
        log_context: LogContext,
        spec: VariantSpec,
    ) -> VariantResult:
        variant_context = log_context.with_operation("variant").with_metadata(
            breakpoint=spec.breakpoint or "original", width=spec.width
        )
        start_time = time.time()
        variant = process_variant(
            self._s3_client, image, source_key, spec, self._config, bucket
        )
        if variant.success:
            self._logger.debug(
                "Wrote variant", variant_context, key=variant.key, size=variant.size
            )
        else:
            self._logger.error(
                "Variant failed",
                variant_context,
                key=variant.key,
                error_type=variant.error_type,
                error=variant.error,
            )
        self._record(
            "variant",
            start_time,
            variant.success,
            variant.error or None,
            key=variant.key,
            size=variant.size,
        )
        return variant

    @staticmethod
    def _aggregate_status(variants: List[VariantResult]) -> ProcessingStatus:
        succeeded = sum(1 for variant in variants if variant.success)
        if succeeded == len(variants):
            return ProcessingStatus.SUCCEEDED
        if succeeded:
            return ProcessingStatus.PARTIAL
        return ProcessingStatus.FAILED

    def _log_summary(self, result: ProcessingResult, log_context: LogContext) -> None:
        summary_context = log_context.with_operation("summary")
        message = f"Conversion {result.status.value}"
        details = dict(
            written=len(result.written_keys),
            failed=len(result.failed_keys),
            processing_time_ms=round(result.processing_time * 1000, 1),
        )
        if self._metrics_collector is not None:
            variant_summary = self._metrics_collector.get_summary("variant")
            if variant_summary:
                details.update(
                    avg_variant_ms=variant_summary["avg_duration_ms"],
                    max_variant_ms=variant_summary["max_duration_ms"],
                    bytes_written=variant_summary["bytes_written"],
                )
        if result.status is ProcessingStatus.SUCCEEDED:
            self._logger.info(message, summary_context, **details)
        elif result.status is ProcessingStatus.PARTIAL:
            self._logger.warning(message, summary_context, **details)
        else:
            self._logger.error(message, summary_context, **details)

    def _record(
        self,
        operation: str,
        start_time: float,
        success: bool,
        error_message: Optional[str] = None,
        **metadata: Any,
    ) -> None:
        if self._metrics_collector is None:
            return
        self._metrics_collector.record_metric(
            PerformanceMetrics(
                operation=operation,
                start_time=start_time,
                end_time=time.time(),
                success=success,
                error_message=error_message,
                metadata=metadata,
            )
        )
