"""Tests for structured logging and metrics."""

import logging
from unittest.mock import patch

from webp_variants.core.observability import (
    LogContext,
    LogLevel,
    MetricsCollector,
    ObservabilityConfig,
    PerformanceMetrics,
    StructuredLogger,
    create_logger,
    create_metrics_collector,
)


class TestLogContext:
    """Tests for LogContext."""

    def test_derived_contexts_share_correlation_id(self):
        """Test with_operation and with_metadata keep the correlation id."""
        context = LogContext(component="worker").with_metadata(bucket="b")
        derived = context.with_operation("fetch").with_metadata(key="a.jpg")

        assert derived.correlation_id == context.correlation_id
        assert derived.operation == "fetch"
        assert derived.metadata == {"bucket": "b", "key": "a.jpg"}
        assert context.metadata == {"bucket": "b"}


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_message_formatting(self):
        """Test operation, correlation id and metadata are rendered."""
        logger = StructuredLogger("test-structured-logger")
        context = LogContext(correlation_id="abc", operation="variant").with_metadata(width=480)

        with patch.object(logger._logger, "log") as mock_log:
            logger.info("Wrote variant", context, size=10)

        mock_log.assert_called_once_with(
            logging.INFO, "[variant] [abc] Wrote variant (width=480, size=10)"
        )

    def test_without_context(self):
        """Test keyword details are rendered without a context."""
        logger = StructuredLogger("test-structured-plain")

        with patch.object(logger._logger, "log") as mock_log:
            logger.warning("Slow", elapsed=3)

        mock_log.assert_called_once_with(logging.WARNING, "Slow (elapsed=3)")

    def test_disabled_level_is_not_formatted(self):
        """Test messages below the logger level are dropped."""
        logger = StructuredLogger("test-structured-quiet", logging.WARNING)

        with patch.object(logger._logger, "log") as mock_log:
            logger.debug("Fetching source")

        mock_log.assert_not_called()

    def test_create_logger_level(self):
        """Test create_logger applies the configured level."""
        logger = create_logger(ObservabilityConfig(log_level=LogLevel.DEBUG, component_name="cfg"))
        assert logger._logger.level == logging.DEBUG
        assert logger._logger.name == "webp-variants.cfg"


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_summary(self):
        """Test summary statistics per operation."""
        collector = MetricsCollector()
        collector.record_metric(PerformanceMetrics("variant", 0.0, 1.0, True, metadata={"size": 300}))
        collector.record_metric(
            PerformanceMetrics("variant", 0.0, 3.0, False, "denied", {"size": None})
        )
        collector.record_metric(PerformanceMetrics("fetch", 0.0, 0.5, True))

        summary = collector.get_summary("variant")

        assert summary["total_operations"] == 2
        assert summary["failed_operations"] == 1
        assert summary["success_rate"] == 0.5
        assert summary["avg_duration_ms"] == 2000.0
        assert summary["max_duration_ms"] == 3000.0
        assert summary["bytes_written"] == 300
        assert collector.get_summary("decode") == {}

    def test_clear_metrics(self):
        """Test clearing metrics."""
        collector = MetricsCollector()
        collector.record_metric(PerformanceMetrics("fetch", 0.0, 1.0, True))
        collector.clear_metrics()
        assert collector.get_metrics() == []

    def test_metrics_can_be_disabled(self):
        """Test no collector is created when metrics are disabled."""
        assert create_metrics_collector(ObservabilityConfig(enable_metrics=False)) is None
