"""Observability utilities for logging and metrics."""

import logging
import threading
import uuid
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .logging_config import get_logger


class LogLevel(Enum):
    """Log levels for structured logging."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


@dataclass
class LogContext:
    """Context carried through one conversion: correlation id, stage and key details."""

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Same context for another stage (fetch, plan, variant, summary)."""
        return LogContext(self.correlation_id, operation, self.component, dict(self.metadata))

    def with_metadata(self, **kwargs) -> "LogContext":
        """Same context with extra key=value details."""
        return LogContext(
            self.correlation_id,
            self.operation,
            self.component,
            {**self.metadata, **kwargs},
        )


def format_message(message: str, context: Optional[LogContext] = None, **details: Any) -> str:
    """Render "[operation] [correlation id] message (k=v, ...)"."""
    if context is not None:
        details = {**context.metadata, **details}
        message = f"[{context.correlation_id}] {message}"
        if context.operation:
            message = f"[{context.operation}] {message}"
    if details:
        message = f"{message} ({', '.join(f'{k}={v}' for k, v in details.items())})"
    return message


class StructuredLogger:
    """Logger that renders a LogContext into every line."""

    def __init__(self, name: str, level: int = logging.INFO):
        self._logger = get_logger(name)
        self._logger.setLevel(level)

    def _log(self, level: LogLevel, message: str, context: Optional[LogContext], **kwargs):
        if self._logger.isEnabledFor(level.value):
            self._logger.log(level.value, format_message(message, context, **kwargs))

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.ERROR, message, context, **kwargs)


@dataclass
class PerformanceMetrics:
    """Timing of one worker stage: fetch, decode or a single variant."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Stage duration in seconds."""
        return self.end_time - self.start_time


class MetricsCollector:
    """
    Stage timings for the event being converted.

    Variant tasks record from pool threads, so every access takes the lock.
    The worker clears the collector at the start of each event, which keeps
    a warm Lambda container from summarising earlier invocations.
    """

    def __init__(self):
        self._metrics: List[PerformanceMetrics] = []
        self._lock = threading.Lock()

    def record_metric(self, metric: PerformanceMetrics):
        with self._lock:
            self._metrics.append(metric)

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetrics]:
        """Recorded metrics, optionally only those of one stage."""
        with self._lock:
            return [m for m in self._metrics if operation is None or m.operation == operation]

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """
        Aggregate the recorded metrics.

        Durations are reported in milliseconds. ``bytes_written`` adds up the
        ``size`` metadata that variant metrics carry. Empty dict when nothing
        was recorded.
        """
        metrics = self.get_metrics(operation)
        if not metrics:
            return {}

        durations_ms = [m.duration * 1000 for m in metrics]
        failed = sum(1 for m in metrics if not m.success)
        return {
            "total_operations": len(metrics),
            "failed_operations": failed,
            "success_rate": (len(metrics) - failed) / len(metrics),
            "avg_duration_ms": round(sum(durations_ms) / len(durations_ms), 1),
            "max_duration_ms": round(max(durations_ms), 1),
            "bytes_written": sum(m.metadata.get("size") or 0 for m in metrics if m.success),
        }

    def clear_metrics(self):
        with self._lock:
            self._metrics.clear()


@dataclass
class ObservabilityConfig:
    """Logging level, metrics switch and logger name for a worker."""

    log_level: LogLevel = LogLevel.INFO
    enable_metrics: bool = True
    component_name: str = "worker"


def create_logger(config: ObservabilityConfig) -> StructuredLogger:
    return StructuredLogger(config.component_name, config.log_level.value)


def create_metrics_collector(config: ObservabilityConfig) -> Optional[MetricsCollector]:
    """Create a metrics collector if enabled in config."""
    if config.enable_metrics:
        return MetricsCollector()
    return None
