"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3
from botocore.config import Config

from .models import VariantConfig
from .observability import (
    LogLevel,
    MetricsCollector,
    ObservabilityConfig,
    create_logger,
    create_metrics_collector,
)
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import ConversionWorker


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(max_pool_connections: int = 10, **kwargs: Any) -> S3ClientProtocol:
        """Create an S3 client whose connection pool fits the variant thread pool."""
        session = boto3.Session()
        client_config = Config(max_pool_connections=max_pool_connections)
        return session.client("s3", config=client_config, **kwargs)  # type: ignore


class WorkerFactory:
    """Factory for creating a fully wired conversion worker."""

    @staticmethod
    def create_worker(
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[VariantConfig] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> ConversionWorker:
        """Create a conversion worker, filling in defaults for missing dependencies."""
        if config is None:
            config = VariantConfig.from_env()

        observability = ObservabilityConfig(
            log_level=LogLevel.DEBUG if config.debug else LogLevel.INFO,
            component_name="worker",
        )

        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(
                max_pool_connections=max(10, config.max_workers * 2)
            )

        if logger is None:
            logger = create_logger(observability)

        if metrics_collector is None:
            metrics_collector = create_metrics_collector(observability)

        return ConversionWorker(
            s3_client=s3_client,
            config=config,
            logger=logger,
            metrics_collector=metrics_collector,
        )
