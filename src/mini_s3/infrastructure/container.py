"""Dependency injection container for mini-s3."""

from __future__ import annotations

from dataclasses import dataclass

from opentelemetry import trace
from structlog.typing import FilteringBoundLogger

from mini_s3 import __version__
from mini_s3.adapters.outbound.local_storage import LocalStorage
from mini_s3.domain.services.checksum_service import ChecksumService
from mini_s3.infrastructure.config import Config, get_config
from mini_s3.infrastructure.logging import setup_logging
from mini_s3.infrastructure.metrics import StorageMetrics, get_metrics
from mini_s3.infrastructure.tracing import setup_tracing
from mini_s3.ports.inbound import StoragePort


@dataclass
class Container:
    """Dependency injection container for storage components.

    Built once by the entry point and handed to whatever needs the store;
    there is no process-wide storage handle.
    """

    config: Config
    logger: FilteringBoundLogger
    tracer: trace.Tracer
    metrics: StorageMetrics
    checksum: ChecksumService
    storage: StoragePort

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        metrics: StorageMetrics | None = None,
    ) -> "Container":
        """Create and initialize a container with all dependencies.

        Args:
            config: Resolved configuration (default: environment-derived).
            metrics: Metrics collector (default: process-wide instance).

        Returns:
            Wired container.
        """
        config = config or get_config()
        logger = setup_logging(config)
        tracer = setup_tracing(config)
        metrics = metrics or get_metrics()
        metrics.system_info.info(
            {
                "version": __version__,
                "checksum_algorithm": config.storage.checksum_algorithm,
            }
        )

        checksum = ChecksumService(
            algorithm=config.storage.checksum_algorithm,
            read_size=config.storage.chunk_size,
        )
        storage = LocalStorage(
            root=config.storage.data_dir,
            checksum=checksum,
            chunk_size=config.storage.chunk_size,
            pipe_depth=config.storage.pipe_depth,
            sync_writes=config.storage.sync_writes,
            dir_mode=config.storage.dir_mode,
            metrics=metrics,
            tracer=tracer,
        )

        container = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            checksum=checksum,
            storage=storage,
        )

        logger.debug(
            "mini_s3_container_initialized",
            environment=config.observability.environment,
            data_dir=config.storage.data_dir,
            checksum_algorithm=config.storage.checksum_algorithm,
        )

        return container
