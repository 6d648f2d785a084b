"""
conveyor.facade - Conveyor Top-Level Facade
=============================================

The single entry point that builds the promotion state core from one
configuration object and owns its lifecycle.

Architecture Context:

    ┌──────────────────────────────────────────────────┐
    │                Conveyor (Facade)                  │
    │                                                   │
    │  ┌─────────────────────┐  ┌────────────────────┐ │
    │  │ ArtifactRepository  │  │ MemoryInventoryCache│ │
    │  │ (memory | sqlite)   │  │ (7 ResourceCaches)  │ │
    │  └─────────────────────┘  └─────────┬──────────┘ │
    │                                     │ on miss     │
    │                           ┌─────────▼──────────┐ │
    │                           │  InventoryClient    │ │
    │                           └────────────────────┘ │
    └──────────────────────────────────────────────────┘

Usage:
    >>> with Conveyor(ConveyorConfig()) as conveyor:
    ...     conveyor.artifact_repository.register(artifact)
    ...     zones = conveyor.inventory_cache.availability_zones_by(
    ...         "prod", "vpc-1", "us-east-1")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Optional

import structlog

from conveyor.caching.inventory_cache import MemoryInventoryCache
from conveyor.core.config import ConveyorConfig
from conveyor.core.exceptions import ConveyorError
from conveyor.core.logging_config import configure_logging
from conveyor.infrastructure.artifact_repository import ArtifactRepository
from conveyor.infrastructure.factory import create_artifact_repository
from conveyor.integrations.inventory.base import InventoryClient
from conveyor.integrations.inventory.factory import create_inventory_client


logger = structlog.get_logger()


class Conveyor:
    """Builds and owns the artifact repository and the inventory cache.

    Lifecycle:
        1. ``Conveyor(config)``: instantiate (nothing is opened yet)
        2. ``start()``: configure logging, open the repository, build caches
        3. use ``artifact_repository`` and ``inventory_cache``
        4. ``shutdown()``: close the repository and drop cached inventory

    Args:
        config: Conveyor configuration. Defaults to ConveyorConfig().
        inventory_client: Client used on cache misses. When omitted, one is
            created from ``config.inventory`` (only the mock ships here).
        repository: Pre-built repository, overriding ``config.repository``.
        configure_logs: Whether start() should configure structlog.
        clock: Monotonic time source for cache expiry.
    """

    def __init__(
        self,
        config: Optional[ConveyorConfig] = None,
        *,
        inventory_client: Optional[InventoryClient] = None,
        repository: Optional[ArtifactRepository] = None,
        configure_logs: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or ConveyorConfig()
        self._inventory_client = inventory_client
        self._repository = repository
        self._inventory_cache: Optional[MemoryInventoryCache] = None
        self._configure_logs = configure_logs
        self._clock = clock
        self._owns_repository = repository is None
        self._started = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Create every component. Calling start() twice is a no-op."""
        if self._started:
            return

        if self._configure_logs:
            configure_logging(self._config.log_level, self._config.log_format)

        if self._repository is None:
            self._repository = create_artifact_repository(self._config.repository)
        if self._inventory_client is None:
            self._inventory_client = create_inventory_client(self._config.inventory)

        self._inventory_cache = MemoryInventoryCache(
            self._inventory_client,
            config=self._config.cache,
            cloud_provider=self._config.inventory.cloud_provider,
            clock=self._clock,
        )

        self._started = True
        logger.info(
            "conveyor_started",
            environment=self._config.environment,
            repository_backend=type(self._repository).__name__,
            inventory_client=type(self._inventory_client).__name__,
        )

    def shutdown(self) -> None:
        """Close the owned repository and drop cached inventory."""
        if not self._started:
            return

        if self._inventory_cache is not None:
            self._inventory_cache.close()
        # A repository handed in by the caller stays open.
        if self._owns_repository and self._repository is not None:
            self._repository.close()
            self._repository = None
        self._inventory_cache = None

        self._started = False
        logger.info("conveyor_shutdown")

    def __enter__(self) -> Conveyor:
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()

    # =========================================================================
    # Components
    # =========================================================================

    @property
    def config(self) -> ConveyorConfig:
        return self._config

    @property
    def artifact_repository(self) -> ArtifactRepository:
        if not self._started or self._repository is None:
            raise self._not_started("artifact_repository")
        return self._repository

    @property
    def inventory_cache(self) -> MemoryInventoryCache:
        if not self._started or self._inventory_cache is None:
            raise self._not_started("inventory_cache")
        return self._inventory_cache

    @property
    def inventory_client(self) -> InventoryClient:
        if not self._started or self._inventory_client is None:
            raise self._not_started("inventory_client")
        return self._inventory_client

    def _not_started(self, component: str) -> ConveyorError:
        return ConveyorError(
            message="Conveyor is not started; call start() first",
            error_code="NOT_STARTED",
            details={"component": component},
        )
