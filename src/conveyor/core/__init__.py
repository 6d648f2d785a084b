"""
conveyor.core - Foundation Layer
==================================

The building blocks every other Conveyor package depends on:

    - config:          Configuration management (ConveyorConfig and sections)
    - enums:           ArtifactType, ResourceKind
    - models:          DeliveryArtifact, DeliveryConfig, PromotionKey
    - exceptions:      Structured exception hierarchy
    - logging_config:  structlog setup

Dependency Rule:
    core/ depends on NOTHING else in the conveyor package.
"""

from conveyor.core.config import (
    CacheSettings,
    ConveyorConfig,
    InventoryCacheConfig,
    InventoryConfig,
    RepositoryConfig,
)
from conveyor.core.enums import ArtifactType, ResourceKind
from conveyor.core.exceptions import (
    ArtifactAlreadyRegistered,
    ConfigurationError,
    ConveyorError,
    NoSuchArtifact,
    RepositoryError,
    ResourceCacheError,
    ResourceLoadTimeout,
    ResourceNotFound,
)
from conveyor.core.models import DeliveryArtifact, DeliveryConfig, PromotionKey

__all__ = [
    # Config
    "ConveyorConfig",
    "RepositoryConfig",
    "InventoryConfig",
    "InventoryCacheConfig",
    "CacheSettings",
    # Enums
    "ArtifactType",
    "ResourceKind",
    # Models
    "DeliveryArtifact",
    "DeliveryConfig",
    "PromotionKey",
    # Exceptions
    "ConveyorError",
    "ConfigurationError",
    "RepositoryError",
    "ArtifactAlreadyRegistered",
    "NoSuchArtifact",
    "ResourceCacheError",
    "ResourceNotFound",
    "ResourceLoadTimeout",
]
