"""
conveyor.core.config - Configuration Management
=================================================

Configuration can be loaded from multiple sources with the following priority
(highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with CONVEYOR_)
    3. YAML configuration file (conveyor.yaml)
    4. Default values defined in the models below

Architecture Context:
    ConveyorConfig is created once at startup and handed to the facade:

        ConveyorConfig
            ├── RepositoryConfig      → create_artifact_repository()
            ├── InventoryConfig       → create_inventory_client()
            └── InventoryCacheConfig  → MemoryInventoryCache

Cache sizing:
    Capacity and time-to-live are fixed per resource kind. The defaults below
    are the production values and other deployments of the cache layer rely
    on them being identical:

        security_group_by_id / by_name    1000 entries   30s
        network_by_id / by_name           1000 entries   30s
        availability_zones                1000 entries   30s
        credential                         100 entries    1h
        subnet                            1000 entries   30s

Environment Variables:
    CONVEYOR_LOG_LEVEL=DEBUG
    CONVEYOR_REPOSITORY__BACKEND=sqlite
    CONVEYOR_REPOSITORY__SQLITE_PATH=/var/lib/conveyor/artifacts.db
    CONVEYOR_CACHE__LOADER_TIMEOUT_SECONDS=10
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from conveyor.core.enums import ResourceKind
from conveyor.core.exceptions import ConfigurationError


# =============================================================================
# Per-Cache Settings
# =============================================================================
class CacheSettings(BaseModel):
    """Capacity and expiry of a single resource cache.

    Attributes:
        max_entries: Entries beyond this bound are evicted.
        ttl_seconds: Entries expire this long after they were written.
    """

    max_entries: int = Field(ge=1, description="Maximum number of cached entries")
    ttl_seconds: float = Field(gt=0, description="Time-to-live measured from write")


def _short_lived() -> CacheSettings:
    return CacheSettings(max_entries=1000, ttl_seconds=30)


# =============================================================================
# Inventory Cache Configuration
# =============================================================================
class InventoryCacheConfig(BaseModel):
    """Sizing for every resource cache plus the shared loader timeout.

    Attributes:
        loader_timeout_seconds: Upper bound on a single inventory call made
            on a cache miss. None disables the timeout and waits forever.
    """

    security_group_by_id: CacheSettings = Field(default_factory=_short_lived)
    security_group_by_name: CacheSettings = Field(default_factory=_short_lived)
    network_by_id: CacheSettings = Field(default_factory=_short_lived)
    network_by_name: CacheSettings = Field(default_factory=_short_lived)
    availability_zones: CacheSettings = Field(default_factory=_short_lived)
    credential: CacheSettings = Field(
        default_factory=lambda: CacheSettings(max_entries=100, ttl_seconds=3600),
    )
    subnet: CacheSettings = Field(default_factory=_short_lived)

    loader_timeout_seconds: Optional[float] = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single loader call (None = no timeout)",
    )

    def settings_for(self, kind: ResourceKind) -> CacheSettings:
        """Look up the settings of one resource kind."""
        return getattr(self, kind.value)


# =============================================================================
# Repository Configuration
# =============================================================================
class RepositoryConfig(BaseModel):
    """Selects the artifact repository backend.

    Attributes:
        backend: "memory" for the in-process reference implementation,
            "sqlite" for the durable backend.
        sqlite_path: Database file for the sqlite backend. ":memory:" keeps
            the database in process memory (useful for tests).
    """

    backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Artifact repository backend: 'memory' or 'sqlite'",
    )
    sqlite_path: str = Field(
        default=":memory:",
        description="Path of the sqlite database file",
    )


# =============================================================================
# Inventory Client Configuration
# =============================================================================
class InventoryConfig(BaseModel):
    """Selects the inventory client and the cloud provider to query.

    Attributes:
        provider: Inventory client implementation. Only "mock" ships with
            the core; real clients live in the surrounding service.
        cloud_provider: Provider name used to pick networks and subnets
            out of inventory listings.
    """

    provider: str = Field(default="mock", description="Inventory client name")
    cloud_provider: str = Field(default="aws", description="Cloud provider to query")


# =============================================================================
# Main Configuration
# =============================================================================
class ConveyorConfig(BaseSettings):
    """Top-level configuration for Conveyor.

    Attributes:
        environment: Deployment environment of the service itself.
        log_level: Python logging level.
        log_format: "console" for human-readable logs, "json" for log shipping.
        repository: Artifact repository backend selection.
        inventory: Inventory client selection.
        cache: Resource cache sizing.

    Example:
        >>> config = ConveyorConfig(
        ...     log_level="DEBUG",
        ...     repository=RepositoryConfig(backend="sqlite"),
        ... )
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer: 'console' or 'json'",
    )

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    inventory: InventoryConfig = Field(default_factory=InventoryConfig)
    cache: InventoryCacheConfig = Field(default_factory=InventoryCacheConfig)

    model_config = {
        "env_prefix": "CONVEYOR_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> ConveyorConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'conveyor.yaml' in the current directory and falls back to
            defaults plus environment variables.

    Returns:
        A fully validated ConveyorConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigurationError: If the file is not valid YAML.
    """
    if path is None:
        default_path = Path("conveyor.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file: {path}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": path, "error": str(exc)},
                ) from exc
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    return ConveyorConfig(**yaml_data)


def get_default_config() -> ConveyorConfig:
    """Create a ConveyorConfig with all defaults (plus any set env vars)."""
    return ConveyorConfig()
