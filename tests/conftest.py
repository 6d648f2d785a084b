"""
Shared Test Fixtures for Conveyor
===================================

Fixtures are organized by layer:

    1. Configuration fixtures
    2. Domain identities (artifacts, delivery configs)
    3. Infrastructure fixtures (both ArtifactRepository backends)
    4. Integration fixtures (MockInventoryClient with fixture data)
    5. Caching fixtures (FakeClock, MemoryInventoryCache)
"""

from __future__ import annotations

import pytest

from conveyor.caching.inventory_cache import MemoryInventoryCache
from conveyor.core.config import ConveyorConfig, InventoryCacheConfig
from conveyor.core.enums import ArtifactType
from conveyor.core.models import DeliveryArtifact, DeliveryConfig
from conveyor.infrastructure.artifact_repository import InMemoryArtifactRepository
from conveyor.infrastructure.sqlite_artifact_repository import SqliteArtifactRepository
from conveyor.integrations.inventory.mock import MockInventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)


# =============================================================================
# Helpers
# =============================================================================
class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config():
    """Conveyor configuration with defaults."""
    return ConveyorConfig()


# =============================================================================
# Domain Identities
# =============================================================================

@pytest.fixture
def api_artifact():
    """The "api" debian package."""
    return DeliveryArtifact(name="api", type=ArtifactType.DEB)


@pytest.fixture
def delivery_config():
    """Delivery config of the "api" application."""
    return DeliveryConfig(name="api-manifest", application="api")


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture(params=["memory", "sqlite"])
def repository(request):
    """Each ArtifactRepository backend in turn, fresh and empty."""
    if request.param == "memory":
        repo = InMemoryArtifactRepository()
    else:
        repo = SqliteArtifactRepository(":memory:")
    yield repo
    repo.close()


# =============================================================================
# Integrations
# =============================================================================

@pytest.fixture
def inventory_client():
    """MockInventoryClient preloaded with one account's worth of resources."""
    client = MockInventoryClient()
    client.add_credential(Credential(name="prod", type="aws", account_id="111111111111"))
    client.add_security_group(
        "prod", "us-east-1", SecurityGroupSummary(name="web", id="sg-123", vpc_id="vpc-1")
    )
    client.add_security_group(
        "prod", "us-east-1", SecurityGroupSummary(name="db", id="sg-456", vpc_id="vpc-1")
    )
    client.add_network(
        Network(id="vpc-1", name="vpc0", account="prod", region="us-east-1")
    )
    client.add_network(
        Network(id="vpc-2", name="vpc0", account="prod", region="us-west-2")
    )
    client.add_subnet(
        Subnet(
            id="subnet-a",
            vpc_id="vpc-1",
            account="prod",
            region="us-east-1",
            availability_zone="us-east-1a",
        )
    )
    client.add_subnet(
        Subnet(
            id="subnet-b",
            vpc_id="vpc-1",
            account="prod",
            region="us-east-1",
            availability_zone="us-east-1b",
        )
    )
    client.add_subnet(
        Subnet(
            id="subnet-c",
            vpc_id="vpc-1",
            account="prod",
            region="us-east-1",
            availability_zone="us-east-1a",
        )
    )
    return client


# =============================================================================
# Caching
# =============================================================================

@pytest.fixture
def clock():
    """A FakeClock shared by every cache built in the test."""
    return FakeClock()


@pytest.fixture
def inventory_cache(inventory_client, clock):
    """MemoryInventoryCache over the mock client, driven by the fake clock."""
    cache = MemoryInventoryCache(
        inventory_client,
        config=InventoryCacheConfig(loader_timeout_seconds=None),
        clock=clock,
    )
    yield cache
    cache.close()
