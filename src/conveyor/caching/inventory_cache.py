"""
conveyor.caching.inventory_cache - Cached Cloud Inventory Lookups
===================================================================

Resolves the cloud identifiers a deployment needs (credentials, security
groups, networks, subnets, availability zones) without hammering the slow
inventory service. Each resource kind has its own ResourceCache:

    Resource kind            Max entries   TTL    Key shape
    ----------------------   -----------   ----   --------------------
    security_group_by_id         1000      30s    account:region:id
    security_group_by_name       1000      30s    account:region:name
    network_by_id                1000      30s    id
    network_by_name              1000      30s    name:account:region
    availability_zones           1000      30s    account:vpcId:region
    credential                    100      1h     name
    subnet                       1000      30s    subnetId

Absence:
    Every accessor except availability_zones_by raises ResourceNotFound when
    the inventory has no matching resource. availability_zones_by returns an
    empty set instead: no matching subnets is a legitimate answer.

Security group lookups resolve the account credential first (through the
credential cache) because the inventory query needs the credential type.
A missing credential fails the security group lookup with ResourceNotFound.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Optional

import structlog

from conveyor.core.config import InventoryCacheConfig
from conveyor.core.enums import ResourceKind
from conveyor.core.exceptions import ResourceCacheError
from conveyor.caching.resource_cache import CacheStats, ResourceCache
from conveyor.integrations.inventory.base import InventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)


logger = structlog.get_logger()


# =============================================================================
# Abstract Interface
# =============================================================================
class InventoryCache(ABC):
    """Cached accessors for cloud inventory resources."""

    @abstractmethod
    def credential_by(self, name: str) -> Credential:
        """Credential of the named account.

        Raises:
            ResourceNotFound: If no account has this name.
        """

    @abstractmethod
    def security_group_by_id(
        self, account: str, region: str, id: str
    ) -> SecurityGroupSummary:
        """Security group with ``id`` in the account and region.

        Raises:
            ResourceNotFound: If the group or the account credential is missing.
        """

    @abstractmethod
    def security_group_by_name(
        self, account: str, region: str, name: str
    ) -> SecurityGroupSummary:
        """Security group named ``name`` in the account and region.

        Raises:
            ResourceNotFound: If the group or the account credential is missing.
        """

    @abstractmethod
    def network_by_id(self, id: str) -> Network:
        """VPC network with ``id``.

        Raises:
            ResourceNotFound: If no network has this id.
        """

    @abstractmethod
    def network_by_name(
        self, name: Optional[str], account: str, region: str
    ) -> Network:
        """VPC network named ``name`` in the account and region.

        Raises:
            ResourceNotFound: If no such network exists.
        """

    @abstractmethod
    def availability_zones_by(
        self, account: str, vpc_id: str, region: str
    ) -> frozenset[str]:
        """Availability zones of the subnets in a VPC; empty if none match."""

    @abstractmethod
    def subnet_by(self, subnet_id: str) -> Subnet:
        """Subnet with ``subnet_id``.

        Raises:
            ResourceNotFound: If no subnet has this id.
        """


# =============================================================================
# In-Memory Implementation
# =============================================================================
class MemoryInventoryCache(InventoryCache):
    """InventoryCache backed by one in-process ResourceCache per resource kind.

    Args:
        client: Inventory client used on cache misses.
        config: Cache sizing and loader timeout. Defaults reproduce the
            production values.
        cloud_provider: Provider whose networks and subnets are searched.
        clock: Monotonic time source shared by all caches (tests).

    Example:
        >>> cache = MemoryInventoryCache(MockInventoryClient())
        >>> cache.subnet_by("subnet-1")
        Traceback (most recent call last):
        ...
        conveyor.core.exceptions.ResourceNotFound: Subnet with id subnet-1 not found
    """

    def __init__(
        self,
        client: InventoryClient,
        config: Optional[InventoryCacheConfig] = None,
        cloud_provider: str = "aws",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._config = config or InventoryCacheConfig()
        self._cloud_provider = cloud_provider

        self._caches: dict[ResourceKind, ResourceCache[str, Any]] = {
            kind: self._build_cache(kind, clock) for kind in ResourceKind
        }

        self._logger = logger.bind(component="memory_inventory_cache")

    def _build_cache(
        self, kind: ResourceKind, clock: Callable[[], float]
    ) -> ResourceCache[str, Any]:
        settings = self._config.settings_for(kind)
        return ResourceCache(
            name=kind.value,
            max_entries=settings.max_entries,
            ttl_seconds=settings.ttl_seconds,
            loader_timeout_seconds=self._config.loader_timeout_seconds,
            clock=clock,
        )

    def cache_for(self, kind: ResourceKind) -> ResourceCache[str, Any]:
        """The underlying cache of one resource kind."""
        return self._caches[kind]

    # =========================================================================
    # Credentials
    # =========================================================================

    def credential_by(self, name: str) -> Credential:
        return self._caches[ResourceKind.CREDENTIAL].get_or_not_found(
            name,
            f"Credentials with name {name} not found",
            lambda: self._client.get_credential(name),
        )

    # =========================================================================
    # Security Groups
    # =========================================================================

    def security_group_by_id(
        self, account: str, region: str, id: str
    ) -> SecurityGroupSummary:
        return self._caches[ResourceKind.SECURITY_GROUP_BY_ID].get_or_not_found(
            f"{account}:{region}:{id}",
            f"Security group with id {id} not found in the {account} account "
            f"and {region} region",
            lambda: self._find_security_group(
                account, region, lambda group: group.id == id
            ),
        )

    def security_group_by_name(
        self, account: str, region: str, name: str
    ) -> SecurityGroupSummary:
        return self._caches[ResourceKind.SECURITY_GROUP_BY_NAME].get_or_not_found(
            f"{account}:{region}:{name}",
            f"Security group with name {name} not found in the {account} account "
            f"and {region} region",
            lambda: self._find_security_group(
                account, region, lambda group: group.name == name
            ),
        )

    def _find_security_group(
        self,
        account: str,
        region: str,
        predicate: Callable[[SecurityGroupSummary], bool],
    ) -> Optional[SecurityGroupSummary]:
        credential = self.credential_by(account)
        summaries = self._client.get_security_group_summaries(
            account, credential.type, region
        )
        return next((group for group in summaries if predicate(group)), None)

    # =========================================================================
    # Networks
    # =========================================================================

    def network_by_id(self, id: str) -> Network:
        return self._caches[ResourceKind.NETWORK_BY_ID].get_or_not_found(
            id,
            f"VPC network with id {id} not found",
            lambda: self._find_network(lambda network: network.id == id),
        )

    def network_by_name(
        self, name: Optional[str], account: str, region: str
    ) -> Network:
        return self._caches[ResourceKind.NETWORK_BY_NAME].get_or_not_found(
            f"{name}:{account}:{region}",
            f"VPC network named {name} not found in {region}",
            lambda: self._find_network(
                lambda network: (
                    network.name == name
                    and network.account == account
                    and network.region == region
                )
            ),
        )

    def _find_network(
        self, predicate: Callable[[Network], bool]
    ) -> Optional[Network]:
        networks = self._client.list_networks().get(self._cloud_provider) or []
        return next((network for network in networks if predicate(network)), None)

    # =========================================================================
    # Subnets and Availability Zones
    # =========================================================================

    def availability_zones_by(
        self, account: str, vpc_id: str, region: str
    ) -> frozenset[str]:
        key = f"{account}:{vpc_id}:{region}"
        zones = self._caches[ResourceKind.AVAILABILITY_ZONES].get(
            key, lambda: self._zones_of(account, vpc_id, region)
        )
        if zones is None:
            # _zones_of always produces a set, so None means the cache itself
            # misbehaved.
            raise ResourceCacheError(
                message=f"Availability zone lookup for {key} produced no value",
                error_code="CACHE_INVARIANT_VIOLATION",
                details={"cache": ResourceKind.AVAILABILITY_ZONES.value, "key": key},
            )
        return zones

    def _zones_of(self, account: str, vpc_id: str, region: str) -> frozenset[str]:
        subnets = self._client.list_subnets(self._cloud_provider) or []
        return frozenset(
            subnet.availability_zone
            for subnet in subnets
            if subnet.account == account
            and subnet.vpc_id == vpc_id
            and subnet.region == region
        )

    def subnet_by(self, subnet_id: str) -> Subnet:
        return self._caches[ResourceKind.SUBNET].get_or_not_found(
            subnet_id,
            f"Subnet with id {subnet_id} not found",
            lambda: next(
                (
                    subnet
                    for subnet in self._client.list_subnets(self._cloud_provider) or []
                    if subnet.id == subnet_id
                ),
                None,
            ),
        )

    # =========================================================================
    # Administration
    # =========================================================================

    def stats(self) -> dict[str, CacheStats]:
        """Statistics of every resource cache, keyed by cache name."""
        return {kind.value: cache.stats for kind, cache in self._caches.items()}

    def invalidate_all(self) -> None:
        for cache in self._caches.values():
            cache.invalidate_all()
        self._logger.info("inventory_cache_invalidated")

    def close(self) -> None:
        for cache in self._caches.values():
            cache.close()
