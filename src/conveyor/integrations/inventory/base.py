"""
conveyor.integrations.inventory.base - Abstract Inventory Client
=================================================================

The contract between the cache layer and the remote cloud-inventory service.

Architecture Context:

    ┌──────────────────────┐   cache miss   ┌─────────────────────┐
    │ MemoryInventoryCache │ ─────────────→ │   InventoryClient    │
    │                      │ ←───────────── │   (abstract)         │
    └──────────────────────┘   resources    └──────────┬──────────┘
                                                       │
                                            ┌──────────┴──────────┐
                                       ┌────▼─────┐      ┌────────▼───────┐
                                       │   Mock   │      │  HTTP client   │
                                       │  client  │      │ (outer service)│
                                       └──────────┘      └────────────────┘

All calls are blocking: the calling thread waits for the service to answer.
Errors raised by an implementation (connection failures, 5xx responses) are
propagated unchanged through the cache to the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)


class InventoryClient(ABC):
    """Abstract blocking client for the cloud-inventory service."""

    @abstractmethod
    def get_credential(self, name: str) -> Optional[Credential]:
        """Look up an account credential by name.

        Returns:
            The Credential, or None if no account has this name.
        """

    @abstractmethod
    def get_security_group_summaries(
        self, account: str, credential_type: str, region: str
    ) -> list[SecurityGroupSummary]:
        """List security groups of an account in a region."""

    @abstractmethod
    def list_networks(self) -> dict[str, list[Network]]:
        """List all networks, grouped by cloud provider name."""

    @abstractmethod
    def list_subnets(self, provider: str) -> list[Subnet]:
        """List all subnets of a cloud provider."""
