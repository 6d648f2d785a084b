"""
conveyor.integrations.inventory.mock - Mock Inventory Client
==============================================================

An in-process InventoryClient backed by fixture data. It is the default
client for tests and local development.

Features:
    - **Fixture data**: add credentials, security groups, networks, subnets.
    - **Call history**: every call is recorded for test assertions.
    - **Error simulation**: make every call raise a given exception.
    - **Hold/release**: park calls until the test releases them, to line up
      concurrent cache misses deterministically.

Usage:
    >>> client = MockInventoryClient()
    >>> client.add_credential(Credential(name="prod", type="aws"))
    >>> client.add_security_group("prod", "us-east-1",
    ...     SecurityGroupSummary(name="web", id="sg-123"))
    >>> client.get_credential("prod").type
    'aws'
    >>> client.call_count("get_credential")
    1
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, Optional

import structlog

from conveyor.core.config import InventoryConfig
from conveyor.integrations.inventory.base import InventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)


logger = structlog.get_logger()


class MockInventoryClient(InventoryClient):
    """Fixture-backed InventoryClient with call tracking.

    Attributes:
        _credentials: name → Credential
        _security_groups: (account, credential_type, region) → summaries
        _networks: provider → networks
        _subnets: provider → subnets
        _call_history: one dict per call ({"method": ..., "args": ...})
        _error: raised by every call while set
        _released: calls wait on this event before answering
    """

    def __init__(self, config: Optional[InventoryConfig] = None) -> None:
        self._config = config or InventoryConfig(provider="mock")

        self._credentials: dict[str, Credential] = {}
        self._security_groups: dict[tuple[str, str, str], list[SecurityGroupSummary]] = (
            defaultdict(list)
        )
        self._networks: dict[str, list[Network]] = defaultdict(list)
        self._subnets: dict[str, list[Subnet]] = defaultdict(list)

        self._call_history: list[dict[str, Any]] = []
        self._error: Optional[BaseException] = None
        self._released = threading.Event()
        self._released.set()
        self._lock = threading.Lock()

        self._logger = logger.bind(component="mock_inventory_client")

    # =========================================================================
    # Fixture Data
    # =========================================================================

    def add_credential(self, credential: Credential) -> None:
        with self._lock:
            self._credentials[credential.name] = credential

    def add_security_group(
        self,
        account: str,
        region: str,
        summary: SecurityGroupSummary,
        credential_type: str = "aws",
    ) -> None:
        with self._lock:
            self._security_groups[(account, credential_type, region)].append(summary)

    def add_network(self, network: Network) -> None:
        with self._lock:
            self._networks[network.cloud_provider].append(network)

    def add_subnet(self, subnet: Subnet, provider: Optional[str] = None) -> None:
        with self._lock:
            self._subnets[provider or self._config.cloud_provider].append(subnet)

    def clear(self) -> None:
        """Remove all fixture data (call history is kept)."""
        with self._lock:
            self._credentials.clear()
            self._security_groups.clear()
            self._networks.clear()
            self._subnets.clear()

    # =========================================================================
    # Call Tracking
    # =========================================================================

    @property
    def call_history(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._call_history)

    def call_count(self, method: Optional[str] = None) -> int:
        """Number of calls made, optionally only to ``method``."""
        with self._lock:
            if method is None:
                return len(self._call_history)
            return sum(1 for call in self._call_history if call["method"] == method)

    def reset_history(self) -> None:
        with self._lock:
            self._call_history.clear()

    # =========================================================================
    # Failure and Timing Simulation
    # =========================================================================

    def fail_with(self, error: Optional[BaseException]) -> None:
        """Make every subsequent call raise ``error`` (None to stop failing)."""
        self._error = error

    def hold(self) -> None:
        """Park every subsequent call until release() is called."""
        self._released.clear()

    def release(self) -> None:
        self._released.set()

    def _record(self, method: str, **args: Any) -> None:
        with self._lock:
            self._call_history.append({"method": method, "args": args})
        self._logger.debug("inventory_call", method=method, **args)

        self._released.wait()
        if self._error is not None:
            raise self._error

    # =========================================================================
    # InventoryClient
    # =========================================================================

    def get_credential(self, name: str) -> Optional[Credential]:
        self._record("get_credential", name=name)
        with self._lock:
            return self._credentials.get(name)

    def get_security_group_summaries(
        self, account: str, credential_type: str, region: str
    ) -> list[SecurityGroupSummary]:
        self._record(
            "get_security_group_summaries",
            account=account,
            credential_type=credential_type,
            region=region,
        )
        with self._lock:
            return list(self._security_groups.get((account, credential_type, region), []))

    def list_networks(self) -> dict[str, list[Network]]:
        self._record("list_networks")
        with self._lock:
            return {provider: list(networks) for provider, networks in self._networks.items()}

    def list_subnets(self, provider: str) -> list[Subnet]:
        self._record("list_subnets", provider=provider)
        with self._lock:
            return list(self._subnets.get(provider, []))
