"""
conveyor.integrations.inventory.factory - Inventory Client Factory
===================================================================

Usage:
    >>> from conveyor.core.config import InventoryConfig
    >>> client = create_inventory_client(InventoryConfig(provider="mock"))
    >>> type(client)  # MockInventoryClient
"""

from __future__ import annotations

from conveyor.core.config import InventoryConfig
from conveyor.core.exceptions import ConfigurationError
from conveyor.integrations.inventory.base import InventoryClient


def create_inventory_client(config: InventoryConfig) -> InventoryClient:
    """Create an inventory client based on configuration.

        - "mock" → MockInventoryClient (fixture data, no network)

    Network-backed clients belong to the surrounding service, which passes
    its own InventoryClient to the facade instead of using this factory.

    Raises:
        ConfigurationError: If the provider name is not recognized.
    """
    provider_name = config.provider.lower()

    if provider_name == "mock":
        from conveyor.integrations.inventory.mock import MockInventoryClient
        return MockInventoryClient(config)

    raise ConfigurationError(
        message=(
            f"Unknown inventory provider: '{provider_name}'. "
            f"Available providers: 'mock'. Pass an InventoryClient "
            f"instance to Conveyor for any other provider."
        ),
        details={"provider": provider_name},
    )
