"""
conveyor.integrations.inventory - Cloud Inventory Clients
===========================================================

    - InventoryClient:      Abstract blocking interface to the inventory service
    - MockInventoryClient:  Fixture-backed client for tests and development
    - Credential, Network, Subnet, SecurityGroupSummary: resource value types
"""

from conveyor.integrations.inventory.base import InventoryClient
from conveyor.integrations.inventory.factory import create_inventory_client
from conveyor.integrations.inventory.mock import MockInventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)

__all__ = [
    "InventoryClient",
    "MockInventoryClient",
    "create_inventory_client",
    "Credential",
    "Network",
    "SecurityGroupSummary",
    "Subnet",
]
