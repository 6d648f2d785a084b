"""
Tests for conveyor.integrations.inventory
===========================================

MockInventoryClient fixture data, call tracking, failure and hold/release
simulation, plus the inventory client factory.
"""

from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from conveyor.core.config import InventoryConfig
from conveyor.core.exceptions import ConfigurationError
from conveyor.integrations.inventory.base import InventoryClient
from conveyor.integrations.inventory.factory import create_inventory_client
from conveyor.integrations.inventory.mock import MockInventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    Network,
    SecurityGroupSummary,
    Subnet,
)


# =============================================================================
# Fixture Data
# =============================================================================
class TestMockInventoryData:
    def test_credential_lookup(self, inventory_client) -> None:
        assert inventory_client.get_credential("prod").account_id == "111111111111"
        assert inventory_client.get_credential("missing") is None

    def test_security_groups_keyed_by_credential_type(self) -> None:
        client = MockInventoryClient()
        client.add_security_group(
            "prod", "us-east-1", SecurityGroupSummary(name="web", id="sg-1"), credential_type="aws"
        )
        client.add_security_group(
            "prod", "us-east-1", SecurityGroupSummary(name="web", id="sg-2"), credential_type="titus"
        )

        aws = client.get_security_group_summaries("prod", "aws", "us-east-1")
        assert [group.id for group in aws] == ["sg-1"]
        assert client.get_security_group_summaries("prod", "aws", "eu-west-1") == []

    def test_networks_grouped_by_provider(self) -> None:
        client = MockInventoryClient()
        client.add_network(Network(id="vpc-1", account="prod", region="us-east-1"))
        client.add_network(
            Network(cloud_provider="titus", id="vpc-t", account="prod", region="us-east-1")
        )

        networks = client.list_networks()
        assert set(networks) == {"aws", "titus"}
        assert networks["aws"][0].id == "vpc-1"

    def test_subnets_default_to_configured_provider(self) -> None:
        client = MockInventoryClient(InventoryConfig(provider="mock", cloud_provider="titus"))
        client.add_subnet(
            Subnet(
                id="subnet-1",
                vpc_id="vpc-1",
                account="prod",
                region="us-east-1",
                availability_zone="us-east-1a",
            )
        )
        assert client.list_subnets("aws") == []
        assert [subnet.id for subnet in client.list_subnets("titus")] == ["subnet-1"]

    def test_listings_are_copies(self, inventory_client) -> None:
        inventory_client.list_subnets("aws").clear()
        assert len(inventory_client.list_subnets("aws")) == 3

    def test_clear(self, inventory_client) -> None:
        inventory_client.clear()
        assert inventory_client.get_credential("prod") is None
        assert inventory_client.list_networks() == {}


# =============================================================================
# Call Tracking
# =============================================================================
class TestMockInventoryCallTracking:
    def test_calls_are_recorded(self, inventory_client) -> None:
        inventory_client.get_credential("prod")
        inventory_client.list_subnets("aws")

        assert inventory_client.call_count() == 2
        assert inventory_client.call_count("get_credential") == 1
        assert inventory_client.call_history[0] == {
            "method": "get_credential",
            "args": {"name": "prod"},
        }

    def test_reset_history(self, inventory_client) -> None:
        inventory_client.list_networks()
        inventory_client.reset_history()
        assert inventory_client.call_count() == 0


# =============================================================================
# Failure and Timing Simulation
# =============================================================================
class TestMockInventorySimulation:
    def test_fail_with(self, inventory_client) -> None:
        inventory_client.fail_with(ConnectionError("unreachable"))
        with pytest.raises(ConnectionError, match="unreachable"):
            inventory_client.list_networks()

        inventory_client.fail_with(None)
        assert "aws" in inventory_client.list_networks()

    def test_hold_parks_calls_until_release(self, inventory_client) -> None:
        inventory_client.hold()
        answered = threading.Event()

        def call():
            inventory_client.get_credential("prod")
            answered.set()

        worker = threading.Thread(target=call)
        worker.start()
        assert not answered.wait(timeout=0.1)

        inventory_client.release()
        worker.join(timeout=5)
        assert answered.is_set()


# =============================================================================
# Factory
# =============================================================================
class TestCreateInventoryClient:
    def test_mock_provider(self) -> None:
        client = create_inventory_client(InventoryConfig(provider="mock"))
        assert isinstance(client, MockInventoryClient)
        assert isinstance(client, InventoryClient)

    def test_provider_name_is_case_insensitive(self) -> None:
        assert isinstance(create_inventory_client(InventoryConfig(provider="MOCK")), MockInventoryClient)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown inventory provider"):
            create_inventory_client(InventoryConfig(provider="clouddriver"))

    def test_credential_model_is_frozen(self) -> None:
        credential = Credential(name="prod", type="aws")
        with pytest.raises(ValidationError):
            credential.type = "titus"
