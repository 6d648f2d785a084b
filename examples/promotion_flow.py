"""
Promotion Flow Example: Track an Artifact Through Environments
================================================================

This example walks one debian package through discovery, approval and
deployment, then resolves the cloud resources a deployment would need
through the cached inventory.

Usage:
    python examples/promotion_flow.py
"""

from __future__ import annotations

from conveyor.core.config import ConveyorConfig
from conveyor.core.enums import ArtifactType
from conveyor.core.exceptions import ResourceNotFound
from conveyor.core.models import DeliveryArtifact, DeliveryConfig
from conveyor.facade import Conveyor
from conveyor.integrations.inventory.mock import MockInventoryClient
from conveyor.integrations.inventory.models import (
    Credential,
    SecurityGroupSummary,
    Subnet,
)


def build_inventory() -> MockInventoryClient:
    """A mock inventory with one account, one security group and two subnets."""
    client = MockInventoryClient()
    client.add_credential(Credential(name="prod", type="aws"))
    client.add_security_group(
        "prod", "us-east-1", SecurityGroupSummary(name="web", id="sg-123", vpc_id="vpc-1")
    )
    for subnet_id, zone in (("subnet-a", "us-east-1a"), ("subnet-b", "us-east-1b")):
        client.add_subnet(
            Subnet(
                id=subnet_id,
                vpc_id="vpc-1",
                account="prod",
                region="us-east-1",
                availability_zone=zone,
            )
        )
    return client


def main() -> None:
    artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
    manifest = DeliveryConfig(name="api-manifest", application="api")
    client = build_inventory()

    with Conveyor(ConveyorConfig(), inventory_client=client) as conveyor:
        repo = conveyor.artifact_repository

        # Discovery
        repo.register(artifact)
        for version in ("1.0.0", "1.0.1"):
            repo.store(artifact, version)

        # Promotion
        repo.approve_version_for(manifest, artifact, "1.0.1", "staging")
        approved = repo.latest_version_approved_in(manifest, artifact, "staging")
        repo.mark_as_successfully_deployed_to(manifest, artifact, approved, "staging")

        print("Promotion State")
        print("-" * 40)
        print(f"Versions : {', '.join(repo.versions(artifact))}")
        print(f"Approved : {approved} (staging)")
        print(
            "Deployed : "
            f"{repo.was_successfully_deployed_to(manifest, artifact, approved, 'staging')}"
        )
        print()

        # Inventory lookups (the second one is served from cache)
        cache = conveyor.inventory_cache
        group = cache.security_group_by_id("prod", "us-east-1", "sg-123")
        cache.security_group_by_id("prod", "us-east-1", "sg-123")
        zones = cache.availability_zones_by("prod", "vpc-1", "us-east-1")

        print("Inventory")
        print("-" * 40)
        print(f"Security group : {group.name} ({group.id})")
        print(f"Zones          : {', '.join(sorted(zones))}")
        print(f"Inventory calls: {client.call_count()}")

        try:
            cache.subnet_by("subnet-z")
        except ResourceNotFound as exc:
            print(f"Lookup failed  : {exc.message}")


if __name__ == "__main__":
    main()
