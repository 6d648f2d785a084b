"""
Tests for conveyor.core.models
================================

Identity semantics of DeliveryArtifact, DeliveryConfig and PromotionKey:
they are used as dict keys, so value equality and hashing matter.
"""

import pytest
from pydantic import ValidationError

from conveyor.core.enums import ArtifactType
from conveyor.core.models import DeliveryArtifact, DeliveryConfig, PromotionKey


class TestDeliveryArtifact:
    """Tests for the DeliveryArtifact identity."""

    def test_reference_defaults_to_name(self) -> None:
        artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        assert artifact.reference == "api"

    def test_explicit_reference_is_kept(self) -> None:
        artifact = DeliveryArtifact(name="api", type="docker", reference="org/api")
        assert artifact.type is ArtifactType.DOCKER
        assert artifact.reference == "org/api"

    def test_value_equality_and_hash(self) -> None:
        a = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        b = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        assert a == b
        assert hash(a) == hash(b)
        assert {a: 1}[b] == 1

    def test_reference_distinguishes_identity(self) -> None:
        a = DeliveryArtifact(name="api", type=ArtifactType.DEB, reference="one")
        b = DeliveryArtifact(name="api", type=ArtifactType.DEB, reference="two")
        assert a != b

    def test_is_immutable(self) -> None:
        artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        with pytest.raises(ValidationError):
            artifact.name = "other"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DeliveryArtifact(name="api", type="rpm")

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DeliveryArtifact(name="", type=ArtifactType.DEB)


class TestPromotionKey:
    """Tests for the composite promotion key."""

    def test_keys_with_same_parts_are_equal(self) -> None:
        artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        config = DeliveryConfig(name="api-manifest", application="api")

        first = PromotionKey(artifact=artifact, delivery_config=config, environment="staging")
        second = PromotionKey(artifact=artifact, delivery_config=config, environment="staging")

        assert first == second
        assert hash(first) == hash(second)

    def test_environment_is_part_of_identity(self) -> None:
        artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        config = DeliveryConfig(name="api-manifest", application="api")

        staging = PromotionKey(artifact=artifact, delivery_config=config, environment="staging")
        prod = PromotionKey(artifact=artifact, delivery_config=config, environment="production")

        assert staging != prod
