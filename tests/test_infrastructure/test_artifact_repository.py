"""
Tests for conveyor.infrastructure.artifact_repository
=======================================================

Contract tests for the ArtifactRepository operation set. The ``repository``
fixture (conftest.py) is parametrized, so every test here runs against both
InMemoryArtifactRepository and SqliteArtifactRepository.

What's Being Tested:
    - Registration (exactly once, name/type lookup)
    - Version discovery (most recent first, idempotent store)
    - Approvals (last write wins, per-environment isolation)
    - Deployment records (membership, append semantics)
    - drop_all and concurrent registration
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from conveyor.core.enums import ArtifactType
from conveyor.core.exceptions import ArtifactAlreadyRegistered, NoSuchArtifact
from conveyor.core.models import DeliveryArtifact, DeliveryConfig
from conveyor.infrastructure.artifact_repository import (
    ArtifactRepository,
    InMemoryArtifactRepository,
)


# =============================================================================
# Tests: Registration
# =============================================================================
class TestRegistration:
    """Tests for register and is_registered."""

    def test_is_an_artifact_repository(self, repository) -> None:
        assert isinstance(repository, ArtifactRepository)

    def test_registered_artifact_has_no_versions(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        assert repository.versions(api_artifact) == []

    def test_registering_twice_fails(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        repository.store(api_artifact, "1.0.0")

        with pytest.raises(ArtifactAlreadyRegistered) as exc_info:
            repository.register(DeliveryArtifact(name="api", type=ArtifactType.DEB))

        assert exc_info.value.artifact == api_artifact
        # The first registration is untouched
        assert repository.versions(api_artifact) == ["1.0.0"]

    def test_is_registered_matches_name_and_type(self, repository) -> None:
        repository.register(
            DeliveryArtifact(name="api", type=ArtifactType.DEB, reference="build-repo")
        )

        assert repository.is_registered("api", ArtifactType.DEB)
        assert not repository.is_registered("api", ArtifactType.DOCKER)
        assert not repository.is_registered("worker", ArtifactType.DEB)

    def test_is_registered_accepts_plain_type_names(self, repository, api_artifact) -> None:
        repository.register(api_artifact)

        assert repository.is_registered("api", "deb")
        assert not repository.is_registered("api", "rpm")

    def test_same_name_and_type_with_other_reference_can_register(self, repository) -> None:
        repository.register(DeliveryArtifact(name="api", type=ArtifactType.DEB, reference="a"))
        repository.register(DeliveryArtifact(name="api", type=ArtifactType.DEB, reference="b"))

        assert repository.is_registered("api", ArtifactType.DEB)

    def test_concurrent_registration_succeeds_exactly_once(self, repository, api_artifact) -> None:
        def attempt() -> bool:
            try:
                repository.register(
                    DeliveryArtifact(name="api", type=ArtifactType.DEB)
                )
                return True
            except ArtifactAlreadyRegistered:
                return False

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: attempt(), range(32)))

        assert results.count(True) == 1
        assert repository.versions(api_artifact) == []


# =============================================================================
# Tests: Versions
# =============================================================================
class TestVersions:
    """Tests for store and versions."""

    def test_store_unregistered_fails(self, repository, api_artifact) -> None:
        with pytest.raises(NoSuchArtifact):
            repository.store(api_artifact, "1.0.0")

    def test_versions_unregistered_fails(self, repository, api_artifact) -> None:
        with pytest.raises(NoSuchArtifact):
            repository.versions(api_artifact)

    def test_versions_are_most_recent_first(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        for version in ["1.0.0", "1.0.1", "1.1.0", "2.0.0"]:
            assert repository.store(api_artifact, version) is True

        assert repository.versions(api_artifact) == ["2.0.0", "1.1.0", "1.0.1", "1.0.0"]

    def test_restoring_known_version_is_a_no_op(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        repository.store(api_artifact, "1.0.0")
        repository.store(api_artifact, "1.0.1")

        assert repository.store(api_artifact, "1.0.0") is False
        assert repository.versions(api_artifact) == ["1.0.1", "1.0.0"]

    def test_discovery_order_not_semantic_order(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        repository.store(api_artifact, "2.0.0")
        repository.store(api_artifact, "1.0.0")

        assert repository.versions(api_artifact) == ["1.0.0", "2.0.0"]

    def test_versions_are_kept_per_artifact(self, repository, api_artifact) -> None:
        worker = DeliveryArtifact(name="worker", type=ArtifactType.DEB)
        repository.register(api_artifact)
        repository.register(worker)

        repository.store(api_artifact, "1.0.0")
        repository.store(worker, "9.9.9")

        assert repository.versions(api_artifact) == ["1.0.0"]
        assert repository.versions(worker) == ["9.9.9"]

    def test_returned_list_is_a_snapshot(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        repository.store(api_artifact, "1.0.0")

        snapshot = repository.versions(api_artifact)
        snapshot.append("tampered")

        assert repository.versions(api_artifact) == ["1.0.0"]


# =============================================================================
# Tests: Approvals
# =============================================================================
class TestApprovals:
    """Tests for approve_version_for and latest_version_approved_in."""

    def test_nothing_approved_initially(self, repository, api_artifact, delivery_config) -> None:
        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "staging")
            is None
        )

    def test_last_approval_wins(self, repository, api_artifact, delivery_config) -> None:
        repository.approve_version_for(delivery_config, api_artifact, "1.0.1", "staging")
        repository.approve_version_for(delivery_config, api_artifact, "1.0.0", "staging")

        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "staging")
            == "1.0.0"
        )

    def test_environments_do_not_interfere(self, repository, api_artifact, delivery_config) -> None:
        repository.approve_version_for(delivery_config, api_artifact, "1.0.1", "staging")
        repository.approve_version_for(delivery_config, api_artifact, "1.0.0", "production")
        repository.approve_version_for(delivery_config, api_artifact, "1.0.2", "staging")

        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "staging")
            == "1.0.2"
        )
        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "production")
            == "1.0.0"
        )

    def test_delivery_configs_do_not_interfere(self, repository, api_artifact, delivery_config) -> None:
        other = DeliveryConfig(name="api-canary", application="api")
        repository.approve_version_for(delivery_config, api_artifact, "1.0.0", "staging")

        assert repository.latest_version_approved_in(other, api_artifact, "staging") is None

    def test_approval_does_not_require_stored_version(
        self, repository, api_artifact, delivery_config
    ) -> None:
        repository.approve_version_for(delivery_config, api_artifact, "hotfix-7", "production")

        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "production")
            == "hotfix-7"
        )


# =============================================================================
# Tests: Deployment Records
# =============================================================================
class TestDeploymentRecords:
    """Tests for mark_as_successfully_deployed_to and was_successfully_deployed_to."""

    def test_not_deployed_without_record(self, repository, api_artifact, delivery_config) -> None:
        assert not repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "staging"
        )

    def test_marked_version_is_deployed(self, repository, api_artifact, delivery_config) -> None:
        repository.mark_as_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "staging"
        )

        assert repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "staging"
        )
        assert not repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.0", "staging"
        )
        assert not repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "production"
        )

    def test_marking_twice_is_accepted(self, repository, api_artifact, delivery_config) -> None:
        for _ in range(2):
            repository.mark_as_successfully_deployed_to(
                delivery_config, api_artifact, "1.0.1", "staging"
            )

        assert repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "staging"
        )

    def test_query_does_not_create_record(self, repository, api_artifact, delivery_config) -> None:
        repository.was_successfully_deployed_to(delivery_config, api_artifact, "1.0.1", "staging")
        repository.mark_as_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.2", "staging"
        )

        assert not repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.1", "staging"
        )


# =============================================================================
# Tests: Administration
# =============================================================================
class TestDropAll:
    """Tests for drop_all."""

    def test_drop_all_clears_everything(self, repository, api_artifact, delivery_config) -> None:
        repository.register(api_artifact)
        repository.store(api_artifact, "1.0.0")
        repository.approve_version_for(delivery_config, api_artifact, "1.0.0", "staging")
        repository.mark_as_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.0", "staging"
        )

        repository.drop_all()

        assert not repository.is_registered("api", ArtifactType.DEB)
        with pytest.raises(NoSuchArtifact):
            repository.versions(api_artifact)
        assert (
            repository.latest_version_approved_in(delivery_config, api_artifact, "staging")
            is None
        )
        assert not repository.was_successfully_deployed_to(
            delivery_config, api_artifact, "1.0.0", "staging"
        )

    def test_can_register_again_after_drop(self, repository, api_artifact) -> None:
        repository.register(api_artifact)
        repository.drop_all()
        repository.register(api_artifact)

        assert repository.versions(api_artifact) == []


class TestInMemoryDeploymentRecord:
    """The in-memory record keeps one entry per mark call."""

    def test_duplicate_marks_are_appended(self, api_artifact, delivery_config) -> None:
        repository = InMemoryArtifactRepository()
        for _ in range(3):
            repository.mark_as_successfully_deployed_to(
                delivery_config, api_artifact, "1.0.1", "staging"
            )

        key = next(iter(repository._deployed))
        assert repository._deployed[key] == ["1.0.1", "1.0.1", "1.0.1"]
