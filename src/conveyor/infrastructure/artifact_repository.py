"""
conveyor.infrastructure.artifact_repository - Artifact Promotion Repository
=============================================================================

The repository answers three questions the orchestrator asks before every
promotion decision:

    1. Which versions of an artifact exist?          (discovery order)
    2. Which version is approved for an environment? (last write wins)
    3. Was a version actually deployed there?        (deployment record)

Architecture Context:

    ┌──────────────────┐  register / store    ┌─────────────────────────┐
    │  Artifact        │ ───────────────────→ │                          │
    │  discovery       │                      │   ArtifactRepository     │
    └──────────────────┘                      │                          │
    ┌──────────────────┐  approve / mark      │  versions:  artifact →   │
    │  Promotion       │ ───────────────────→ │    [newest, ..., oldest] │
    │  orchestrator    │                      │  approved:  key → version│
    │                  │ ←─────────────────── │  deployed:  key → [...]  │
    └──────────────────┘  latest / was...     └─────────────────────────┘

    key = PromotionKey(artifact, delivery_config, environment)

Implementations:
    - ArtifactRepository (ABC):      The operation set and its error semantics
    - InMemoryArtifactRepository:    Dict-based reference implementation
    - SqliteArtifactRepository:      Durable backend (sqlite_artifact_repository)

Concurrency:
    Every implementation owns its state exclusively and serializes all
    operations through one re-entrant lock. ``register`` is therefore an
    atomic check-then-insert, and reads observe every write that completed
    before them.

Approval and discovery are decoupled: approving a version that ``store``
never saw is allowed (manual overrides).
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from conveyor.core.enums import ArtifactType
from conveyor.core.exceptions import ArtifactAlreadyRegistered, NoSuchArtifact
from conveyor.core.models import DeliveryArtifact, DeliveryConfig, PromotionKey


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


# =============================================================================
# Abstract Base Class
# =============================================================================
class ArtifactRepository(ABC):
    """Abstract interface for artifact promotion state.

    Components should type-hint against this ABC so the backend can be
    swapped through configuration.

    Methods:
        register(artifact): Start tracking an artifact.
        is_registered(name, type): Any artifact with this name and type?
        store(artifact, version): Record a discovered version.
        versions(artifact): Known versions, most recent first.
        approve_version_for(...): Set the approved version of a key.
        latest_version_approved_in(...): Read the approved version of a key.
        mark_as_successfully_deployed_to(...): Append to the deployment record.
        was_successfully_deployed_to(...): Deployment record membership.
        drop_all(): Clear everything (test isolation).
        close(): Release backend resources.
    """

    @abstractmethod
    def register(self, artifact: DeliveryArtifact) -> None:
        """Start tracking an artifact with an empty version list.

        Raises:
            ArtifactAlreadyRegistered: If the exact identity is already tracked.
        """

    @abstractmethod
    def is_registered(self, name: str, type: ArtifactType) -> bool:
        """True if any registered artifact has this name and type.

        The artifact reference is ignored.
        """

    @abstractmethod
    def store(self, artifact: DeliveryArtifact, version: str) -> bool:
        """Record a version of an artifact.

        Args:
            artifact: A registered artifact.
            version: Opaque version string.

        Returns:
            True if the version was newly added, False if it was already known.
            Re-storing a known version does not change the version order.

        Raises:
            NoSuchArtifact: If the artifact is not registered.
        """

    @abstractmethod
    def versions(self, artifact: DeliveryArtifact) -> list[str]:
        """Known versions of an artifact, most recently stored first.

        Raises:
            NoSuchArtifact: If the artifact is not registered.
        """

    @abstractmethod
    def approve_version_for(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> None:
        """Make ``version`` the approved version for the promotion key.

        Overwrites any previous approval. The version does not have to be
        one that ``store`` has seen.
        """

    @abstractmethod
    def latest_version_approved_in(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        environment: str,
    ) -> Optional[str]:
        """The approved version for the promotion key, or None."""

    @abstractmethod
    def mark_as_successfully_deployed_to(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> None:
        """Append ``version`` to the deployment record of the promotion key.

        The record is append-only; marking the same version twice stores it
        twice.
        """

    @abstractmethod
    def was_successfully_deployed_to(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> bool:
        """True if ``version`` is in the deployment record of the key."""

    @abstractmethod
    def drop_all(self) -> None:
        """Remove all artifacts, versions, approvals and deployment records."""

    def close(self) -> None:
        """Release any resources held by the backend."""


# =============================================================================
# In-Memory Implementation
# =============================================================================
# Key Data Structures:
#   _artifacts: dict[DeliveryArtifact, list[str]]   (newest version first)
#   _approved:  dict[PromotionKey, str]
#   _deployed:  dict[PromotionKey, list[str]]
# =============================================================================
class InMemoryArtifactRepository(ArtifactRepository):
    """Dict-based reference implementation of ArtifactRepository.

    Data is lost when the process exits. All access goes through
    ``self._lock``; nothing else may touch the dicts.

    Example:
        >>> repo = InMemoryArtifactRepository()
        >>> api = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        >>> repo.register(api)
        >>> repo.store(api, "1.0.0")
        True
        >>> repo.versions(api)
        ['1.0.0']
    """

    def __init__(self) -> None:
        self._artifacts: dict[DeliveryArtifact, list[str]] = {}
        self._approved: dict[PromotionKey, str] = {}
        self._deployed: dict[PromotionKey, list[str]] = {}

        self._lock = threading.RLock()
        self._logger = logger.bind(component="in_memory_artifact_repository")

    # -------------------------------------------------------------------------
    # Artifacts and Versions
    # -------------------------------------------------------------------------
    def register(self, artifact: DeliveryArtifact) -> None:
        with self._lock:
            if artifact in self._artifacts:
                raise ArtifactAlreadyRegistered(artifact)
            self._artifacts[artifact] = []
        self._logger.info(
            "artifact_registered",
            artifact_name=artifact.name,
            artifact_type=artifact.type.value,
        )

    def is_registered(self, name: str, type: ArtifactType) -> bool:
        with self._lock:
            return any(
                a.name == name and a.type == type for a in self._artifacts
            )

    def store(self, artifact: DeliveryArtifact, version: str) -> bool:
        with self._lock:
            versions = self._artifacts.get(artifact)
            if versions is None:
                raise NoSuchArtifact(artifact)
            if version in versions:
                return False
            versions.insert(0, version)

        self._logger.debug(
            "artifact_version_stored",
            artifact_name=artifact.name,
            version=version,
        )
        return True

    def versions(self, artifact: DeliveryArtifact) -> list[str]:
        with self._lock:
            versions = self._artifacts.get(artifact)
            if versions is None:
                raise NoSuchArtifact(artifact)
            return list(versions)

    # -------------------------------------------------------------------------
    # Approvals
    # -------------------------------------------------------------------------
    def approve_version_for(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> None:
        key = PromotionKey(
            artifact=artifact, delivery_config=delivery_config, environment=environment
        )
        with self._lock:
            self._approved[key] = version
        self._logger.info(
            "artifact_version_approved",
            artifact_name=artifact.name,
            delivery_config=delivery_config.name,
            environment=environment,
            version=version,
        )

    def latest_version_approved_in(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        environment: str,
    ) -> Optional[str]:
        key = PromotionKey(
            artifact=artifact, delivery_config=delivery_config, environment=environment
        )
        with self._lock:
            return self._approved.get(key)

    # -------------------------------------------------------------------------
    # Deployment Records
    # -------------------------------------------------------------------------
    def mark_as_successfully_deployed_to(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> None:
        key = PromotionKey(
            artifact=artifact, delivery_config=delivery_config, environment=environment
        )
        with self._lock:
            self._deployed.setdefault(key, []).append(version)
        self._logger.info(
            "artifact_version_deployed",
            artifact_name=artifact.name,
            delivery_config=delivery_config.name,
            environment=environment,
            version=version,
        )

    def was_successfully_deployed_to(
        self,
        delivery_config: DeliveryConfig,
        artifact: DeliveryArtifact,
        version: str,
        environment: str,
    ) -> bool:
        key = PromotionKey(
            artifact=artifact, delivery_config=delivery_config, environment=environment
        )
        with self._lock:
            return version in self._deployed.get(key, ())

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------
    def drop_all(self) -> None:
        with self._lock:
            self._artifacts.clear()
            self._approved.clear()
            self._deployed.clear()
        self._logger.info("artifact_repository_dropped")
