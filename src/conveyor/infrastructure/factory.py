"""
conveyor.infrastructure.factory - Artifact Repository Factory
===============================================================

Maps ``RepositoryConfig.backend`` to a concrete ArtifactRepository.

Usage:
    >>> from conveyor.core.config import RepositoryConfig
    >>> repo = create_artifact_repository(RepositoryConfig(backend="sqlite"))
    >>> type(repo)  # SqliteArtifactRepository
"""

from __future__ import annotations

from conveyor.core.config import RepositoryConfig
from conveyor.core.exceptions import ConfigurationError
from conveyor.infrastructure.artifact_repository import ArtifactRepository


def create_artifact_repository(config: RepositoryConfig) -> ArtifactRepository:
    """Create the artifact repository selected by configuration.

        - "memory" → InMemoryArtifactRepository
        - "sqlite" → SqliteArtifactRepository(config.sqlite_path)

    Args:
        config: Repository configuration.

    Returns:
        A ready-to-use ArtifactRepository.

    Raises:
        ConfigurationError: If the backend name is not recognized.
    """
    backend = config.backend.lower()

    if backend == "memory":
        from conveyor.infrastructure.artifact_repository import (
            InMemoryArtifactRepository,
        )
        return InMemoryArtifactRepository()

    if backend == "sqlite":
        from conveyor.infrastructure.sqlite_artifact_repository import (
            SqliteArtifactRepository,
        )
        return SqliteArtifactRepository(config.sqlite_path)

    raise ConfigurationError(
        message=(
            f"Unknown artifact repository backend: '{backend}'. "
            f"Available backends: 'memory', 'sqlite'."
        ),
        details={"backend": backend},
    )
