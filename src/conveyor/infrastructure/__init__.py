"""
conveyor.infrastructure - Promotion State Layer
=================================================

Persistence for artifact promotion state.

    ArtifactRepository (ABC)
        ├── InMemoryArtifactRepository   (reference semantics)
        └── SqliteArtifactRepository     (durable backend)

Usage:
    from conveyor.infrastructure import create_artifact_repository
"""

from conveyor.infrastructure.artifact_repository import (
    ArtifactRepository,
    InMemoryArtifactRepository,
)
from conveyor.infrastructure.factory import create_artifact_repository
from conveyor.infrastructure.sqlite_artifact_repository import SqliteArtifactRepository

__all__ = [
    "ArtifactRepository",
    "InMemoryArtifactRepository",
    "SqliteArtifactRepository",
    "create_artifact_repository",
]
