"""
conveyor.infrastructure.sqlite_artifact_repository - Durable Repository Backend
=================================================================================

A sqlite-backed ArtifactRepository with exactly the same operations and error
semantics as InMemoryArtifactRepository. Promotion state survives a process
restart when ``path`` points at a file.

Schema:
    artifacts           (artifact_key PK, name, type, reference)
    artifact_versions   (seq AUTOINCREMENT, artifact_key, version)
                         UNIQUE(artifact_key, version)
    approved_versions   (artifact_key, config_key, environment, version)
                         PK(artifact_key, config_key, environment)
    deployed_versions   (seq AUTOINCREMENT, artifact_key, config_key,
                         environment, version)

    artifact_key / config_key are the canonical JSON of the pydantic model,
    so identity in the database is the same value identity the models have
    in memory. Discovery order comes from ``seq`` (highest = most recent).

Concurrency:
    One connection, shared across threads (check_same_thread=False) and
    guarded by the repository lock. Each write commits before the lock is
    released.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from typing import Optional

import structlog

from conveyor.core.enums import ArtifactType
from conveyor.core.exceptions import (
    ArtifactAlreadyRegistered,
    NoSuchArtifact,
    RepositoryError,
)
from conveyor.core.models import DeliveryArtifact, DeliveryConfig
from conveyor.infrastructure.artifact_repository import ArtifactRepository


logger = structlog.get_logger()


_SCHEMA = """
CREATE TABLE IF NOT EXISTS artifacts (
    artifact_key TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    type         TEXT NOT NULL,
    reference    TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_artifacts_name_type ON artifacts (name, type);

CREATE TABLE IF NOT EXISTS artifact_versions (
    seq          INTEGER PRIMARY KEY AUTOINCREMENT,
    artifact_key TEXT NOT NULL REFERENCES artifacts (artifact_key),
    version      TEXT NOT NULL,
    UNIQUE (artifact_key, version)
);

CREATE TABLE IF NOT EXISTS approved_versions (
    artifact_key TEXT NOT NULL,
    config_key   TEXT NOT NULL,
    environment  TEXT NOT NULL,
    version      TEXT NOT NULL,
    PRIMARY KEY (artifact_key, config_key, environment)
);

CREATE TABLE IF NOT EXISTS deployed_versions (
    seq          INTEGER PRIMARY KEY AUTOINCREMENT,
    artifact_key TEXT NOT NULL,
    config_key   TEXT NOT NULL,
    environment  TEXT NOT NULL,
    version      TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_deployed_key
    ON deployed_versions (artifact_key, config_key, environment, version);
"""


def _artifact_key(artifact: DeliveryArtifact) -> str:
    return artifact.model_dump_json()


def _config_key(delivery_config: DeliveryConfig) -> str:
    return delivery_config.model_dump_json()


class SqliteArtifactRepository(ArtifactRepository):
    """Durable ArtifactRepository stored in a sqlite database.

    Args:
        path: Database file, or ":memory:" for a private in-memory database.

    Raises:
        RepositoryError: If the database cannot be opened or initialized.

    Example:
        >>> repo = SqliteArtifactRepository("/var/lib/conveyor/artifacts.db")
        >>> repo.register(DeliveryArtifact(name="api", type=ArtifactType.DEB))
        >>> repo.close()
    """

    def __init__(self, path: str = ":memory:") -> None:
        self._path = path
        self._lock = threading.RLock()
        self._logger = logger.bind(component="sqlite_artifact_repository", path=path)

        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(
                message=f"Unable to open artifact database at {path}",
                error_code="REPOSITORY_BACKEND_ERROR",
                details={"path": path, "error": str(exc)},
            ) from exc

        self._logger.info("artifact_repository_opened")

    # -------------------------------------------------------------------------
    # Transaction helper
    # -------------------------------------------------------------------------
    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the lock for one unit of work and commit or roll back.

        Domain errors raised inside the block pass through untouched; storage
        engine errors are wrapped in RepositoryError.
        """
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error as exc:
                with suppress(sqlite3.Error):
                    self._conn.rollback()
                raise RepositoryError(
                    message=f"Artifact database operation failed: {exc}",
                    error_code="REPOSITORY_BACKEND_ERROR",
                    details={"path": self._path},
                ) from exc
            except BaseException:
                self._conn.rollback()
                raise

    def _require_registered(
        self, conn: sqlite3.Connection, artifact: DeliveryArtifact
    ) -> str:
        key = _artifact_key(artifact)
        row = conn.execute(
            "SELECT 1 FROM artifacts WHERE artifact_key = ?", (key,)
        ).fetchone()
        if row is None:
            raise NoSuchArtifact(artifact)
        return key

    # -------------------------------------------------------------------------
    # Artifacts and Versions
    # -------------------------------------------------------------------------
    def register(self, artifact: DeliveryArtifact) -> None:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO artifacts (artifact_key, name, type, reference) "
                "VALUES (?, ?, ?, ?)",
                (
                    _artifact_key(artifact),
                    artifact.name,
                    artifact.type.value,
                    artifact.reference,
                ),
            )
            if cursor.rowcount == 0:
                raise ArtifactAlreadyRegistered(artifact)
        self._logger.info(
            "artifact_registered",
            artifact_name=artifact.name,
            artifact_type=artifact.type.value,
        )

    def is_registered(self, name: str, type: ArtifactType) -> bool:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT 1 FROM artifacts WHERE name = ? AND type = ? LIMIT 1",
                (name, getattr(type, "value", type)),
            ).fetchone()
        return row is not None

    def store(self, artifact: DeliveryArtifact, version: str) -> bool:
        with self._transaction() as conn:
            key = self._require_registered(conn, artifact)
            cursor = conn.execute(
                "INSERT OR IGNORE INTO artifact_versions (artifact_key, version) "
                "VALUES (?, ?)",
                (key, version),
            )
            added = cursor.rowcount == 1
        if added:
            self._logger.debug(
                "artifact_version_stored",
                artifact_name=artifact.name,
                version=version,
            )
        return added

    def versions(self, artifact: DeliveryArtifact) -> list[str]:
        with self._transaction() as conn:
            key = self._require_registered(conn, artifact)
            rows = conn.execute(
                "SELECT version FROM artifact_versions WHERE artifact_key = ? "
                "ORDER BY seq DESC",
                (key,),
            ).fetchall()
        return [row[0] for row in rows]

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
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO approved_versions "
                "(artifact_key, config_key, environment, version) VALUES (?, ?, ?, ?) "
                "ON CONFLICT (artifact_key, config_key, environment) "
                "DO UPDATE SET version = excluded.version",
                (
                    _artifact_key(artifact),
                    _config_key(delivery_config),
                    environment,
                    version,
                ),
            )
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
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT version FROM approved_versions "
                "WHERE artifact_key = ? AND config_key = ? AND environment = ?",
                (_artifact_key(artifact), _config_key(delivery_config), environment),
            ).fetchone()
        return row[0] if row is not None else None

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
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO deployed_versions "
                "(artifact_key, config_key, environment, version) VALUES (?, ?, ?, ?)",
                (
                    _artifact_key(artifact),
                    _config_key(delivery_config),
                    environment,
                    version,
                ),
            )
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
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT 1 FROM deployed_versions "
                "WHERE artifact_key = ? AND config_key = ? AND environment = ? "
                "AND version = ? LIMIT 1",
                (
                    _artifact_key(artifact),
                    _config_key(delivery_config),
                    environment,
                    version,
                ),
            ).fetchone()
        return row is not None

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------
    def drop_all(self) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM deployed_versions")
            conn.execute("DELETE FROM approved_versions")
            conn.execute("DELETE FROM artifact_versions")
            conn.execute("DELETE FROM artifacts")
        self._logger.info("artifact_repository_dropped")

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        self._logger.info("artifact_repository_closed")
