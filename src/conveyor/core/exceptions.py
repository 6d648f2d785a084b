"""
conveyor.core.exceptions - Custom Exception Hierarchy
=======================================================

This module defines the structured exception hierarchy for Conveyor.
Components raise and catch specific exception types that carry contextual
information instead of bare strings.

Exception Hierarchy:
    ConveyorError (base)
        ├── ConfigurationError          - Invalid config, unknown backend names
        ├── RepositoryError             - Artifact repository failures
        │     ├── ArtifactAlreadyRegistered
        │     └── NoSuchArtifact
        └── ResourceCacheError          - Inventory cache failures
              ├── ResourceNotFound      - Lookup found nothing (never cached)
              └── ResourceLoadTimeout   - Loader exceeded its time budget

Errors raised by the inventory client itself are NOT wrapped. They reach the
caller unchanged so the orchestrator can tell an upstream outage from a
genuinely missing resource.

Usage:
    >>> from conveyor.core.exceptions import NoSuchArtifact
    >>> try:
    ...     repository.versions(artifact)
    ... except NoSuchArtifact as e:
    ...     logger.warning(e.message, **e.details)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from conveyor.core.models import DeliveryArtifact


# =============================================================================
# Base Exception
# =============================================================================
class ConveyorError(Exception):
    """Base exception for all Conveyor errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(ConveyorError):
    """Raised when Conveyor configuration is invalid or names an unknown backend.

    Example:
        >>> raise ConfigurationError(
        ...     message="Unknown repository backend: 'redis'",
        ...     details={"backend": "redis"},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Repository Errors
# =============================================================================
# Precondition violations in the artifact repository. They are reported
# synchronously and never retried internally.
# =============================================================================
class RepositoryError(ConveyorError):
    """Base class for artifact repository failures.

    Raised directly (with error_code REPOSITORY_BACKEND_ERROR) when the
    durable storage engine fails underneath an operation.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "REPOSITORY_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


def _artifact_details(artifact: DeliveryArtifact) -> dict[str, Any]:
    return {
        "artifact_name": artifact.name,
        "artifact_type": str(artifact.type.value),
        "artifact_reference": artifact.reference,
    }


class ArtifactAlreadyRegistered(RepositoryError):
    """Raised by ``register`` when the artifact identity is already present.

    Attributes:
        artifact: The DeliveryArtifact that was registered twice.
    """

    def __init__(
        self,
        artifact: DeliveryArtifact,
        error_code: str = "ARTIFACT_ALREADY_REGISTERED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details.update(_artifact_details(artifact))

        super().__init__(
            message=(
                f"Artifact {artifact.name} ({artifact.type.value}) "
                f"is already registered"
            ),
            error_code=error_code,
            details=enriched_details,
        )

        self.artifact = artifact


class NoSuchArtifact(RepositoryError):
    """Raised by ``store`` and ``versions`` for an unregistered artifact.

    Attributes:
        artifact: The DeliveryArtifact that was not found.
    """

    def __init__(
        self,
        artifact: DeliveryArtifact,
        error_code: str = "NO_SUCH_ARTIFACT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details.update(_artifact_details(artifact))

        super().__init__(
            message=(
                f"No artifact named {artifact.name} ({artifact.type.value}) "
                f"is registered"
            ),
            error_code=error_code,
            details=enriched_details,
        )

        self.artifact = artifact


# =============================================================================
# Resource Cache Errors
# =============================================================================
class ResourceCacheError(ConveyorError):
    """Base class for inventory cache failures.

    Raised directly for internal invariant violations of the cache layer,
    which are fatal and indicate a bug rather than a missing resource.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "RESOURCE_CACHE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ResourceNotFound(ResourceCacheError):
    """Raised when the inventory has no resource matching a lookup.

    The absence is never cached: the next lookup for the same key queries
    the inventory service again.

    Example:
        >>> raise ResourceNotFound(
        ...     message="Subnet with id subnet-1 not found",
        ...     details={"cache": "subnet", "key": "subnet-1"},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "RESOURCE_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ResourceLoadTimeout(ResourceCacheError):
    """Raised when a cache loader does not finish within its timeout.

    Attributes:
        key: The cache key whose load timed out.
        timeout_seconds: The budget that was exceeded.
    """

    def __init__(
        self,
        key: str,
        timeout_seconds: float,
        error_code: str = "RESOURCE_LOAD_TIMEOUT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["key"] = key
        enriched_details["timeout_seconds"] = timeout_seconds

        super().__init__(
            message=f"Loading {key} did not complete within {timeout_seconds}s",
            error_code=error_code,
            details=enriched_details,
        )

        self.key = key
        self.timeout_seconds = timeout_seconds
