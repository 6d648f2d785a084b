"""
conveyor.core.enums - Type-Safe Enumerations
==============================================

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: ArtifactType.DEB == "deb"
"""

from enum import Enum


# =============================================================================
# Artifact Type Enumeration
# =============================================================================
class ArtifactType(str, Enum):
    """Kinds of build output the repository can track.

    Usage:
        >>> ArtifactType("deb") is ArtifactType.DEB
        True
    """

    DEB = "deb"             # Debian package produced by a build
    DOCKER = "docker"       # Container image


# =============================================================================
# Resource Kind Enumeration
# =============================================================================
# One member per cache instance held by the inventory cache. The values are
# used as cache names in logs and statistics.
# =============================================================================
class ResourceKind(str, Enum):
    """Inventory resource kinds, one independent cache each."""

    SECURITY_GROUP_BY_ID = "security_group_by_id"
    SECURITY_GROUP_BY_NAME = "security_group_by_name"
    NETWORK_BY_ID = "network_by_id"
    NETWORK_BY_NAME = "network_by_name"
    AVAILABILITY_ZONES = "availability_zones"
    CREDENTIAL = "credential"
    SUBNET = "subnet"
