"""
conveyor.core.models - Core Data Models
=========================================

The identity types every repository operation is keyed on.

Model Hierarchy:
    DeliveryArtifact → What is being promoted? (name + type + reference)
    DeliveryConfig   → Which pipeline definition is promoting it?
    PromotionKey     → (artifact, delivery config, environment)

Design Principles:
    1. Frozen: models are immutable and hashable, so they can be dict keys
    2. Value equality: two artifacts with the same fields are the same artifact
    3. Serializable: model_dump_json() gives the canonical form used by the
       durable repository backend
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from conveyor.core.enums import ArtifactType


# =============================================================================
# Delivery Artifact
# =============================================================================
class DeliveryArtifact(BaseModel):
    """A named, typed build output tracked across environments.

    Two artifacts with the same name and type but different references are
    distinct identities (e.g. the same package built from two repositories).
    The reference defaults to the artifact name.

    Attributes:
        name: Artifact name, e.g. "api".
        type: Kind of artifact (deb, docker).
        reference: Disambiguates artifacts sharing name and type.

    Example:
        >>> artifact = DeliveryArtifact(name="api", type=ArtifactType.DEB)
        >>> artifact.reference
        'api'
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Artifact name")
    type: ArtifactType = Field(description="Artifact type (deb, docker)")
    reference: str = Field(
        default="",
        description="Reference distinguishing artifacts of the same name/type",
    )

    @model_validator(mode="before")
    @classmethod
    def _default_reference(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("reference"):
            data = {**data, "reference": data.get("name", "")}
        return data


# =============================================================================
# Delivery Config
# =============================================================================
class DeliveryConfig(BaseModel):
    """Immutable identity of a delivery pipeline definition.

    Attributes:
        name: Unique name of the delivery config.
        application: Application the pipeline delivers.
        service_account: Account the pipeline acts as, if any.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Delivery config name")
    application: str = Field(min_length=1, description="Owning application")
    service_account: Optional[str] = Field(
        default=None,
        description="Service account the pipeline runs as",
    )


# =============================================================================
# Promotion Key
# =============================================================================
class PromotionKey(BaseModel):
    """Composite key for approval and deployment tracking."""

    model_config = ConfigDict(frozen=True)

    artifact: DeliveryArtifact
    delivery_config: DeliveryConfig
    environment: str = Field(min_length=1, description="Target environment name")
