"""
conveyor.integrations.inventory.models - Cloud Inventory Value Types
=====================================================================

Plain, immutable holders for what the inventory service returns. The cache
layer treats them as opaque values: it only reads the fields it filters on.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """A cloud account known to the inventory service.

    Attributes:
        name: Account name, e.g. "prod".
        type: Credential type passed back to security group queries ("aws").
        environment: Environment the account belongs to.
        account_id: Provider account identifier.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    environment: Optional[str] = None
    account_id: Optional[str] = None


class SecurityGroupSummary(BaseModel):
    """Name and id of a security group."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str
    vpc_id: Optional[str] = None


class Network(BaseModel):
    """A VPC network."""

    model_config = ConfigDict(frozen=True)

    cloud_provider: str = Field(default="aws")
    id: str
    name: Optional[str] = None
    account: str
    region: str


class Subnet(BaseModel):
    """A subnet and the availability zone it lives in."""

    model_config = ConfigDict(frozen=True)

    id: str
    vpc_id: str
    account: str
    region: str
    availability_zone: str
    purpose: Optional[str] = None
