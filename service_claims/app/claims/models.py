"""
Claim data models for the Claims Service.
"""

from typing import List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ClaimType(str, Enum):
    """Claim categories understood by the broker's access control."""
    SUBSCRIPTION_BLACKLIST = "SubscriptionBlacklist"
    SUBSCRIPTION_WHITELIST = "SubscriptionWhitelist"
    PUBLISH_BLACKLIST = "PublishBlacklist"
    PUBLISH_WHITELIST = "PublishWhitelist"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClaimRecord:
    """Persisted user claim.

    ``claim_value`` holds the encoded list of values; see
    :mod:`service_claims.app.claims.codec`.
    """
    user_id: int
    claim_type: ClaimType
    claim_value: str = "[]"
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClaimInput(_WireModel):
    """Request model for creating or updating a claim."""
    user_id: int = Field(..., description="Owning user identifier")
    claim_type: ClaimType = Field(..., description="Claim type")
    claim_values: List[str] = Field(..., description="Claim values, duplicates allowed")


class ClaimView(_WireModel):
    """Response model for a claim."""
    id: int
    user_id: int
    claim_type: ClaimType
    claim_values: List[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


class ClaimDeleteResult(_WireModel):
    """Response model for claim deletion; ``id`` echoes the request."""
    id: int
    deleted: bool
