"""Pydantic models for subscribers and the resources they follow."""

from pydantic import BaseModel, ConfigDict, Field

from models.types import ResourceURI, UserID

SUBSCRIPTION_TYPE_DAILY = "DAILY"


class FollowedResource(BaseModel):
    """A resource a user follows, tagged with its application."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    uri: ResourceURI = Field(..., min_length=1)
    application: str = Field(..., min_length=1)


class Subscriber(BaseModel):
    """User profile with subscription mode and followed resources."""

    model_config = ConfigDict(frozen=True)

    id: UserID
    subscription_type: str | None = None
    email: str | None = Field(None, pattern=r"^[^@]+@[^@]+\.[^@]+$")
    resources: frozenset[FollowedResource] = Field(default_factory=frozenset)

    @property
    def is_daily(self) -> bool:
        """Only daily subscribers get aggregated digests."""
        return (self.subscription_type or "").upper() == SUBSCRIPTION_TYPE_DAILY
