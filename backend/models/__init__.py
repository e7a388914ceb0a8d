"""Pydantic models for data validation and type checking."""

from models.digest import DispatchReport, UserDigest
from models.resource import (
    ACTIVE_APPLICATIONS,
    Application,
    ChangeRecord,
    ProviderResponse,
    ResourceType,
    application_for_type,
)
from models.subscriber import FollowedResource, Subscriber

__all__ = [
    "ACTIVE_APPLICATIONS",
    "Application",
    "ChangeRecord",
    "ProviderResponse",
    "ResourceType",
    "application_for_type",
    "FollowedResource",
    "Subscriber",
    "UserDigest",
    "DispatchReport",
]
