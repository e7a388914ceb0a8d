"""Pydantic models for changed resources reported by the resource provider."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from models.types import LabelMap, ReasonCode
from shared.errors import UnknownResourceTypeError

logger = logging.getLogger(__name__)


class Application(str, Enum):
    """Upstream subsystem a resource belongs to."""

    DATAMODEL = "datamodel"
    CODELIST = "codelist"
    TERMINOLOGY = "terminology"
    COMMENTS = "comments"


class ResourceType(str, Enum):
    """Closed vocabulary of resource type tags."""

    LIBRARY = "library"
    PROFILE = "profile"
    SCHEMA = "schema"
    CROSSWALK = "crosswalk"
    TERMINOLOGY = "terminology"
    CODELIST = "codelist"
    COMMENTROUND = "commentround"
    COMMENTTHREAD = "commentthread"


TYPE_APPLICATIONS: dict[ResourceType, Application] = {
    ResourceType.LIBRARY: Application.DATAMODEL,
    ResourceType.PROFILE: Application.DATAMODEL,
    ResourceType.SCHEMA: Application.DATAMODEL,
    ResourceType.CROSSWALK: Application.DATAMODEL,
    ResourceType.TERMINOLOGY: Application.TERMINOLOGY,
    ResourceType.CODELIST: Application.CODELIST,
    ResourceType.COMMENTROUND: Application.COMMENTS,
    ResourceType.COMMENTTHREAD: Application.COMMENTS,
}

# Applications whose changes are currently aggregated into digests
ACTIVE_APPLICATIONS: tuple[Application, ...] = (Application.DATAMODEL,)


def application_for_type(type_tag: str) -> Application:
    """
    Resolve the application a resource type belongs to.

    Args:
        type_tag: Resource type tag, matched case-insensitively

    Returns:
        The owning Application

    Raises:
        UnknownResourceTypeError: If the tag is not in the closed vocabulary
    """
    try:
        resource_type = ResourceType(type_tag.lower())
    except (ValueError, AttributeError):
        raise UnknownResourceTypeError(type_tag) from None
    return TYPE_APPLICATIONS[resource_type]


class ChangeRecord(BaseModel):
    """One resource the provider reports as changed since the cutoff."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    uri: str = Field(..., min_length=1)
    type: str | None = None
    pref_label: LabelMap | None = None
    local_name: str | None = None
    status: str | None = None
    created: datetime | None = None
    reason_codes: tuple[ReasonCode, ...] = ()

    @field_validator("pref_label", mode="before")
    @classmethod
    def _drop_malformed_label(cls, value: Any) -> Any:
        """A label that is not a mapping of strings is treated as no label."""
        if value is None:
            return None
        if not isinstance(value, dict) or not all(
            isinstance(k, str) and (v is None or isinstance(v, str))
            for k, v in value.items()
        ):
            logger.debug("Ignoring malformed prefLabel: %r", value)
            return None
        return {k: v for k, v in value.items() if v is not None}

    @field_validator("reason_codes", mode="before")
    @classmethod
    def _coerce_reason_codes(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, (str, int)):
            value = (value,)
        return tuple(str(code) for code in value)

    def is_type(self, resource_type: ResourceType) -> bool:
        """Case-insensitive check of the record's type tag."""
        return (self.type or "").lower() == resource_type.value

    def __lt__(self, other: "ChangeRecord") -> bool:
        # Natural ordering used whenever records are listed
        return self.uri < other.uri


class ProviderResponse(BaseModel):
    """Envelope returned by the resource provider's update endpoints."""

    meta: dict[str, Any] = Field(default_factory=dict)
    results: list[ChangeRecord] = Field(default_factory=list)

    @field_validator("results", mode="before")
    @classmethod
    def _drop_invalid_results(cls, value: Any) -> Any:
        """Validate items one by one; a bad item is skipped, not fatal."""
        if value is None:
            return []
        if not isinstance(value, list):
            return value

        records: list[ChangeRecord] = []
        for item in value:
            if isinstance(item, ChangeRecord):
                records.append(item)
                continue
            try:
                records.append(ChangeRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid resource in provider response: %r (%d errors)",
                    item,
                    e.error_count(),
                )
        return records
