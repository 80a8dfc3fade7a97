"""Data models for the source registry."""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from media_reliability.text.normalizer import normalize_text

_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


class SourceType(str, Enum):
    """Kinds of registry entries."""

    JOURNALIST = "journalist"
    MEDIA = "media"
    AGGREGATOR = "aggregator"


class Source(BaseModel):
    """
    A publisher, journalist or aggregator known to the registry.

    The registry JSON is authored in camelCase (nameIsCommon), so fields
    are aliased; snake_case names are accepted as well.

    name_normalized and twitter_normalized are derived from name and
    twitter when the model is built and any supplied values are
    overwritten. Instances are frozen.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )

    id: str = Field(..., min_length=1, description="Stable identifier, unique in the registry")
    name: str = Field(..., min_length=1, description="Display name")
    name_is_common: bool = Field(
        default=False,
        description="Name collides with ordinary words; only high-precision patterns match",
    )
    type: SourceType = Field(..., description="journalist, media or aggregator")
    tier: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Reliability rank, 1 = most reliable; None = untiered",
    )
    organization: str | None = Field(default=None, description="Affiliation, display only")
    twitter: str | None = Field(default=None, description="Twitter/X handle without @")
    domains: tuple[str, ...] | None = Field(default=None, description="Domains owned by the source")

    name_normalized: str = ""
    twitter_normalized: str | None = None

    @model_validator(mode="before")
    @classmethod
    def derive_normalized_fields(cls, data: Any) -> Any:
        """Populate the normalized name and handle from the raw values."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        name = data.get("name")
        if isinstance(name, str):
            data["name_normalized"] = normalize_text(name)

        twitter = data.get("twitter")
        data["twitter_normalized"] = normalize_text(twitter) if isinstance(twitter, str) and twitter else None

        # Drop camelCase copies so only the derived values are used
        data.pop("nameNormalized", None)
        data.pop("twitterNormalized", None)
        return data

    @field_validator("twitter")
    @classmethod
    def validate_twitter(cls, v: str | None) -> str | None:
        """Handles may only contain letters, digits and underscores."""
        if v is None or v == "":
            return None
        if not _HANDLE_PATTERN.match(v):
            raise ValueError("Twitter handle may only contain letters, digits and underscores")
        return v

    @field_validator("domains")
    @classmethod
    def normalize_domains(cls, v: tuple[str, ...] | None) -> tuple[str, ...] | None:
        """Strip and lowercase domains, rejecting blanks."""
        if v is None:
            return None
        domains = []
        for domain in v:
            d = domain.strip().lower()
            if not d:
                raise ValueError("Domains must be non-empty strings")
            domains.append(d)
        return tuple(domains)

    @property
    def is_tiered(self) -> bool:
        """Check if the source has a reliability tier."""
        return self.tier is not None
