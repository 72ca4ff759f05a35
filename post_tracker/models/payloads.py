"""
Input schemas for create and update actions.

Create schemas carry everything the data service needs to insert a row.
Update schemas are partial and forbid unknown keys. The foreign keys
(campaign_id on influencers, influencer_id on videos) are absent from
them, so a record can never be re-parented through the edit path.
"""

from datetime import date
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import Platform, VideoStatus
from .validators import ensure_not_future, ensure_platform_link, ensure_url


P = TypeVar("P", bound="Payload")


class Payload(BaseModel):
    """Base for all action inputs."""
    model_config = ConfigDict(extra="forbid")

    @classmethod
    def coerce(cls: Type[P], payload: Union[P, dict[str, Any]]) -> P:
        """Accept either an instance or a plain mapping from the view layer."""
        if isinstance(payload, cls):
            return payload
        return cls.model_validate(payload)

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True)

    def to_row(self) -> dict[str, Any]:
        """JSON-ready body for the data service."""
        return self.model_dump(mode="json", exclude_unset=True)


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must be on or after start_date")


# -------------------------------------------------------------------------
# Campaigns
# -------------------------------------------------------------------------


class CampaignCreate(Payload):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    status: str = "Active"

    @model_validator(mode="after")
    def check_date_range(self) -> "CampaignCreate":
        _check_dates(self.start_date, self.end_date)
        return self

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class CampaignUpdate(Payload):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    status: Optional[str] = None

    @model_validator(mode="after")
    def check_date_range(self) -> "CampaignUpdate":
        _check_dates(self.start_date, self.end_date)
        return self


# -------------------------------------------------------------------------
# Influencers
# -------------------------------------------------------------------------


class InfluencerCreate(Payload):
    campaign_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    link: str

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        return ensure_url(value)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class InfluencerUpdate(Payload):
    username: Optional[str] = Field(default=None, min_length=1)
    link: Optional[str] = None

    @field_validator("link")
    @classmethod
    def check_link(cls, value: Optional[str]) -> Optional[str]:
        return ensure_url(value) if value is not None else value


# -------------------------------------------------------------------------
# Videos
# -------------------------------------------------------------------------


class VideoCreate(Payload):
    """New video as submitted by the creation form (strict link checks)."""
    influencer_id: str = Field(min_length=1)
    link: str
    platform: Platform
    status: VideoStatus = VideoStatus.DRAFT
    posted_on: Optional[date] = None
    views: int = Field(default=0, ge=0)

    @field_validator("posted_on")
    @classmethod
    def check_posted_on(cls, value: Optional[date]) -> Optional[date]:
        return ensure_not_future(value)

    @model_validator(mode="after")
    def check_link_matches_platform(self) -> "VideoCreate":
        ensure_platform_link(self.link, self.platform)
        return self

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class VideoUpdate(Payload):
    link: Optional[str] = None
    platform: Optional[Platform] = None
    status: Optional[VideoStatus] = None
    posted_on: Optional[date] = None
    views: Optional[int] = Field(default=None, ge=0)

    @field_validator("link")
    @classmethod
    def check_link(cls, value: Optional[str]) -> Optional[str]:
        return ensure_url(value) if value is not None else value

    @field_validator("posted_on")
    @classmethod
    def check_posted_on(cls, value: Optional[date]) -> Optional[date]:
        return ensure_not_future(value)


# Foreign keys that may only be set at creation time.
IMMUTABLE_FIELDS: dict[Type[Payload], str] = {
    InfluencerUpdate: "campaign_id",
    VideoUpdate: "influencer_id",
}
