"""
Entity models for campaigns, influencers and videos.

These mirror the rows of the campaigns, influencers and videos tables
and double as the decode step for everything the data service returns.
Models are frozen: state changes always produce a new record, which
keeps rollback snapshots intact.

Temporary records (optimistic inserts not yet confirmed) carry ids in a
reserved "temp-" namespace so they can never collide with server ids.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..metrics.calculator import InfluencerMetrics, compute_metrics
from .enums import Platform, VideoStatus
from .validators import ensure_url


TEMP_ID_PREFIX = "temp-"


def new_temp_id() -> str:
    """Unique id for an optimistic record awaiting confirmation."""
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def is_temp_id(record_id: str) -> bool:
    return record_id.startswith(TEMP_ID_PREFIX)


class Record(BaseModel):
    """Common row fields."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    created_at: datetime
    updated_at: datetime

    @property
    def is_pending(self) -> bool:
        """True while this is an unconfirmed optimistic record."""
        return is_temp_id(self.id)


class Campaign(Record):
    """A marketing effort grouping influencers and their videos."""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    status: str = "Active"

    @model_validator(mode="after")
    def check_date_range(self) -> "Campaign":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class Influencer(Record):
    """A content creator tracked within one campaign."""
    campaign_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    link: str

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        return ensure_url(value)


class Video(Record):
    """
    A tracked post belonging to one influencer.

    The link is only required to be non-empty here: rows written by older
    clients may not carry a full URL. Stricter checks live on VideoCreate.
    """
    influencer_id: str = Field(min_length=1)
    link: str = Field(min_length=1)
    platform: Platform
    status: VideoStatus = VideoStatus.DRAFT
    posted_on: Optional[date] = None
    views: int = Field(default=0, ge=0)


INFLUENCER_FIELDS = frozenset(Influencer.model_fields)


class InfluencerWithMetrics(Influencer):
    """
    Influencer plus its owned videos and derived metrics.

    The metric fields are never set directly: build through from_record()
    or with_videos() so they always match the video list.
    """
    videos: list[Video] = Field(default_factory=list)
    platforms: list[Platform] = Field(default_factory=list)
    video_count: int = 0
    views_median: int = 0
    total_views: int = 0
    views_now: int = 0

    @classmethod
    def from_record(
        cls,
        influencer: Influencer,
        videos: Sequence[Video] = (),
    ) -> "InfluencerWithMetrics":
        fields = {name: getattr(influencer, name) for name in INFLUENCER_FIELDS}
        return cls(
            **fields,
            videos=list(videos),
            **compute_metrics(videos).as_fields(),
        )

    def with_videos(self, videos: Sequence[Video]) -> "InfluencerWithMetrics":
        """Copy with a new video list and freshly derived metrics."""
        return self.model_copy(update={
            "videos": list(videos),
            **compute_metrics(videos).as_fields(),
        })

    def with_record(self, influencer: Influencer) -> "InfluencerWithMetrics":
        """Copy with the persisted fields replaced, keeping videos and metrics."""
        return self.model_copy(update={
            name: getattr(influencer, name) for name in INFLUENCER_FIELDS
        })

    def record(self) -> Influencer:
        return Influencer.model_construct(
            **{name: getattr(self, name) for name in INFLUENCER_FIELDS}
        )

    @property
    def metrics(self) -> InfluencerMetrics:
        return InfluencerMetrics(
            platforms=tuple(self.platforms),
            video_count=self.video_count,
            views_median=self.views_median,
            total_views=self.total_views,
            views_now=self.views_now,
        )

    def video_position(self, video_id: str) -> Optional[int]:
        for index, video in enumerate(self.videos):
            if video.id == video_id:
                return index
        return None
