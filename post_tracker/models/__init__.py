"""Entity and input models for the influencer post tracker."""

from .enums import Platform, VideoStatus
from .entities import (
    TEMP_ID_PREFIX,
    Campaign,
    Influencer,
    InfluencerWithMetrics,
    Video,
    is_temp_id,
    new_temp_id,
)
from .payloads import (
    IMMUTABLE_FIELDS,
    CampaignCreate,
    CampaignUpdate,
    InfluencerCreate,
    InfluencerUpdate,
    Payload,
    VideoCreate,
    VideoUpdate,
)

__all__ = [
    # Enums
    "Platform",
    "VideoStatus",
    # Entities
    "TEMP_ID_PREFIX",
    "Campaign",
    "Influencer",
    "InfluencerWithMetrics",
    "Video",
    "is_temp_id",
    "new_temp_id",
    # Inputs
    "IMMUTABLE_FIELDS",
    "CampaignCreate",
    "CampaignUpdate",
    "InfluencerCreate",
    "InfluencerUpdate",
    "Payload",
    "VideoCreate",
    "VideoUpdate",
]
