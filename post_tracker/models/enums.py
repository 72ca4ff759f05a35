"""Enumerations shared with the persisted schema."""

from enum import Enum


class Platform(str, Enum):
    """Platforms a video can be posted on (matches the platform_type enum)."""
    YOUTUBE = "YouTube"
    INSTAGRAM = "Instagram"
    TIKTOK = "TikTok"
    TWITCH = "Twitch"


class VideoStatus(str, Enum):
    """Publication status of a video (matches the video_status_type enum)."""
    PUBLISHED = "Published"
    SCHEDULED = "Scheduled"
    DRAFT = "Draft"
    LIVE = "Live"
    UNDER_REVIEW = "Under Review"
    ARCHIVED = "Archived"
