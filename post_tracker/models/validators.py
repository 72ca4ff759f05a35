"""
Field validators shared by entity and input models.

Link checks come in two strengths:
- ensure_url: any absolute http(s) URL (influencer links, new videos)
- ensure_platform_link: the URL host must belong to the chosen platform,
  applied only when a video is created through the input schema
"""

from datetime import date
from typing import Optional
from urllib.parse import urlsplit

from .enums import Platform


PLATFORM_HOSTS: dict[Platform, tuple[str, ...]] = {
    Platform.YOUTUBE: ("youtube.com", "youtu.be"),
    Platform.INSTAGRAM: ("instagram.com",),
    Platform.TIKTOK: ("tiktok.com",),
    Platform.TWITCH: ("twitch.tv",),
}


def _hostname(value: str) -> Optional[str]:
    parts = urlsplit(value.strip())
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return None
    return parts.hostname.lower()


def ensure_url(value: str) -> str:
    """Reject anything that is not an absolute http(s) URL."""
    if _hostname(value) is None:
        raise ValueError("Must be a valid URL")
    return value


def ensure_platform_link(link: str, platform: Platform) -> str:
    """Require the link host to be one of the platform's domains."""
    host = _hostname(link)
    if host is None:
        raise ValueError("Must be a valid URL")
    allowed = PLATFORM_HOSTS[platform]
    if not any(host == domain or host.endswith("." + domain) for domain in allowed):
        raise ValueError(
            f"Link must point to {platform.value} ({', '.join(allowed)})"
        )
    return link


def ensure_not_future(value: Optional[date]) -> Optional[date]:
    """Posting dates cannot be in the future."""
    if value is not None and value > date.today():
        raise ValueError("Posted date cannot be in the future")
    return value
