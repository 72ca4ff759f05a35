"""
Presentation helpers for influencer rows.

Formatting and filtering used by the campaign view, plus a rich Table
rendering of the current campaign for terminal output.
"""

import math
from typing import Iterable

from rich.table import Table
from rich.text import Text

from .models.entities import InfluencerWithMetrics
from .models.enums import Platform, VideoStatus


PLATFORM_STYLES = {
    Platform.YOUTUBE: "red",
    Platform.INSTAGRAM: "magenta",
    Platform.TIKTOK: "purple",
    Platform.TWITCH: "blue_violet",
}

STATUS_STYLES = {
    VideoStatus.PUBLISHED: "green",
    VideoStatus.SCHEDULED: "yellow",
    VideoStatus.DRAFT: "grey50",
    VideoStatus.LIVE: "red",
    VideoStatus.UNDER_REVIEW: "dark_orange",
    VideoStatus.ARCHIVED: "grey37",
}


def format_views(count: int) -> str:
    """Compact view count: 1.2M, 145K, 950."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{math.floor(count / 1_000 + 0.5)}K"
    return str(count)


def filter_influencers(
    influencers: Iterable[InfluencerWithMetrics],
    term: str,
) -> list[InfluencerWithMetrics]:
    """Case-insensitive match on username or any platform the influencer posts on."""
    needle = term.strip().lower()
    if not needle:
        return list(influencers)
    return [
        influencer for influencer in influencers
        if needle in influencer.username.lower()
        or any(needle in platform.value.lower() for platform in influencer.platforms)
    ]


def platform_badges(platforms: Iterable[Platform]) -> Text:
    text = Text()
    for index, platform in enumerate(platforms):
        if index:
            text.append(" ")
        text.append(platform.value, style=PLATFORM_STYLES.get(platform, "cyan"))
    return text


def render_influencer_table(
    influencers: Iterable[InfluencerWithMetrics],
    title: str = "Influencers",
    show_videos: bool = False,
) -> Table:
    """
    Build a rich Table with one row per influencer and its metrics.

    With show_videos, each influencer is followed by one dimmed row per
    video (platform, status, posted date and views).
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Username", style="cyan")
    table.add_column("Platforms")
    table.add_column("Videos", justify="right")
    table.add_column("Median", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Now", justify="right")

    for influencer in influencers:
        table.add_row(
            influencer.username,
            platform_badges(influencer.platforms),
            str(influencer.video_count),
            format_views(influencer.views_median),
            format_views(influencer.total_views),
            format_views(influencer.views_now),
        )
        if not show_videos:
            continue
        for video in influencer.videos:
            table.add_row(
                Text(f"  {video.posted_on or '-'}", style="dim"),
                platform_badges([video.platform]),
                Text(video.status.value, style=STATUS_STYLES.get(video.status, "white")),
                "",
                "",
                format_views(video.views),
            )

    return table
