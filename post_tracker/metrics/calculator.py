"""
Influencer Metrics Calculator.

Derives the aggregate view counters shown next to every influencer:
- platforms: distinct platforms the influencer has posted on
- video_count: number of tracked videos
- views_median: median views, rounded half-up on even counts
- total_views: sum of views
- views_now: highest views among the videos

These values are never persisted. They are a pure function of the
video set and must be recomputed whenever that set changes.
"""

import math
import statistics
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

if TYPE_CHECKING:
    from ..models.entities import InfluencerWithMetrics, Video
    from ..models.enums import Platform


@dataclass(frozen=True)
class InfluencerMetrics:
    """Derived counters for one influencer's video set."""
    platforms: tuple["Platform", ...] = ()
    video_count: int = 0
    views_median: int = 0
    total_views: int = 0
    views_now: int = 0

    def as_fields(self) -> dict:
        """Field mapping for merging into an influencer record."""
        return {
            "platforms": list(self.platforms),
            "video_count": self.video_count,
            "views_median": self.views_median,
            "total_views": self.total_views,
            "views_now": self.views_now,
        }

    def to_dict(self) -> dict:
        return {
            "platforms": [p.value for p in self.platforms],
            "video_count": self.video_count,
            "views_median": self.views_median,
            "total_views": self.total_views,
            "views_now": self.views_now,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_metrics(videos: Iterable["Video"]) -> InfluencerMetrics:
    """
    Compute influencer metrics from a collection of videos.

    Empty input yields an all-zero result. Platforms keep first-seen
    order so repeated runs over the same list are identical.
    """
    videos = list(videos)
    if not videos:
        return InfluencerMetrics()

    platforms: list["Platform"] = []
    for video in videos:
        if video.platform not in platforms:
            platforms.append(video.platform)

    views = sorted(video.views for video in videos)

    return InfluencerMetrics(
        platforms=tuple(platforms),
        video_count=len(views),
        views_median=_round_half_up(statistics.median(views)),
        total_views=sum(views),
        views_now=views[-1],
    )


@dataclass
class CampaignSummary:
    """Aggregates across every influencer loaded for a campaign."""
    campaign_id: Optional[str]
    influencer_count: int = 0
    metrics: InfluencerMetrics = field(default_factory=InfluencerMetrics)

    def to_dict(self) -> dict:
        return {
            "campaign_id": self.campaign_id,
            "influencer_count": self.influencer_count,
            **self.metrics.to_dict(),
        }


def summarize_campaign(
    campaign_id: Optional[str],
    influencers: Sequence["InfluencerWithMetrics"],
) -> CampaignSummary:
    """Roll influencer video sets up into campaign-level metrics."""
    all_videos = [video for influencer in influencers for video in influencer.videos]
    return CampaignSummary(
        campaign_id=campaign_id,
        influencer_count=len(influencers),
        metrics=compute_metrics(all_videos),
    )
