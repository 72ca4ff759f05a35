"""Tests for the influencer metrics calculator."""

import pytest

from post_tracker.metrics import (
    CampaignSummary,
    InfluencerMetrics,
    compute_metrics,
    summarize_campaign,
)
from post_tracker.models import Platform

from factories import make_campaign, make_influencer, make_video, with_metrics


class TestComputeMetrics:
    """Derived counters from a video set."""

    def test_empty_input_is_all_zero(self):
        metrics = compute_metrics([])

        assert metrics == InfluencerMetrics()
        assert metrics.platforms == ()
        assert metrics.views_now == 0

    def test_odd_count_median(self):
        videos = [make_video("inf-1", views=v) for v in (30, 10, 20)]

        metrics = compute_metrics(videos)

        assert metrics.video_count == 3
        assert metrics.views_median == 20
        assert metrics.total_views == 60
        assert metrics.views_now == 30

    def test_even_count_median_rounds_half_up(self):
        videos = [make_video("inf-1", views=v) for v in (100, 201)]

        assert compute_metrics(videos).views_median == 151

    def test_even_count_median_whole(self):
        videos = [make_video("inf-1", views=v) for v in (10, 20, 30, 40)]

        assert compute_metrics(videos).views_median == 25

    def test_single_video(self):
        metrics = compute_metrics([make_video("inf-1", views=5)])

        assert metrics.views_median == 5
        assert metrics.total_views == 5
        assert metrics.views_now == 5

    def test_platforms_distinct_in_first_seen_order(self):
        videos = [
            make_video("inf-1", platform=Platform.TIKTOK, link="https://tiktok.com/@a/video/1"),
            make_video("inf-1", platform=Platform.YOUTUBE),
            make_video("inf-1", platform=Platform.TIKTOK, link="https://tiktok.com/@a/video/2"),
        ]

        assert compute_metrics(videos).platforms == (Platform.TIKTOK, Platform.YOUTUBE)

    def test_idempotent(self):
        videos = [make_video("inf-1", views=v) for v in (5, 1, 9, 3)]

        assert compute_metrics(videos) == compute_metrics(videos)

    def test_does_not_reorder_input(self):
        videos = [make_video("inf-1", views=v) for v in (5, 1, 9)]
        before = [v.id for v in videos]

        compute_metrics(videos)

        assert [v.id for v in videos] == before

    def test_to_dict_uses_platform_values(self):
        metrics = compute_metrics([make_video("inf-1", views=7)])

        assert metrics.to_dict() == {
            "platforms": ["YouTube"],
            "video_count": 1,
            "views_median": 7,
            "total_views": 7,
            "views_now": 7,
        }


class TestSummarizeCampaign:
    """Campaign-level roll-up."""

    def test_rolls_up_every_video(self):
        campaign = make_campaign()
        alice = make_influencer(campaign.id, username="@alice")
        bob = make_influencer(campaign.id, username="@bob")
        influencers = [
            with_metrics(alice, [make_video(alice.id, views=10), make_video(alice.id, views=30)]),
            with_metrics(bob, [make_video(bob.id, views=20)]),
        ]

        summary = summarize_campaign(campaign.id, influencers)

        assert isinstance(summary, CampaignSummary)
        assert summary.influencer_count == 2
        assert summary.metrics.video_count == 3
        assert summary.metrics.views_median == 20
        assert summary.metrics.total_views == 60
        assert summary.to_dict()["campaign_id"] == campaign.id

    def test_no_influencers(self):
        summary = summarize_campaign(None, [])

        assert summary.influencer_count == 0
        assert summary.metrics == InfluencerMetrics()
