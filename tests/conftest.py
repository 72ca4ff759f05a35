"""Shared pytest fixtures and configuration."""

from unittest.mock import AsyncMock

import pytest

from post_tracker.infrastructure.gateway import PersistenceGateway
from post_tracker.infrastructure.result import Result
from post_tracker.models import Platform
from post_tracker.state.store import CampaignStore

from factories import make_campaign, make_influencer, make_video, with_metrics


@pytest.fixture
def gateway():
    """Gateway double; every call succeeds with no data unless overridden."""
    mock = AsyncMock(spec=PersistenceGateway)
    for name in (
        "fetch_campaigns",
        "fetch_influencers_for_campaign",
        "fetch_videos_for_influencer",
        "insert_campaign",
        "update_campaign",
        "delete_campaign",
        "insert_influencer",
        "update_influencer",
        "delete_influencer",
        "insert_video",
        "update_video",
        "delete_video",
    ):
        getattr(mock, name).return_value = Result.ok()
    return mock


@pytest.fixture
def store(gateway):
    return CampaignStore(gateway)


@pytest.fixture
def campaign():
    return make_campaign()


@pytest.fixture
def loaded_store(store, gateway, campaign):
    """
    Store holding one campaign with two influencers:
    alice (YouTube 100, 200, 300) and bob (TikTok 50).
    """
    alice = make_influencer(campaign.id, username="@alice")
    bob = make_influencer(
        campaign.id, username="@bob", link="https://tiktok.com/@bob",
    )
    alice_videos = [make_video(alice.id, views=v) for v in (100, 200, 300)]
    bob_videos = [
        make_video(
            bob.id, views=50, platform=Platform.TIKTOK,
            link="https://tiktok.com/@bob/video/1",
        )
    ]
    store._campaigns = [campaign]
    store._current_campaign_id = campaign.id
    store._set_influencers([
        with_metrics(alice, alice_videos),
        with_metrics(bob, bob_videos),
    ])
    return store


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end flows across store, gateway double and metrics"
    )
