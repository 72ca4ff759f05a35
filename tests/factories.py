"""Record factories shared across test modules."""

import uuid
from datetime import date, datetime, timedelta, timezone

from post_tracker.models import (
    Campaign,
    Influencer,
    InfluencerWithMetrics,
    Platform,
    Video,
    VideoStatus,
)


BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_campaign(campaign_id=None, name="Spring Launch", created_at=None, **fields):
    created = created_at or BASE_TIME
    return Campaign(
        id=campaign_id or str(uuid.uuid4()),
        name=name,
        created_at=created,
        updated_at=created,
        **fields,
    )


def make_influencer(campaign_id, influencer_id=None, username="@techreviewer", **fields):
    fields.setdefault("link", "https://youtube.com/@techreviewer")
    return Influencer(
        id=influencer_id or str(uuid.uuid4()),
        campaign_id=campaign_id,
        username=username,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        **fields,
    )


def make_video(influencer_id, views=0, platform=Platform.YOUTUBE, video_id=None, **fields):
    fields.setdefault("link", f"https://youtube.com/watch?v={uuid.uuid4().hex[:8]}")
    fields.setdefault("status", VideoStatus.PUBLISHED)
    fields.setdefault("posted_on", date(2024, 1, 10))
    return Video(
        id=video_id or str(uuid.uuid4()),
        influencer_id=influencer_id,
        platform=platform,
        views=views,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        **fields,
    )


def with_metrics(influencer, videos=()):
    return InfluencerWithMetrics.from_record(influencer, videos)


def saved(model, **changes):
    """Server echo of a record with a fresh updated_at."""
    return model.model_copy(update={"updated_at": BASE_TIME + timedelta(minutes=5), **changes})


