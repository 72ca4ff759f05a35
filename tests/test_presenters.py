"""Tests for presentation helpers."""

from rich.console import Console
from rich.table import Table

from post_tracker.models import Platform
from post_tracker.presenters import (
    filter_influencers,
    format_views,
    render_influencer_table,
)

from factories import make_influencer, make_video, with_metrics


def sample_rows():
    alice = make_influencer("c1", username="@TechReviewer")
    bob = make_influencer("c1", username="@foodblogger", link="https://tiktok.com/@food")
    return [
        with_metrics(alice, [make_video(alice.id, views=145000)]),
        with_metrics(bob, [
            make_video(
                bob.id, views=1_250_000, platform=Platform.TIKTOK,
                link="https://tiktok.com/@food/video/1",
            )
        ]),
    ]


class TestFormatViews:

    def test_millions(self):
        assert format_views(1_240_000) == "1.2M"
        assert format_views(2_000_000) == "2.0M"

    def test_thousands(self):
        assert format_views(145_000) == "145K"
        assert format_views(1_500) == "2K"

    def test_small(self):
        assert format_views(950) == "950"
        assert format_views(0) == "0"


class TestFilterInfluencers:

    def test_matches_username_case_insensitive(self):
        rows = filter_influencers(sample_rows(), "techREVIEW")

        assert [r.username for r in rows] == ["@TechReviewer"]

    def test_matches_platform(self):
        rows = filter_influencers(sample_rows(), "tiktok")

        assert [r.username for r in rows] == ["@foodblogger"]

    def test_blank_term_returns_all(self):
        assert len(filter_influencers(sample_rows(), "  ")) == 2


class TestRenderInfluencerTable:

    def test_one_row_per_influencer(self):
        table = render_influencer_table(sample_rows())

        assert isinstance(table, Table)
        assert table.row_count == 2
        assert len(table.columns) == 6

    def test_video_rows(self):
        table = render_influencer_table(sample_rows(), show_videos=True)

        assert table.row_count == 4

    def test_renders(self):
        console = Console(record=True, width=120)
        console.print(render_influencer_table(sample_rows()))

        output = console.export_text()
        assert "@TechReviewer" in output
        assert "145K" in output
