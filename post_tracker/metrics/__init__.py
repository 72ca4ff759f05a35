"""
Derived metrics for influencers and campaigns.

Everything here is pure: the same videos always produce the same numbers.
"""

from .calculator import (
    InfluencerMetrics,
    CampaignSummary,
    compute_metrics,
    summarize_campaign,
)

__all__ = [
    "InfluencerMetrics",
    "CampaignSummary",
    "compute_metrics",
    "summarize_campaign",
]
