"""
Client-side state for the tracker.

CampaignStore holds campaigns, the current campaign's influencers (each
owning its videos) and the loading/error flags, and applies every
mutation optimistically against the persistence gateway.
"""

from .snapshot import StoreSnapshot
from .store import CampaignStore

__all__ = [
    "CampaignStore",
    "StoreSnapshot",
]
