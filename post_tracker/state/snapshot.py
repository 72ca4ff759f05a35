"""
Point-in-time copy of the store's state.

Snapshots are plain JSON-ready data, so two snapshots can be compared
field by field or by checksum (for example before and after a rolled
back mutation).
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class StoreSnapshot:
    """Serializable copy of every state slice."""
    campaigns: list[dict] = field(default_factory=list)
    influencers: list[dict] = field(default_factory=list)
    current_campaign_id: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None

    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    checksum: str = ""

    def calculate_checksum(self) -> str:
        """SHA256 over the data slices (flags and timestamp excluded)."""
        content = json.dumps(
            {
                "campaigns": self.campaigns,
                "influencers": self.influencers,
                "current_campaign_id": self.current_campaign_id,
            },
            sort_keys=True,
        )
        return hashlib.sha256(content.encode()).hexdigest()

    @property
    def video_count(self) -> int:
        return sum(len(inf.get("videos", [])) for inf in self.influencers)

    def to_dict(self) -> dict:
        return {
            "taken_at": self.taken_at.isoformat(),
            "checksum": self.checksum,
            "current_campaign_id": self.current_campaign_id,
            "loading": self.loading,
            "error": self.error,
            "campaign_count": len(self.campaigns),
            "influencer_count": len(self.influencers),
            "video_count": self.video_count,
            "campaigns": self.campaigns,
            "influencers": self.influencers,
        }
