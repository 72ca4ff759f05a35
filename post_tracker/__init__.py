"""
Influencer post tracker.

Client-side core for tracking influencer campaigns: an optimistic state
store, per-influencer view metrics and a gateway to the hosted data
service.
"""

__version__ = "0.1.0"
