"""
Analytics Provider Clients

Outbound analytics client and the actions forwarded through it.
"""

from .actions import ACTIONS, IdentifyAction, TrackAction
from .base import AnalyticsAction, AnalyticsClient, ClientFactory
from .segment import SegmentClient

__all__ = [
    "ACTIONS",
    "AnalyticsAction",
    "AnalyticsClient",
    "ClientFactory",
    "IdentifyAction",
    "SegmentClient",
    "TrackAction",
]
