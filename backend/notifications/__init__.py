"""
Notification system for MSCR change digests.

This module handles:
- Fetching changed resources from the resource provider
- Correlating changes with each subscriber's followed resources
- Rendering localized HTML digests
- Sending digests via Resend (daily pass and on-demand)
"""

from .change_aggregator import ChangeAggregator
from .digest_renderer import DigestRenderer
from .dispatcher import Dispatcher

__all__ = [
    "ChangeAggregator",
    "DigestRenderer",
    "Dispatcher",
]
