"""Submission to the node and settlement polling."""

from eve_deploy.broadcast.broadcaster import Broadcaster
from eve_deploy.broadcast.poller import RetryPoller, SystemClock

__all__ = ["Broadcaster", "RetryPoller", "SystemClock"]
