"""
Notification side of the pipeline.

Provides per-destination notifier workers, the registry they live in,
the router that fans events out to them, and the delivery channels.
"""

from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.config import FlowdockNotifierConfig
from buildnotify.notifications.message import InboxMessage
from buildnotify.notifications.notifier import Notifier
from buildnotify.notifications.registry import NotifierRegistry
from buildnotify.notifications.router import NotificationRouter

__all__ = [
    "DeliveryChannel",
    "FlowdockNotifierConfig",
    "InboxMessage",
    "Notifier",
    "NotificationRouter",
    "NotifierRegistry",
]
