from buildnotify.notifications.channels.console import ConsoleChannel
from buildnotify.notifications.channels.flowdock import FlowdockChannel

__all__ = ["ConsoleChannel", "FlowdockChannel"]
