"""
Normalized views over watch notifications, consumed by the filter,
the dispatcher and the notifier templates.
"""

from buildnotify.events.base import Event
from buildnotify.events.build import BuildEvent, commit_url

__all__ = ["BuildEvent", "Event", "commit_url"]
