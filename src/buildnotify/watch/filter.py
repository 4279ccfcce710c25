"""
Acceptance policy: which events a watcher forwards to its notifiers.
"""

from __future__ import annotations

from buildnotify.cluster.models import WatchEventType
from buildnotify.events.base import Event
from buildnotify.watch.config import BuildsWatcherConfig

_IGNORED_EVENT_TYPES = frozenset({WatchEventType.DELETED, WatchEventType.ERROR})


def accept(config: BuildsWatcherConfig, event: Event) -> bool:
    """Return True if `event` should be forwarded.

    Deleted and error notifications are always dropped. Otherwise the
    phase table is an override list: a phase mapped to False is dropped,
    anything else (True or absent) goes through.
    """
    if event.event_type in _IGNORED_EVENT_TYPES:
        return False
    return config.watch_for_build_phase.get(event.phase, True)
