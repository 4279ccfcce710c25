"""
Watch side of the pipeline: resumable resource watches, the acceptance
policy, and the builds watcher tying them to notifiers.
"""

from buildnotify.watch.config import DEFAULT_PHASE_TABLE, BuildsWatcherConfig
from buildnotify.watch.filter import accept
from buildnotify.watch.loop import ResourceWatch, WatchState, watch_resource
from buildnotify.watch.watcher import BuildsWatcher

__all__ = [
    "DEFAULT_PHASE_TABLE",
    "BuildsWatcher",
    "BuildsWatcherConfig",
    "ResourceWatch",
    "WatchState",
    "accept",
    "watch_resource",
]
