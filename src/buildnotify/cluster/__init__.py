"""
Cluster access — the remote event source and the enrichment lookups
used while rendering notifications.
"""

from buildnotify.cluster.models import (
    Build,
    BuildPhase,
    ClusterEvent,
    ResourceList,
    WatchEvent,
    WatchEventType,
)
from buildnotify.cluster.source import Enricher, EventSource, WatchStream

__all__ = [
    "Build",
    "BuildPhase",
    "ClusterEvent",
    "Enricher",
    "EventSource",
    "ResourceList",
    "WatchEvent",
    "WatchEventType",
    "WatchStream",
]
