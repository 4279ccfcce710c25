"""
BuildsWatcher — one configured watch on builds, wired to its notifiers.

For every notification received on the watch, the watcher wraps it in a
BuildEvent, applies its acceptance policy and routes accepted events to
its notifiers. Routing is awaited inside the watch callback, so events
reach each notifier in the order the cluster emitted them.
"""

from __future__ import annotations

import logging
from typing import NoReturn, Optional

from buildnotify.cluster.models import WatchEvent
from buildnotify.cluster.source import Enricher, EventSource
from buildnotify.events.build import BuildEvent
from buildnotify.notifications.registry import NotifierRegistry
from buildnotify.notifications.router import NotificationRouter
from buildnotify.watch.config import BuildsWatcherConfig
from buildnotify.watch.filter import accept
from buildnotify.watch.loop import ResourceWatch

logger = logging.getLogger(__name__)

BUILDS_RESOURCE_TYPE = "builds"


class BuildsWatcher:
    """Watches builds and forwards accepted events to a set of notifiers."""

    def __init__(
        self,
        name: str,
        config: BuildsWatcherConfig,
        source: EventSource,
        registry: NotifierRegistry,
        enricher: Optional[Enricher] = None,
    ) -> None:
        self.name = name
        self.config = config
        self.enricher = enricher
        self.router = NotificationRouter(name, config.notifiers, registry)
        self.watch = ResourceWatch(
            source,
            BUILDS_RESOURCE_TYPE,
            namespace="" if config.all_namespaces else config.namespace,
            all_namespaces=config.all_namespaces,
        )

    def __repr__(self) -> str:
        return f"<BuildsWatcher {self.name} ({self.watch.scope})>"

    async def handle(self, raw: WatchEvent) -> None:
        event = BuildEvent(raw, self.enricher)
        if accept(self.config, event):
            logger.debug("Watcher %s accepting %r", self.name, event)
            await self.router.dispatch(event)
        else:
            logger.debug("Watcher %s NOT accepting %r", self.name, event)

    async def run(self) -> NoReturn:
        logger.info(
            "Watcher %s: watching builds in %s - and notifying %d flows",
            self.name,
            self.watch.scope,
            len(self.router.targets),
        )
        await self.watch.run(self.handle)
