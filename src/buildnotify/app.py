"""
Application — wires watchers to notifiers and supervises their tasks.

One asyncio task runs per notifier and one per watcher for the lifetime
of the process. The supervisor waits for either a stop request (signal)
or the first watcher to fail; a watcher failure is fatal for the whole
process. Shutdown is abrupt: remaining tasks are cancelled, queued
events are not drained.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from buildnotify.cluster.source import Enricher, EventSource
from buildnotify.core import AppConfig
from buildnotify.errors import ConfigError, WatchError
from buildnotify.notifications.registry import ChannelFactory, NotifierRegistry
from buildnotify.watch.watcher import BuildsWatcher

logger = logging.getLogger(__name__)


class Application:
    """Owns the notifier registry and the watchers built on top of it."""

    def __init__(self, registry: NotifierRegistry, watchers: list[BuildsWatcher]) -> None:
        self.registry = registry
        self.watchers = watchers

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        source: EventSource,
        enricher: Optional[Enricher] = None,
        channel_factory: Optional[ChannelFactory] = None,
    ) -> Application:
        """Validate the configuration and build every runtime component.

        Raises ConfigError for missing watchers/notifiers, malformed
        templates, or a watcher with no resolvable notifier.
        """
        if not config.has_watchers():
            raise ConfigError("No watchers have been defined in the configuration")
        if not config.has_notifiers():
            raise ConfigError("No notifiers have been defined in the configuration")

        registry = NotifierRegistry.from_config(config.notifiers, channel_factory)
        watchers = [
            BuildsWatcher(name, watcher_config, source, registry, enricher)
            for name, watcher_config in config.builds_watchers.items()
        ]
        return cls(registry, watchers)

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        """Run until `stop` is set or a watcher fails (re-raising its error)."""
        stop = stop or asyncio.Event()
        await self.registry.connect_all()

        notifier_tasks = [
            asyncio.create_task(notifier.run(), name=f"notifier:{name}")
            for name, notifier in self.registry.items()
        ]
        watcher_tasks = {
            asyncio.create_task(watcher.run(), name=f"watcher:{watcher.name}"): watcher
            for watcher in self.watchers
        }
        stop_task = asyncio.create_task(stop.wait(), name="stop")

        try:
            done, _ = await asyncio.wait(
                [stop_task, *watcher_tasks], return_when=asyncio.FIRST_COMPLETED
            )
            for task in done:
                if task is stop_task:
                    continue
                watcher = watcher_tasks[task]
                error = task.exception()
                if error is None:
                    error = WatchError(f"watcher {watcher.name} stopped unexpectedly")
                logger.error("Error caught while watching (watcher %s): %s", watcher.name, error)
                raise error
            logger.info("Interrupted by user (or killed)!")
        finally:
            pending = [stop_task, *watcher_tasks, *notifier_tasks]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            await self.registry.disconnect_all()
