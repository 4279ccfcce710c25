"""
NotificationRouter — fans a watcher's accepted events out to its notifiers.

Notifier names are resolved against the registry when the router is
built, so a watcher pointing only at unknown notifiers fails at startup
rather than when its first event arrives.
"""

from __future__ import annotations

import logging
from typing import Iterable

from buildnotify.errors import ConfigError
from buildnotify.events.base import Event
from buildnotify.notifications.notifier import Notifier
from buildnotify.notifications.registry import NotifierRegistry

logger = logging.getLogger(__name__)


class NotificationRouter:
    """Dispatches events to the notifiers configured for one watcher."""

    def __init__(
        self,
        watcher_name: str,
        notifier_names: Iterable[str],
        registry: NotifierRegistry,
    ) -> None:
        self.watcher_name = watcher_name
        self.targets: list[Notifier] = []
        for name in notifier_names:
            notifier = registry.get(name)
            if notifier is None:
                logger.warning("Watcher %s refers to unknown notifier %r, skipping it", watcher_name, name)
                continue
            self.targets.append(notifier)
        if not self.targets:
            raise ConfigError(f"no notifiers for watcher {watcher_name}!")

    async def dispatch(self, event: Event) -> None:
        """Hand the event to every target in turn, waiting on busy ones."""
        for notifier in self.targets:
            await notifier.submit(event)
