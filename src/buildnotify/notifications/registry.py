"""
NotifierRegistry — the read-only lookup table of running notifiers.

Built once at startup, before any task runs, and passed explicitly to
each watcher's router. Nothing can add or remove notifiers afterwards.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping, Optional

from buildnotify.errors import ConfigError
from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.channels.flowdock import FlowdockChannel
from buildnotify.notifications.config import FlowdockNotifierConfig
from buildnotify.notifications.notifier import Notifier

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[FlowdockNotifierConfig], DeliveryChannel]


def flowdock_channel(config: FlowdockNotifierConfig) -> DeliveryChannel:
    return FlowdockChannel(config.token)


class NotifierRegistry(Mapping[str, Notifier]):
    """Immutable name → Notifier mapping."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        table: dict[str, Notifier] = {}
        for notifier in notifiers:
            if notifier.name in table:
                raise ConfigError(f"duplicate notifier name {notifier.name!r}")
            table[notifier.name] = notifier
        self._table = MappingProxyType(table)

    @classmethod
    def from_config(
        cls,
        configs: Mapping[str, FlowdockNotifierConfig],
        channel_factory: Optional[ChannelFactory] = None,
    ) -> NotifierRegistry:
        """Create one notifier per config entry. Malformed templates raise ConfigError."""
        factory = channel_factory or flowdock_channel
        return cls(
            Notifier(name, config, factory(config)) for name, config in configs.items()
        )

    def __getitem__(self, name: str) -> Notifier:
        return self._table[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    async def connect_all(self) -> None:
        for notifier in self._table.values():
            try:
                await notifier.channel.connect()
            except Exception:
                logger.exception("Failed to connect notifier %s", notifier.name)

    async def disconnect_all(self) -> None:
        for notifier in self._table.values():
            try:
                await notifier.channel.disconnect()
            except Exception:
                logger.exception("Failed to disconnect notifier %s", notifier.name)
