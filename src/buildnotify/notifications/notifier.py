"""
Notifier — a single-consumer worker delivering events to one destination.

Each notifier owns a one-slot queue. Watchers hand events over with
`submit()`, which waits while the slot is taken, so a slow destination
holds back the watchers feeding it instead of dropping events. The
worker renders the subject and content templates, picks the sender
address from the event outcome and performs one delivery attempt per
event; a failed delivery is logged and the worker moves on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Union

from buildnotify.events.base import Event
from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.config import (
    DEFAULT_FAILURE_FROM_ADDRESS,
    DEFAULT_SUCCESS_FROM_ADDRESS,
    FlowdockNotifierConfig,
)
from buildnotify.notifications.message import InboxMessage
from buildnotify.notifications.templates import compile_template, render

logger = logging.getLogger(__name__)


class _Closed:
    def __repr__(self) -> str:
        return "<closed>"


CLOSED = _Closed()


class Notifier:
    """Renders and delivers the events submitted to it, one at a time."""

    def __init__(
        self,
        name: str,
        config: FlowdockNotifierConfig,
        channel: DeliveryChannel,
    ) -> None:
        self.name = name
        self.config = config
        self.channel = channel
        self.subject_template = compile_template(config.subject_template, f"{name} subject")
        self.content_template = compile_template(config.content_template, f"{name} content")
        self._queue: asyncio.Queue[Union[Event, _Closed]] = asyncio.Queue(maxsize=1)
        self.delivered = 0
        self.failed = 0

    def __repr__(self) -> str:
        return f"<Notifier {self.name} via {self.channel.name}>"

    async def submit(self, event: Event) -> None:
        """Queue an event for delivery, waiting while the worker is busy."""
        await self._queue.put(event)

    async def close(self) -> None:
        """Close the queue. The worker stops once it reaches the marker."""
        await self._queue.put(CLOSED)

    async def run(self) -> None:
        logger.debug("Notifier %s started", self.name)
        while True:
            item = await self._queue.get()
            if isinstance(item, _Closed):
                logger.error("Notifier %s channel has been closed!", self.name)
                break
            try:
                await self.send_notification(item)
                self.delivered += 1
            except Exception:
                self.failed += 1
                logger.exception(
                    "Notifier %s failed to deliver a message for %s %s/%s",
                    self.name,
                    item.object_type,
                    item.namespace,
                    item.name,
                )

    def from_address(self, event: Event) -> str:
        if event.is_success():
            return DEFAULT_SUCCESS_FROM_ADDRESS
        if event.is_failure():
            return DEFAULT_FAILURE_FROM_ADDRESS
        return self.config.from_address

    async def build_message(self, event: Event) -> InboxMessage:
        subject = await render(self.subject_template, event)
        content = await render(self.content_template, event)
        return InboxMessage(
            source=self.config.source,
            project=event.namespace,
            from_address=self.from_address(event),
            from_name=self.config.from_name,
            subject=subject,
            content=content,
            tags=list(self.config.tags),
        )

    async def send_notification(self, event: Event) -> None:
        message = await self.build_message(event)
        logger.debug("Sending an inbox message via %s: %s", self.channel.name, message.subject)
        await self.channel.send(message)
