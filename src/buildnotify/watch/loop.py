"""
ResourceWatch — a resumable subscription to one resource type.

The watch alternates between two states:

    LISTING ──(list ok, subscribed)──▶ SUBSCRIBED
       ▲                                  │
       └────────(stream closed)───────────┘

LISTING resolves the namespace, lists the collection to learn its
current resourceVersion and opens a watch from there. SUBSCRIBED feeds
every notification to the callback until the server closes the stream,
which is a normal occurrence (idle timeouts) and leads back to LISTING.

`run()` only ever exits by raising: any error while listing or
subscribing is fatal for the watch and propagates to the caller.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, NoReturn, Optional

from buildnotify.cluster.models import WatchEvent
from buildnotify.cluster.source import EventSource, WatchStream
from buildnotify.errors import WatchError

logger = logging.getLogger(__name__)

WatchCallback = Callable[[WatchEvent], Awaitable[None]]


class WatchState(str, Enum):
    LISTING = "listing"
    SUBSCRIBED = "subscribed"


class ResourceWatch:
    """Watch one resource type in a namespace (or all of them), forever."""

    def __init__(
        self,
        source: EventSource,
        resource_type: str,
        *,
        namespace: str = "",
        all_namespaces: bool = False,
    ) -> None:
        self.source = source
        self.resource_type = resource_type
        self.namespace = namespace
        self.all_namespaces = all_namespaces
        self.state = WatchState.LISTING
        self.subscriptions = 0

    @property
    def scope(self) -> str:
        if self.all_namespaces:
            return "all namespaces"
        return f"namespace {self.namespace or '<unresolved>'}"

    async def run(self, callback: WatchCallback) -> NoReturn:
        while True:
            stream = await self._subscribe()
            self.state = WatchState.SUBSCRIBED
            await self._consume(stream, callback)
            self.state = WatchState.LISTING

    async def _resolve_namespace(self) -> Optional[str]:
        if self.all_namespaces:
            return None
        if not self.namespace:
            self.namespace = await self.source.default_namespace()
        return self.namespace

    async def _subscribe(self) -> WatchStream:
        namespace = await self._resolve_namespace()
        collections = await self.source.list_collections(
            self.resource_type, namespace, self.all_namespaces
        )
        if len(collections) != 1:
            raise WatchError(
                "watch is only supported on individual resources and resource "
                f"collections - {len(collections)} resources were found"
            )
        collection = collections[0]
        if not collection.resource_version:
            raise WatchError(f"no resourceVersion returned when listing {collection.path}")

        stream = await self.source.watch(collection, collection.resource_version)
        self.subscriptions += 1
        logger.debug(
            "Starting watch loop on %s resource type for %s (resourceVersion %s)",
            self.resource_type,
            self.scope,
            collection.resource_version,
        )
        return stream

    async def _consume(self, stream: WatchStream, callback: WatchCallback) -> None:
        try:
            async for event in stream:
                logger.debug("Got %s event on %s", event.type.value, self.resource_type)
                await callback(event)
        finally:
            await stream.aclose()
        logger.debug(
            "Watch channel has been closed, end of watch loop on %s resource type for %s",
            self.resource_type,
            self.scope,
        )


async def watch_resource(
    source: EventSource,
    resource_type: str,
    callback: WatchCallback,
    *,
    namespace: str = "",
    all_namespaces: bool = False,
) -> NoReturn:
    """Shorthand for `ResourceWatch(...).run(callback)`."""
    watch = ResourceWatch(
        source, resource_type, namespace=namespace, all_namespaces=all_namespaces
    )
    await watch.run(callback)
