"""
Interfaces the pipeline needs from the cluster.

`EventSource` is consumed by the watch loop, `Enricher` by the event
adapter when a template asks for logs, events, node or console URL.
`OpenShiftClient` implements both against the REST API; tests provide
in-memory versions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from buildnotify.cluster.models import Build, ResourceList, WatchEvent


class WatchStream(ABC):
    """An open subscription yielding watch events until the server closes it."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[WatchEvent]:
        ...

    async def aclose(self) -> None:
        """Release the underlying connection. No-op by default."""


class EventSource(ABC):
    """Lists resource collections and subscribes to their changes."""

    @abstractmethod
    async def default_namespace(self) -> str:
        ...

    @abstractmethod
    async def list_collections(
        self,
        resource_type: str,
        namespace: Optional[str],
        all_namespaces: bool = False,
    ) -> list[ResourceList]:
        """List the collections matched by `resource_type` in the given scope."""
        ...

    @abstractmethod
    async def watch(self, collection: ResourceList, resource_version: str) -> WatchStream:
        """Open a subscription on `collection` starting after `resource_version`.

        Raises if the subscription cannot be established.
        """
        ...


class Enricher(ABC):
    """On-demand lookups for details not carried by the watch event itself."""

    @abstractmethod
    async def build_logs(self, build: Build) -> str:
        ...

    @abstractmethod
    async def build_events(self, build: Build) -> list[str]:
        ...

    @abstractmethod
    async def build_node_name(self, build: Build) -> str:
        ...

    @abstractmethod
    async def console_url(self, build: Build) -> str:
        ...
