"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional

import pytest

from buildnotify.cluster.models import ResourceList, WatchEvent, WatchEventType
from buildnotify.cluster.source import EventSource, WatchStream
from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.message import InboxMessage


def make_build(
    name: str = "app-1",
    namespace: str = "myproject",
    phase: str = "Complete",
    **status: Any,
) -> dict[str, Any]:
    """A build object as returned by the API server."""
    return {
        "kind": "Build",
        "apiVersion": "build.openshift.io/v1",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": "42",
            "annotations": {"openshift.io/build.pod-name": f"{name}-build"},
            "labels": {"openshift.io/build-config.name": name.rsplit("-", 1)[0]},
        },
        "spec": {
            "source": {"git": {"uri": "https://github.com/org/repo.git"}},
            "revision": {"git": {"commit": "abc123"}},
        },
        "status": {"phase": phase, **status},
    }


def make_raw(
    event_type: WatchEventType = WatchEventType.MODIFIED,
    **build: Any,
) -> WatchEvent:
    return WatchEvent(type=event_type, object=make_build(**build))


class FakeStream(WatchStream):
    """Serves a fixed list of events, then closes."""

    def __init__(self, events: list[WatchEvent]) -> None:
        self.events = events
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[WatchEvent]:
        for event in self.events:
            yield event

    async def aclose(self) -> None:
        self.closed = True


class FakeSource(EventSource):
    """In-memory event source: one stream per subscription, then exhaustion."""

    def __init__(
        self,
        streams: list[list[WatchEvent]],
        *,
        namespace: str = "myproject",
        collections: int = 1,
    ) -> None:
        self.streams = list(streams)
        self.namespace = namespace
        self.collections = collections
        self.list_calls: list[tuple[str, Optional[str], bool]] = []
        self.watch_calls: list[str] = []
        self.opened: list[FakeStream] = []

    async def default_namespace(self) -> str:
        return self.namespace

    async def list_collections(self, resource_type, namespace, all_namespaces=False):
        self.list_calls.append((resource_type, namespace, all_namespaces))
        if not self.streams:
            raise RuntimeError("event source exhausted")
        version = str(len(self.list_calls))
        return [
            ResourceList(
                resource_type=resource_type,
                path=f"/apis/build.openshift.io/v1/{resource_type}",
                namespace=namespace,
                resource_version=version,
            )
            for _ in range(self.collections)
        ]

    async def watch(self, collection, resource_version):
        self.watch_calls.append(resource_version)
        stream = FakeStream(self.streams.pop(0))
        self.opened.append(stream)
        return stream


class RecordingChannel(DeliveryChannel):
    """Delivery channel keeping every message in memory."""

    def __init__(self, name: str = "recording", fail_on: Optional[set[int]] = None) -> None:
        self.name = name
        self.sent: list[InboxMessage] = []
        self.attempts = 0
        self.fail_on = fail_on or set()

    async def send(self, message: InboxMessage) -> None:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise RuntimeError(f"delivery {self.attempts} refused")
        self.sent.append(message)


@pytest.fixture
def raw_event():
    """Factory for raw watch events wrapping a build."""
    return make_raw


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def recording_channel():
    return RecordingChannel
