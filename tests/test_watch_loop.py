"""Tests for the resumable watch loop."""

import httpx
import pytest

from buildnotify.cluster.models import WatchEventType
from buildnotify.errors import WatchError
from buildnotify.watch.loop import ResourceWatch, WatchState, watch_resource


class Collector:
    def __init__(self):
        self.events = []

    async def __call__(self, event):
        self.events.append(event)


class TestResubscription:
    @pytest.mark.asyncio
    async def test_closed_stream_relists_and_resubscribes(self, fake_source, raw_event):
        first = raw_event(name="app-1")
        second = raw_event(name="app-2", phase="Failed")
        source = fake_source([[], [first, second]])
        collect = Collector()

        watch = ResourceWatch(source, "builds", namespace="myproject")
        with pytest.raises(RuntimeError, match="exhausted"):
            await watch.run(collect)

        assert collect.events == [first, second]
        assert len(source.list_calls) == 3
        assert source.watch_calls == ["1", "2"]
        assert watch.subscriptions == 2
        assert all(stream.closed for stream in source.opened)

    @pytest.mark.asyncio
    async def test_events_delivered_in_source_order_across_streams(self, fake_source, raw_event):
        batches = [
            [raw_event(name=f"app-{i}") for i in range(3)],
            [raw_event(name=f"app-{i}") for i in range(3, 5)],
        ]
        source = fake_source(batches)
        collect = Collector()

        with pytest.raises(RuntimeError):
            await watch_resource(source, "builds", collect, namespace="myproject")

        assert [e.object["metadata"]["name"] for e in collect.events] == [
            "app-0", "app-1", "app-2", "app-3", "app-4",
        ]

    @pytest.mark.asyncio
    async def test_state_returns_to_listing(self, fake_source):
        source = fake_source([[]])
        watch = ResourceWatch(source, "builds", namespace="ns")
        assert watch.state is WatchState.LISTING
        with pytest.raises(RuntimeError):
            await watch.run(Collector())
        assert watch.state is WatchState.LISTING


    @pytest.mark.asyncio
    async def test_events_consumed_while_subscribed(self, fake_source, raw_event):
        source = fake_source([[raw_event(name="app-1")], [raw_event(name="app-2")]])
        watch = ResourceWatch(source, "builds", namespace="ns")
        states = []

        async def record_state(event):
            states.append(watch.state)

        with pytest.raises(RuntimeError):
            await watch.run(record_state)
        assert states == [WatchState.SUBSCRIBED, WatchState.SUBSCRIBED]
        assert watch.state is WatchState.LISTING


class TestNamespaceResolution:
    @pytest.mark.asyncio
    async def test_default_namespace_used_when_unset(self, fake_source):
        source = fake_source([[]], namespace="from-context")
        watch = ResourceWatch(source, "builds")
        with pytest.raises(RuntimeError):
            await watch.run(Collector())
        assert source.list_calls[0] == ("builds", "from-context", False)
        assert watch.namespace == "from-context"

    @pytest.mark.asyncio
    async def test_explicit_namespace_wins(self, fake_source):
        source = fake_source([[]], namespace="from-context")
        with pytest.raises(RuntimeError):
            await ResourceWatch(source, "builds", namespace="mine").run(Collector())
        assert source.list_calls[0] == ("builds", "mine", False)

    @pytest.mark.asyncio
    async def test_all_namespaces_skips_lookup(self, fake_source):
        source = fake_source([[]], namespace="from-context")
        watch = ResourceWatch(source, "builds", all_namespaces=True)
        with pytest.raises(RuntimeError):
            await watch.run(Collector())
        assert source.list_calls[0] == ("builds", None, True)
        assert watch.scope == "all namespaces"


class TestFatalErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 2])
    async def test_collection_count_other_than_one(self, fake_source, count):
        source = fake_source([[]], collections=count)
        with pytest.raises(WatchError, match=f"{count} resources were found"):
            await ResourceWatch(source, "builds", namespace="ns").run(Collector())
        assert source.watch_calls == []

    @pytest.mark.asyncio
    async def test_missing_resource_version(self, fake_source):
        source = fake_source([[]])

        async def list_without_version(resource_type, namespace, all_namespaces=False):
            collections = await type(source).list_collections(source, resource_type, namespace, all_namespaces)
            return [c.model_copy(update={"resource_version": ""}) for c in collections]

        source.list_collections = list_without_version
        with pytest.raises(WatchError, match="resourceVersion"):
            await ResourceWatch(source, "builds", namespace="ns").run(Collector())

    @pytest.mark.asyncio
    async def test_subscription_failure_propagates(self, fake_source):
        source = fake_source([[]])
        request = httpx.Request("GET", "https://api/builds")

        async def refuse(collection, resource_version):
            raise httpx.HTTPStatusError(
                "forbidden", request=request, response=httpx.Response(403, request=request)
            )

        source.watch = refuse
        with pytest.raises(httpx.HTTPStatusError):
            await ResourceWatch(source, "builds", namespace="ns").run(Collector())

    @pytest.mark.asyncio
    async def test_callback_error_propagates(self, fake_source, raw_event):
        source = fake_source([[raw_event(WatchEventType.ADDED)]])

        async def explode(event):
            raise TypeError("not a build")

        with pytest.raises(TypeError):
            await ResourceWatch(source, "builds", namespace="ns").run(explode)
        assert source.opened[0].closed
