"""
BuildEvent — the Event adapter for OpenShift builds.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional

from buildnotify.cluster.models import Build, BuildPhase, WatchEvent, WatchEventType
from buildnotify.cluster.source import Enricher
from buildnotify.events.base import Event

logger = logging.getLogger(__name__)

_FAILURE_PHASES = frozenset({BuildPhase.CANCELLED, BuildPhase.ERROR, BuildPhase.FAILED})


def commit_url(uri: str, commit: str) -> str:
    """Browsable commit URL for a git source URI.

    `git@github.com:org/repo.git` and `https://github.com/org/repo.git`
    both become `https://github.com/org/repo/commit/<commit>`.
    """
    uri = uri.removesuffix(".git")
    if uri.startswith("git"):
        uri = uri.replace("git@github.com:", "https://github.com/", 1)
    return f"{uri}/commit/{commit}"


class BuildEvent(Event):
    """Projection of a build watch notification."""

    def __init__(self, raw: WatchEvent, enricher: Enricher | None = None) -> None:
        self.raw = raw
        self._enricher = enricher
        if raw.type == WatchEventType.ERROR:
            # error notifications wrap a Status, never a Build
            self.build = Build()
            return
        kind = raw.object.get("kind", "Build")
        if kind != "Build":
            raise TypeError(f"watch event wraps a {kind!r} object, expected a Build")
        self.build = Build.model_validate(raw.object)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildEvent):
            return NotImplemented
        return self.raw == other.raw

    __hash__ = None  # type: ignore[assignment]

    @property
    def event_type(self) -> WatchEventType:
        return self.raw.type

    @property
    def phase(self) -> BuildPhase:
        return self.build.status.phase

    @property
    def namespace(self) -> str:
        return self.build.metadata.namespace

    @property
    def name(self) -> str:
        return self.build.metadata.name

    @property
    def object_type(self) -> str:
        return "Build"

    @property
    def start_time(self) -> Optional[datetime]:
        return self.build.status.start_timestamp

    @property
    def end_time(self) -> Optional[datetime]:
        return self.build.status.completion_timestamp

    @property
    def duration(self) -> timedelta:
        return timedelta(microseconds=self.build.status.duration // 1000)

    @property
    def input(self) -> str:
        spec = self.build.spec
        if spec.revision and spec.revision.git and spec.source.git:
            return commit_url(spec.source.git.uri, spec.revision.git.commit)
        return ""

    @property
    def output(self) -> str:
        return self.build.status.output_docker_image_reference

    def is_success(self) -> bool:
        return self.phase == BuildPhase.COMPLETE

    def is_failure(self) -> bool:
        return self.phase in _FAILURE_PHASES

    async def logs(self) -> str:
        return await self._lookup("build_logs", "Can't get build logs")

    async def events(self) -> list[str]:
        result = await self._lookup("build_events", "Can't get build events")
        return [result] if isinstance(result, str) else result

    async def node_name(self) -> str:
        return await self._lookup("build_node_name", "Can't get build node")

    async def console_url(self) -> str:
        return await self._lookup("console_url", "Can't get console URL")

    async def _lookup(self, method: str, failure: str) -> Any:
        if self._enricher is None:
            return f"{failure}: no cluster client available"
        fetch: Callable[[Build], Awaitable[Any]] = getattr(self._enricher, method)
        try:
            return await fetch(self.build)
        except Exception as exc:
            logger.debug("%s for %s/%s", failure, self.namespace, self.name, exc_info=True)
            return f"{failure}: {exc}"
