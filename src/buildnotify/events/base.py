"""
Event — the capability set templates and filters rely on.

One concrete adapter exists today (`BuildEvent`); other resource kinds
can implement this ABC without touching the filter, the router or the
notifier worker.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

from buildnotify.cluster.models import WatchEventType


class Event(ABC):
    """Read-only projection of one lifecycle transition of a watched resource."""

    @property
    @abstractmethod
    def event_type(self) -> WatchEventType:
        """Type tag of the raw watch notification (ADDED, MODIFIED, ...)."""

    @property
    @abstractmethod
    def phase(self) -> str:
        """Lifecycle phase of the resource, as used by phase tables."""

    @property
    @abstractmethod
    def namespace(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def object_type(self) -> str: ...

    @property
    @abstractmethod
    def start_time(self) -> Optional[datetime]: ...

    @property
    @abstractmethod
    def end_time(self) -> Optional[datetime]: ...

    @property
    @abstractmethod
    def duration(self) -> timedelta: ...

    @property
    @abstractmethod
    def input(self) -> str: ...

    @property
    @abstractmethod
    def output(self) -> str: ...

    @property
    def status(self) -> str:
        return str(getattr(self.phase, "value", self.phase))

    @abstractmethod
    def is_success(self) -> bool: ...

    @abstractmethod
    def is_failure(self) -> bool: ...

    # Lazily fetched details. Implementations return an inline error
    # string instead of raising so that rendering never aborts.

    @abstractmethod
    async def logs(self) -> str: ...

    @abstractmethod
    async def events(self) -> list[str]: ...

    @abstractmethod
    async def node_name(self) -> str: ...

    @abstractmethod
    async def console_url(self) -> str: ...

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.event_type.value} "
            f"{self.object_type} {self.namespace}/{self.name} {self.status}>"
        )
