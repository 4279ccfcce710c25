"""
Wire models for the OpenShift REST API.

Only the fields the watch/notify pipeline reads are declared; everything
else in the payloads is ignored. Models are frozen so that projections
built on top of them can never mutate the underlying resource.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class BuildPhase(str, Enum):
    NEW = "New"
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"
    CANCELLED = "Cancelled"


class WatchEventType(str, Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class ObjectMeta(_ApiModel):
    name: str = ""
    namespace: str = ""
    resource_version: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)


class GitSource(_ApiModel):
    uri: str = ""
    ref: str = ""


class BuildSource(_ApiModel):
    git: Optional[GitSource] = None


class GitRevision(_ApiModel):
    commit: str = ""
    message: str = ""


class SourceRevision(_ApiModel):
    git: Optional[GitRevision] = None


class BuildSpec(_ApiModel):
    source: BuildSource = Field(default_factory=BuildSource)
    revision: Optional[SourceRevision] = None


class ObjectReference(_ApiModel):
    name: str = ""
    namespace: str = ""


class BuildStatus(_ApiModel):
    phase: BuildPhase = BuildPhase.NEW
    start_timestamp: Optional[datetime] = None
    completion_timestamp: Optional[datetime] = None
    duration: int = 0  # nanoseconds
    output_docker_image_reference: str = ""
    config: Optional[ObjectReference] = None
    message: str = ""


class Build(_ApiModel):
    kind: str = "Build"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: BuildSpec = Field(default_factory=BuildSpec)
    status: BuildStatus = Field(default_factory=BuildStatus)


class WatchEvent(_ApiModel):
    """One notification received from a watch stream."""

    type: WatchEventType
    object: dict[str, Any] = Field(default_factory=dict)


class ResourceList(_ApiModel):
    """A listed resource collection, with the version marker to watch from."""

    resource_type: str
    path: str
    namespace: Optional[str] = None
    resource_version: str = ""


class EventOrigin(_ApiModel):
    component: str = ""
    host: str = ""


class ClusterEvent(_ApiModel):
    """A core/v1 Event attached to a build or its pod."""

    source: EventOrigin = Field(default_factory=EventOrigin)
    message: str = ""
    count: int = 0
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None

    def describe(self) -> str:
        where = f"From {self.source.component}"
        if self.source.host:
            where += f" on {self.source.host}"
        return (
            f"{where}: {self.message} (seen {self.count} times between "
            f"{self.first_timestamp} and {self.last_timestamp})"
        )
