"""
Configuration model for Flowdock notifiers.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from buildnotify.notifications.templates import (
    DEFAULT_CONTENT_TEMPLATE,
    DEFAULT_SUBJECT_TEMPLATE,
)

DEFAULT_NOTIFIER_NAME = "default"
DEFAULT_SUCCESS_FROM_ADDRESS = "build+ok@flowdock.com"
DEFAULT_FAILURE_FROM_ADDRESS = "build+fail@flowdock.com"
DEFAULT_FROM_ADDRESS = "openshift@example.org"
DEFAULT_FROM_NAME = "OpenShift"
DEFAULT_SOURCE = "OpenShift"


class FlowdockNotifierConfig(BaseModel):
    """Configuration for a single Flowdock team-inbox notifier."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = ""
    subject_template: str = ""
    content_template: str = ""
    from_address: str = ""
    from_name: str = ""
    source: str = ""
    tags: list[str] = Field(default_factory=list)

    def set_defaults(self) -> None:
        if not self.subject_template:
            self.subject_template = DEFAULT_SUBJECT_TEMPLATE
        if not self.content_template:
            self.content_template = DEFAULT_CONTENT_TEMPLATE
        if not self.from_address:
            self.from_address = DEFAULT_FROM_ADDRESS
        if not self.from_name:
            self.from_name = DEFAULT_FROM_NAME
        if not self.source:
            self.source = DEFAULT_SOURCE

    def describe(self) -> str:
        token = f"{self.token[:4]}…" if self.token else "<unset>"
        return (
            f"token={token} source={self.source!r} from={self.from_name!r} "
            f"<{self.from_address}> tags={self.tags}"
        )
