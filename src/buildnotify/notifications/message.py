"""
InboxMessage — the rendered notification handed to a delivery channel.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class InboxMessage(BaseModel):
    """One outbound team-inbox message."""

    source: str
    project: str = ""
    from_address: str
    from_name: str = ""
    subject: str
    content: str
    tags: list[str] = Field(default_factory=list)
