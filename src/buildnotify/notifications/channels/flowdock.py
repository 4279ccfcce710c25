"""
Flowdock channel — team inbox messages via the REST API.

Posts the rendered subject/content to the inbox of the flow identified
by the notifier's API token.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.message import InboxMessage

logger = logging.getLogger(__name__)

FLOWDOCK_API_URL = "https://api.flowdock.com/v1"


class FlowdockChannel(DeliveryChannel):
    """Flowdock team-inbox delivery channel."""

    name: str = "flowdock"

    def __init__(
        self,
        token: str,
        *,
        base_url: str = FLOWDOCK_API_URL,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def inbox_url(self) -> str:
        return f"{self.base_url}/messages/team_inbox/{self.token}"

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, message: InboxMessage) -> None:
        payload = self._build_payload(message)
        client = self._client or httpx.AsyncClient(timeout=self.timeout)
        try:
            resp = await client.post(self.inbox_url, json=payload)
            resp.raise_for_status()
            logger.debug("Successfully sent an inbox message to Flowdock: %s", resp.status_code)
        finally:
            if not self._client:
                await client.aclose()

    def _build_payload(self, message: InboxMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "source": message.source,
            "from_address": message.from_address,
            "subject": message.subject,
            "content": message.content,
        }
        if message.from_name:
            payload["from_name"] = message.from_name
        if message.project:
            payload["project"] = message.project
        if message.tags:
            payload["tags"] = message.tags
        return payload
