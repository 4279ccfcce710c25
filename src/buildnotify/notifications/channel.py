"""
DeliveryChannel — abstract base class for outbound message delivery.

Each implementation (Flowdock, console) inherits from this ABC and
implements `send()`. Errors are raised to the caller; the notifier
worker logs them and moves on to the next event.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from buildnotify.notifications.message import InboxMessage


class DeliveryChannel(ABC):
    """Base class for delivery channels."""

    name: str = "unnamed"

    @abstractmethod
    async def send(self, message: InboxMessage) -> None:
        """Deliver one message. Raises on failure."""
        ...

    async def connect(self) -> None:
        """Establish connection. No-op by default."""

    async def disconnect(self) -> None:
        """Tear down connection. No-op by default."""
