"""
Console channel — Rich terminal output instead of real delivery.

Used by `buildnotify run --dry-run` to see what would be sent.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from buildnotify.notifications.channel import DeliveryChannel
from buildnotify.notifications.config import (
    DEFAULT_FAILURE_FROM_ADDRESS,
    DEFAULT_SUCCESS_FROM_ADDRESS,
)
from buildnotify.notifications.message import InboxMessage

_FROM_STYLE = {
    DEFAULT_SUCCESS_FROM_ADDRESS: "green",
    DEFAULT_FAILURE_FROM_ADDRESS: "red",
}


class ConsoleChannel(DeliveryChannel):
    """Rich terminal output channel."""

    name: str = "console"

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    async def send(self, message: InboxMessage) -> None:
        style = _FROM_STYLE.get(message.from_address, "blue")
        title = f"{escape(message.subject)} [dim]({escape(message.from_name)} <{message.from_address}>)[/dim]"
        subtitle = escape(f"{message.source} · {message.project}" if message.project else message.source)
        self._console.print(
            Panel(
                Text(message.content),
                title=title,
                subtitle=subtitle,
                border_style=style,
            )
        )
