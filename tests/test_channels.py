"""Delivery channel tests with mocked HTTP."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from buildnotify.notifications.message import InboxMessage


def _make_message(**kwargs) -> InboxMessage:
    defaults = {
        "source": "OpenShift",
        "project": "shop",
        "from_address": "build+ok@flowdock.com",
        "from_name": "OpenShift",
        "subject": "Build shop/web-1 Complete",
        "content": "<h3>Build shop/web-1</h3>",
    }
    defaults.update(kwargs)
    return InboxMessage(**defaults)


def _mock_client(status_error: Exception | None = None):
    mock_resp = MagicMock()
    mock_resp.raise_for_status = MagicMock(side_effect=status_error)
    mock_client = AsyncMock()
    mock_client.post = AsyncMock(return_value=mock_resp)
    mock_client.aclose = AsyncMock()
    return mock_client


# ---------------------------------------------------------------------------
# Flowdock channel
# ---------------------------------------------------------------------------


class TestFlowdockChannel:
    @pytest.mark.asyncio
    async def test_posts_to_team_inbox(self):
        from buildnotify.notifications.channels.flowdock import FlowdockChannel

        ch = FlowdockChannel(token="flow-token")
        mock_client = _mock_client()

        with patch("buildnotify.notifications.channels.flowdock.httpx.AsyncClient", return_value=mock_client):
            await ch.send(_make_message(tags=["ci"]))

        mock_client.post.assert_awaited_once()
        url = mock_client.post.call_args[0][0]
        payload = mock_client.post.call_args[1]["json"]
        assert url == "https://api.flowdock.com/v1/messages/team_inbox/flow-token"
        assert payload == {
            "source": "OpenShift",
            "from_address": "build+ok@flowdock.com",
            "subject": "Build shop/web-1 Complete",
            "content": "<h3>Build shop/web-1</h3>",
            "from_name": "OpenShift",
            "project": "shop",
            "tags": ["ci"],
        }
        mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_optional_fields_omitted(self):
        from buildnotify.notifications.channels.flowdock import FlowdockChannel

        ch = FlowdockChannel(token="t")
        mock_client = _mock_client()

        with patch("buildnotify.notifications.channels.flowdock.httpx.AsyncClient", return_value=mock_client):
            await ch.send(_make_message(project="", from_name=""))

        payload = mock_client.post.call_args[1]["json"]
        assert "project" not in payload
        assert "from_name" not in payload
        assert "tags" not in payload
        assert set(payload) == {"source", "from_address", "subject", "content"}

    @pytest.mark.asyncio
    async def test_http_error_raised(self):
        from buildnotify.notifications.channels.flowdock import FlowdockChannel

        ch = FlowdockChannel(token="t")
        request = httpx.Request("POST", "https://api.flowdock.com")
        error = httpx.HTTPStatusError(
            "401", request=request, response=httpx.Response(401, request=request)
        )
        mock_client = _mock_client(status_error=error)

        with patch("buildnotify.notifications.channels.flowdock.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(httpx.HTTPStatusError):
                await ch.send(_make_message())
        mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connected_client_reused(self):
        from buildnotify.notifications.channels.flowdock import FlowdockChannel

        ch = FlowdockChannel(token="t")
        mock_client = _mock_client()

        with patch("buildnotify.notifications.channels.flowdock.httpx.AsyncClient", return_value=mock_client):
            await ch.connect()
            await ch.send(_make_message())
            await ch.send(_make_message())
            mock_client.aclose.assert_not_awaited()
            await ch.disconnect()

        assert mock_client.post.await_count == 2
        mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_with_mock_transport(self):
        from buildnotify.notifications.channels.flowdock import FlowdockChannel

        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        ch = FlowdockChannel(token="t", base_url="https://flowdock.test/v1")
        ch._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        await ch.send(_make_message())
        await ch.disconnect()

        assert seen[0].url == "https://flowdock.test/v1/messages/team_inbox/t"


# ---------------------------------------------------------------------------
# Console channel
# ---------------------------------------------------------------------------


class TestConsoleChannel:
    @pytest.mark.asyncio
    async def test_prints_panel(self):
        from rich.panel import Panel

        from buildnotify.notifications.channels.console import ConsoleChannel

        mock_console = MagicMock()
        ch = ConsoleChannel(console=mock_console)
        await ch.send(_make_message())

        panel = mock_console.print.call_args[0][0]
        assert isinstance(panel, Panel)
        assert panel.border_style == "green"
        assert "Build shop/web-1 Complete" in panel.title

    @pytest.mark.asyncio
    async def test_content_not_treated_as_markup(self):
        from buildnotify.notifications.channels.console import ConsoleChannel

        mock_console = MagicMock()
        ch = ConsoleChannel(console=mock_console)
        await ch.send(_make_message(content="[bold]not markup[/bold]", from_address="x@example.org"))

        panel = mock_console.print.call_args[0][0]
        assert panel.renderable.plain == "[bold]not markup[/bold]"
        assert panel.border_style == "blue"
