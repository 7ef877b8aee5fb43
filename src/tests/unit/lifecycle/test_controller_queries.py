"""Unit tests for ServerLifecycleController status and logs queries."""

from unittest.mock import AsyncMock

from hugin.errors import ContainerNotFoundError, RuntimeUnavailableError
from hugin.lifecycle import ServerLifecycleController, render_logs
from hugin.models import ContainerObservation, LogBundle


class TestGetStatus:
    """Tests for get_status."""

    async def test_unknown_channel(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        result = await controller.get_status(999, responder)

        assert result is None
        assert mock_runtime.mock_calls == []
        assert responder.last.content == "No server is assigned to this channel."

    async def test_online(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        result = await controller.get_status(100, responder)

        assert result is True
        mock_runtime.inspect.assert_called_once_with("minecraft")
        assert responder.messages[0] == "Getting server status..."

        reply = responder.last
        assert reply.content is None
        assert reply.panel is not None
        assert reply.panel.title == "Minecraft"
        assert [(f.name, f.value) for f in reply.panel.fields] == [("Status", "Online")]

    async def test_offline(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.inspect.return_value = ContainerObservation(id="abc123", running=False)

        result = await controller.get_status(100, responder)

        assert result is False
        assert responder.last.panel.fields[0].value == "Offline"

    async def test_runtime_error_reports_offline(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        """Errors are never surfaced; the user only sees Online/Offline."""
        mock_runtime.inspect.side_effect = RuntimeUnavailableError("connection refused")

        result = await controller.get_status(100, responder)

        assert result is False
        assert responder.last.panel.fields[0].value == "Offline"
        assert "connection refused" not in str(responder.replies)

    async def test_uses_channel_server(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        await controller.get_status(200, responder)

        mock_runtime.inspect.assert_called_once_with("valheim")
        assert responder.last.panel.title == "Valheim"


class TestGetLogs:
    """Tests for get_logs."""

    async def test_unknown_channel(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        result = await controller.get_logs(999, responder)

        assert result is None
        assert mock_runtime.mock_calls == []
        assert responder.messages == [
            "Getting server logs...",
            "No server is assigned to this channel.",
        ]

    async def test_fetches_by_live_container_id(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.inspect.return_value = ContainerObservation(id="f00d", running=True)
        mock_runtime.fetch_logs.return_value = LogBundle(stdout="hello\n", stderr="oops\n")

        await controller.get_logs(100, responder)

        mock_runtime.fetch_logs.assert_called_once_with("f00d")
        attachments = responder.last.attachments
        assert [a.filename for a in attachments] == ["stdout.txt", "stderr.txt"]
        assert attachments[0].content == b"hello\n"
        assert attachments[1].content == b"oops\n"

    async def test_empty_logs(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.fetch_logs.return_value = LogBundle(stdout="", stderr="")

        await controller.get_logs(100, responder)

        assert responder.last.content == "No logs available."
        assert responder.last.attachments == []

    async def test_only_stderr(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.fetch_logs.return_value = LogBundle(stdout="  \n", stderr="Traceback\n")

        await controller.get_logs(100, responder)

        attachments = responder.last.attachments
        assert len(attachments) == 1
        assert attachments[0].filename == "stderr.txt"

    async def test_inspect_failure_reports_no_logs(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.inspect.side_effect = ContainerNotFoundError()

        result = await controller.get_logs(100, responder)

        assert result is not None and result.is_empty
        mock_runtime.fetch_logs.assert_not_called()
        assert responder.last.content == "No logs available."

    async def test_fetch_failure_reports_no_logs(
        self,
        controller: ServerLifecycleController,
        mock_runtime: AsyncMock,
        responder,
    ) -> None:
        mock_runtime.fetch_logs.side_effect = RuntimeUnavailableError()

        await controller.get_logs(100, responder)

        assert responder.last.content == "No logs available."


class TestRenderLogs:
    """Tests for render_logs."""

    def test_only_stdout(self) -> None:
        reply = render_logs(LogBundle(stdout="started"))

        assert [a.filename for a in reply.attachments] == ["stdout.txt"]
        assert reply.content == "\u200b"

    def test_no_truncation(self) -> None:
        big = "x" * 1_000_000
        reply = render_logs(LogBundle(stdout=big))

        assert len(reply.attachments[0].content) == 1_000_000
