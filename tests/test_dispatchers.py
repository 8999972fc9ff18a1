"""Tests for scheduled event dispatchers."""

import pytest
import asyncio
import time
from unittest.mock import Mock, patch, AsyncMock
import httpx

from cronsync.dispatchers import HandlerDispatcher, HTTPDispatcher, ScheduledEvent, DispatchResult


class TestScheduledEvent:
    """Test scheduled events."""

    def test_scheduled_time_defaults_to_now(self):
        """Test scheduled time defaults to now."""
        before = time.time() * 1000
        event = ScheduledEvent(cron="* * * * *")
        after = time.time() * 1000

        assert before <= event.scheduled_time <= after
        assert event.cron == "* * * * *"

    def test_explicit_scheduled_time(self):
        """Test an explicit scheduled time is kept."""
        event = ScheduledEvent(1000.0, "0 * * * *")
        assert event.scheduled_time == 1000.0


class TestHandlerDispatcher:
    """Test in-process handler dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_calls_handler(self):
        """Test dispatch calls the handler with the event."""
        received = []

        async def handler(event):
            received.append(event)

        dispatcher = HandlerDispatcher(handler)
        result = await dispatcher.dispatch_scheduled(None, "0 * * * *")

        assert result.success is True
        assert result.error is None
        assert len(received) == 1
        assert received[0].cron == "0 * * * *"

    @pytest.mark.asyncio
    async def test_dispatch_returns_task_immediately(self):
        """Test dispatch returns a task before the handler finishes."""
        release = asyncio.Event()

        async def handler(event):
            await release.wait()

        dispatcher = HandlerDispatcher(handler)
        task = dispatcher.dispatch_scheduled(None, "* * * * *")

        assert isinstance(task, asyncio.Task)
        assert not task.done()

        release.set()
        result = await task
        assert result.success is True

    @pytest.mark.asyncio
    async def test_waits_for_wait_until(self):
        """Test dispatch waits for work registered with wait_until."""
        finished = []

        async def background():
            await asyncio.sleep(0)
            finished.append(True)

        async def handler(event):
            event.wait_until(background())

        result = await HandlerDispatcher(handler).dispatch_scheduled(None, "* * * * *")

        assert result.success is True
        assert finished == [True]

    @pytest.mark.asyncio
    async def test_handler_failure(self):
        """Test a failing handler gives a failed result."""
        async def handler(event):
            raise RuntimeError("boom")

        result = await HandlerDispatcher(handler).dispatch_scheduled(None, "* * * * *")

        assert result.success is False
        assert "boom" in result.error

    @pytest.mark.asyncio
    async def test_wait_until_failure(self):
        """Test failing wait_until work gives a failed result."""
        async def background():
            raise ValueError("late failure")

        async def handler(event):
            event.wait_until(background())

        result = await HandlerDispatcher(handler).dispatch_scheduled(None, "* * * * *")

        assert result.success is False
        assert "late failure" in result.error

    def test_result_to_dict(self):
        """Test converting a result to a dict."""
        from datetime import datetime, timezone
        now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        result = DispatchResult(success=True, started_at=now, finished_at=now, duration=0.0, status=200)

        assert result.to_dict() == {
            "success": True,
            "started_at": "2024-01-01T12:00:00+00:00",
            "finished_at": "2024-01-01T12:00:00+00:00",
            "duration": 0.0,
            "status": 200,
            "error": None
        }


class TestHTTPDispatcher:
    """Test HTTP scheduled event dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_success(self):
        """Test a successful HTTP dispatch."""
        dispatcher = HTTPDispatcher("http://localhost:8787/", timeout=10)

        with patch('httpx.AsyncClient') as MockClient:
            mock_client = AsyncMock()
            mock_client.request = AsyncMock(return_value=Mock(status_code=200))
            MockClient.return_value.__aenter__.return_value = mock_client

            result = await dispatcher.execute(None, "*/5 * * * *")

            assert result.success is True
            assert result.status == 200
            mock_client.request.assert_called_once_with(
                "GET",
                "http://localhost:8787/cdn-cgi/mf/scheduled",
                params={"cron": "*/5 * * * *"},
                timeout=10
            )

    @pytest.mark.asyncio
    async def test_dispatch_with_explicit_time(self):
        """Test an explicit time is sent as a query parameter."""
        dispatcher = HTTPDispatcher("http://localhost:8787")

        with patch('httpx.AsyncClient') as MockClient:
            mock_client = AsyncMock()
            mock_client.request = AsyncMock(return_value=Mock(status_code=200))
            MockClient.return_value.__aenter__.return_value = mock_client

            await dispatcher.execute(1000.0, "0 * * * *")

            call_kwargs = mock_client.request.call_args[1]
            assert call_kwargs["params"] == {"cron": "0 * * * *", "time": 1000}

    @pytest.mark.asyncio
    async def test_dispatch_error_status(self):
        """Test a non-2xx status gives a failed result."""
        dispatcher = HTTPDispatcher("http://localhost:8787")

        with patch('httpx.AsyncClient') as MockClient:
            mock_client = AsyncMock()
            mock_client.request = AsyncMock(return_value=Mock(status_code=500))
            MockClient.return_value.__aenter__.return_value = mock_client

            result = await dispatcher.execute(None, "* * * * *")

            assert result.success is False
            assert result.status == 500
            assert result.error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_dispatch_timeout(self):
        """Test an HTTP timeout gives a failed result."""
        dispatcher = HTTPDispatcher("http://localhost:8787", timeout=1)

        with patch('httpx.AsyncClient') as MockClient:
            mock_client = AsyncMock()
            mock_client.request = AsyncMock(side_effect=httpx.TimeoutException("timed out"))
            MockClient.return_value.__aenter__.return_value = mock_client

            result = await dispatcher.execute(None, "* * * * *")

            assert result.success is False
            assert "timeout" in result.error.lower()

    @pytest.mark.asyncio
    async def test_dispatch_connection_error(self):
        """Test a connection error gives a failed result."""
        dispatcher = HTTPDispatcher("http://localhost:8787")

        with patch('httpx.AsyncClient') as MockClient:
            mock_client = AsyncMock()
            mock_client.request = AsyncMock(side_effect=httpx.ConnectError("refused"))
            MockClient.return_value.__aenter__.return_value = mock_client

            result = await dispatcher.execute(None, "* * * * *")

            assert result.success is False
            assert "refused" in result.error
