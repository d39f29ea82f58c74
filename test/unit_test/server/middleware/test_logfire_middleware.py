"""
Unit tests for Logfire middleware.

This test suite covers:
- Request/response processing
- Error handling and exception tracking
- Slow request detection
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from lingua_learn.server.middleware.logfire_middleware import LogfireMiddleware


def _request(method="GET", path="/api/learning-paths"):
    mock_request = AsyncMock(spec=Request)
    mock_request.method = method
    mock_request.url.path = path
    mock_request.state = MagicMock()
    return mock_request


class TestLogfireMiddlewareDispatch:
    """Test LogfireMiddleware.dispatch method."""

    @pytest.mark.asyncio
    async def test_middleware_processes_successful_request(self):
        """Test that middleware reports successful requests."""

        async def mock_call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("lingua_learn.server.middleware.logfire_middleware.log_api_request") as mock_log:
            response = await middleware.dispatch(_request(), mock_call_next)

        assert response.status_code == 200
        mock_log.assert_called_once()
        call_args = mock_log.call_args
        assert call_args[1]["method"] == "GET"
        assert call_args[1]["path"] == "/api/learning-paths"
        assert call_args[1]["status_code"] == 200
        assert call_args[1]["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_middleware_adds_process_time_header(self):
        async def mock_call_next(request):
            return Response(content="ok", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("lingua_learn.server.middleware.logfire_middleware.log_api_request"):
            response = await middleware.dispatch(_request("POST"), mock_call_next)

        assert float(response.headers["X-Process-Time"]) >= 0

    @pytest.mark.asyncio
    async def test_middleware_reports_failures_as_500_and_reraises(self):
        """Test that exceptions are logged and propagated."""

        async def failing_call_next(request):
            raise RuntimeError("boom")

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("lingua_learn.server.middleware.logfire_middleware.log_api_request") as mock_log,
            patch("lingua_learn.server.middleware.logfire_middleware.logger") as mock_logger,
        ):
            with pytest.raises(RuntimeError, match="boom"):
                await middleware.dispatch(_request(), failing_call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_slow_request_warning(self):
        async def mock_call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("lingua_learn.server.middleware.logfire_middleware.SLOW_REQUEST_MS", -1.0),
            patch("lingua_learn.server.middleware.logfire_middleware.log_api_request"),
            patch("lingua_learn.server.middleware.logfire_middleware.logger") as mock_logger,
        ):
            await middleware.dispatch(_request(), mock_call_next)

        mock_logger.warning.assert_called_once()
        assert "Slow API request" in mock_logger.warning.call_args[0][0]
