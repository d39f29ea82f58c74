"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup creates the schema and that a database failure at
boot is logged instead of stopping the application.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

pytestmark = pytest.mark.asyncio


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_lifespan_startup_initializes_database(self):
        from lingua_learn.server.main import lifespan

        with patch("lingua_learn.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()

    async def test_lifespan_survives_database_failure(self):
        from lingua_learn.server.main import lifespan

        with (
            patch("lingua_learn.server.main.init_db", new_callable=AsyncMock, side_effect=ConnectionError("down")),
            patch("lingua_learn.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        mock_logger.error.assert_called_once()
        assert "Database initialization failed" in mock_logger.error.call_args[0][0]

    async def test_lifespan_logs_shutdown(self):
        from lingua_learn.server.main import lifespan

        with (
            patch("lingua_learn.server.main.init_db", new_callable=AsyncMock),
            patch("lingua_learn.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        messages = [call.args[0] for call in mock_logger.info.call_args_list]
        assert "Shutting down Lingua Learn Server..." in messages


class TestApplicationWiring:
    def test_routes_are_mounted_under_api(self):
        from lingua_learn.server.main import app

        paths = {getattr(route, "path", "") for route in app.routes}
        assert "/api/auth/login" in paths
        assert "/api/learning-paths/{path_id}/units/reorder" in paths
        assert "/api/admin/sentences/{sentence_id}/word-timings" in paths
        assert "/health" in paths
