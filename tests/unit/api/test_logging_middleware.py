"""Unit tests for the request logging middleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from vidhost.api.middleware.logging import LoggingMiddleware


@pytest.fixture
def client():
    """App with only the logging middleware and two plain routes."""
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/api/videos")
    async def list_videos() -> list[str]:
        return []

    @app.post("/upload_video")
    async def upload_video() -> PlainTextResponse:
        return PlainTextResponse("ok")

    return TestClient(app)


@pytest.fixture
def mock_logger():
    with patch("vidhost.api.middleware.logging.logger") as logger:
        yield logger


def _messages(mock_logger) -> list[str]:
    return [c.args[0] for c in mock_logger.info.call_args_list]


def _extra(mock_logger, message: str) -> dict:
    for call in mock_logger.info.call_args_list:
        if call.args[0] == message:
            return call.kwargs["extra"]
    raise AssertionError(f"{message!r} not logged")


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_request_id_echoed(self, client, mock_logger):
        response = client.get("/api/videos", headers={"X-Request-ID": "req-7"})

        assert response.headers["X-Request-ID"] == "req-7"
        assert _extra(mock_logger, "Request completed")["request_id"] == "req-7"

    def test_request_id_generated(self, client, mock_logger):
        response = client.get("/api/videos")
        assert len(response.headers["X-Request-ID"]) == 36

    def test_plain_request_has_no_upload_line(self, client, mock_logger):
        client.get("/api/videos")

        assert _messages(mock_logger) == ["Request started", "Request completed"]
        assert "upload_kib_per_s" not in _extra(mock_logger, "Request completed")

    def test_upload_logs_body_size(self, client, mock_logger):
        response = client.post(
            "/upload_video",
            files={"videoFile": ("clip.mp4", b"x" * 4096, "video/mp4")},
            data={"videoTitle": "Holiday", "creatorName": "alice"},
        )

        assert response.status_code == 200
        assert _messages(mock_logger) == [
            "Request started",
            "Upload received",
            "Request completed",
        ]
        received = _extra(mock_logger, "Upload received")
        assert received["body_bytes"] > 4096
        assert received["content_type"].startswith("multipart/form-data")
        assert _extra(mock_logger, "Request completed")["upload_kib_per_s"] > 0
