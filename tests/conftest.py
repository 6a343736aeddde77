"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Platform: mock_line_platform, dispatcher
2. Event payloads: make_event, text_event, image_event, ...
3. Infrastructure: mock_settings, mock_logfire, logfire_capture, test_client
"""

import os
from contextlib import contextmanager
from unittest.mock import MagicMock, Mock, patch

import pytest

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from line_echo_bot.services.event_dispatcher import EventDispatcher
from line_echo_bot.services.messaging_protocol import MockLinePlatform

BASE_URL = "https://bot.example.com"
USER_ID = "U4af4980629000000000000000000000"


# =============================================================================
# Platform
# =============================================================================


@pytest.fixture
def media_contents():
    """Binary content served by the mock platform, keyed by message id."""
    return {
        "img-1": b"\xff\xd8\xff\xe0 fake jpeg bytes",
        "vid-1": b"\x00\x00\x00\x18ftypmp42 fake video",
        "aud-1": b"\x00\x00\x00\x1cftypM4A fake audio",
    }


@pytest.fixture
def mock_line_platform(media_contents):
    """MockLinePlatform serving media_contents and accepting every reply."""
    return MockLinePlatform(contents=media_contents)


@pytest.fixture
def dispatcher(mock_line_platform, tmp_path):
    """EventDispatcher wired to the mock platform and a temp download dir."""
    return EventDispatcher(
        mock_line_platform, base_url=BASE_URL, download_dir=tmp_path / "downloaded"
    )


# =============================================================================
# Event Payloads
# =============================================================================


@pytest.fixture
def make_event():
    """Factory for raw webhook events as the platform sends them."""

    def _make(event_type: str, reply_token: str = "nHuyWiB7yP5Zw52FIkcQobQuGDXCTA", **fields):
        event = {
            "type": event_type,
            "mode": "active",
            "timestamp": 1462629479859,
            "webhookEventId": "01FZ74A0TDDPYRVKNK77XKC3ZR",
            "deliveryContext": {"isRedelivery": False},
            "source": {"type": "user", "userId": USER_ID},
            "replyToken": reply_token,
        }
        event.update(fields)
        return event

    return _make


@pytest.fixture
def make_message_event(make_event):
    """Factory for raw message events."""

    def _make(message: dict, reply_token: str = "nHuyWiB7yP5Zw52FIkcQobQuGDXCTA"):
        return make_event("message", reply_token=reply_token, message=message)

    return _make


@pytest.fixture
def text_event(make_message_event):
    return make_message_event({"type": "text", "id": "txt-1", "text": "hello"})


@pytest.fixture
def line_image_event(make_message_event):
    return make_message_event(
        {"type": "image", "id": "img-1", "contentProvider": {"type": "line"}}
    )


@pytest.fixture
def external_image_event(make_message_event):
    return make_message_event(
        {
            "type": "image",
            "id": "img-2",
            "contentProvider": {
                "type": "external",
                "originalContentUrl": "https://cdn.example.com/original.jpg",
                "previewImageUrl": "https://cdn.example.com/preview.jpg",
            },
        }
    )


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings (signature check disabled)."""
    from line_echo_bot.config import Settings

    settings = Settings(
        line_channel_access_token="test-channel-token",
        line_channel_secret=None,
        base_url=BASE_URL,
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )

    monkeypatch.setattr("line_echo_bot.config.get_settings", lambda: settings)
    # Patch where get_settings is used so request handlers see the mock
    monkeypatch.setattr("line_echo_bot.main.get_settings", lambda: settings)
    monkeypatch.setattr("line_echo_bot.logging_config.get_settings", lambda: settings)
    monkeypatch.setattr(
        "line_echo_bot.middleware.signature.get_settings", lambda: settings
    )
    return settings


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Useful for tests that don't need to verify logging behavior.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    # Patch module-level imports in our code (only modules that use logfire)
    for module in (
        "line_echo_bot.main",
        "line_echo_bot.logging_config",
        "line_echo_bot.middleware.correlation_id",
        "line_echo_bot.middleware.signature",
        "line_echo_bot.services.line_api",
        "line_echo_bot.services.content_fetcher",
        "line_echo_bot.services.event_dispatcher",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    captured_logs = []

    def capture(level):
        def _capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))

        return _capture

    with (
        patch("logfire.info", side_effect=capture("info")),
        patch("logfire.warn", side_effect=capture("warn")),
        patch("logfire.error", side_effect=capture("error")),
    ):
        yield captured_logs


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests (lifespan not started)."""
    from fastapi.testclient import TestClient

    from line_echo_bot.main import app

    return TestClient(app)


@pytest.fixture
def webhook_client(test_client, dispatcher):
    """TestClient whose webhook uses the mock-platform dispatcher."""
    from line_echo_bot.api.webhook import get_event_dispatcher
    from line_echo_bot.main import app

    app.dependency_overrides[get_event_dispatcher] = lambda: dispatcher
    yield test_client
    app.dependency_overrides.pop(get_event_dispatcher, None)
