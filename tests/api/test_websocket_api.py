"""WebSocket and HTTP endpoint tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from slideplay.infra.config.dependencies import get_renderer, get_session_registry
from slideplay.infra.messaging.session_registry import SessionRegistry
from slideplay.main import create_app

from _helpers.slides import make_markup

DECK_LOADED = {
    "type": "deck-loaded",
    "deckId": "deck-1",
    "deckName": "Demo",
    "slides": [
        {"number": 1, "markup": make_markup("<p>one</p>")},
        {"number": 2, "markup": make_markup("<p>two</p>")},
    ],
}


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def renderer():
    renderer = MagicMock()
    renderer.capture = AsyncMock(return_value=b"png-bytes")
    return renderer


@pytest.fixture
def client(registry, renderer):
    app = create_app()
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_renderer] = lambda: renderer
    return TestClient(app)


class TestViewerWebSocket:
    """Test cases for the viewer session socket."""

    def test_connect_sends_greeting(self, client):
        with client.websocket_connect("/ws/viewer/deck-1") as ws:
            greeting = ws.receive_json()
            assert greeting["type"] == "connected"
            assert greeting["deckId"] == "deck-1"

    def test_ping_pong(self, client):
        with client.websocket_connect("/ws/viewer/deck-1") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_reorder_round_trip(self, client):
        with client.websocket_connect("/ws/viewer/deck-1") as ws:
            ws.receive_json()
            ws.send_json(DECK_LOADED)
            ws.send_json({"type": "key", "key": "ArrowDown", "alt": True})

            assert ws.receive_json() == {"type": "reorder-slides", "newOrder": [2, 1]}

    def test_invalid_frames_keep_connection_open(self, client):
        with client.websocket_connect("/ws/viewer/deck-1") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            ws.send_json({"type": "teleport"})
            ws.send_json({"type": "slide-updated", "slideNumber": 0, "markup": ""})
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_live_edit_save_is_sent(self, client):
        with client.websocket_connect("/ws/viewer/deck-1") as ws:
            ws.receive_json()
            ws.send_json(
                {
                    "type": "deck-loaded",
                    "deckId": "deck-1",
                    "slides": [
                        {
                            "number": 1,
                            "markup": make_markup('<p data-build-id="lead">one</p>'),
                        }
                    ],
                }
            )
            ws.send_json({"type": "key", "key": "e"})
            ws.send_json({"type": "element-click", "buildId": "lead"})
            ws.send_json({"type": "element-input", "buildId": "lead", "text": "edited"})
            ws.send_json({"type": "element-blur", "buildId": "lead"})

            message = ws.receive_json()
            assert message["type"] == "save-slide"
            assert message["slideNumber"] == 1
            assert ">edited</p>" in message["markup"]

    def test_registry_tracks_connections(self, client, registry):
        with client.websocket_connect("/ws/viewer/deck-7") as ws:
            ws.receive_json()
            assert [s.deck.deck_id for s in registry.sessions_for("deck-7")] == ["deck-7"]

            stats = client.get("/ws/connections/stats").json()
            assert stats == {"connected_decks": 1, "connections": 1, "decks": ["deck-7"]}

        assert registry.sessions_for("deck-7") == []


class TestRendererWebSocket:
    """Test cases for the capture renderer socket."""

    def test_capture_request_is_answered(self, client, renderer):
        with client.websocket_connect("/ws/renderer") as ws:
            ws.send_json(
                {
                    "type": "capture-request",
                    "requestId": "capture-1-1",
                    "markup": "<div class='slide'></div>",
                }
            )
            reply = ws.receive_json()

        assert reply["type"] == "capture-result"
        assert reply["requestId"] == "capture-1-1"
        assert reply["dataUri"].startswith("data:image/png;base64,")
        renderer.capture.assert_awaited_once()

    def test_renderer_failure_is_reported(self, client, renderer):
        renderer.capture.side_effect = RuntimeError("browser crashed")
        with client.websocket_connect("/ws/renderer") as ws:
            ws.send_json({"type": "save-slide", "slideNumber": 1, "markup": "x"})
            ws.send_json({"type": "capture-request", "requestId": "r9", "markup": "<p/>"})
            reply = ws.receive_json()

        assert reply == {"type": "capture-error", "requestId": "r9", "error": "browser crashed"}


class TestHealth:
    """Test cases for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "slideplay"
