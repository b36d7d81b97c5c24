"""
WebSocket endpoints: viewer sessions for host shells, and the capture renderer.
"""

import asyncio
import json
import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from slideplay.api.schemas.messages import (
    CaptureRequestMessage,
    parse_client_message,
    parse_outbound_message,
)
from slideplay.application.session import ViewerSession
from slideplay.domain.exceptions import InvalidMessageError
from slideplay.infra.capture.playwright_renderer import (
    PlaywrightRenderer,
    serve_capture_request,
)
from slideplay.infra.config.dependencies import get_renderer, get_session_registry
from slideplay.infra.config.logging_config import (
    bind_viewer_context,
    clear_viewer_context,
    get_logger,
)
from slideplay.infra.config.settings import get_settings
from slideplay.infra.messaging.host_channel import QueueHostChannel
from slideplay.infra.messaging.session_registry import SessionRegistry

router = APIRouter(prefix="/ws", tags=["websocket"])
log = get_logger("api.websocket")


async def _pump_outbound(websocket: WebSocket, channel: QueueHostChannel) -> None:
    while True:
        message = await channel.outbox.get()
        await websocket.send_text(json.dumps(message.to_wire()))


@router.websocket("/viewer/{deck_id}")
async def websocket_viewer(
    websocket: WebSocket,
    deck_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Bidirectional host channel for one open deck.

    Inbound frames are host messages (capture-result, save-result,
    slide-updated, deck-loaded, ...) or UI events (key, element-click, ...).
    Outbound frames are capture-request, export-file, save-slide,
    reorder-slides, batch-complete and save-animations.
    """
    settings = get_settings()
    channel = QueueHostChannel()
    session = ViewerSession(channel, settings)
    session.deck.deck_id = deck_id
    pump: asyncio.Task | None = None

    try:
        bind_viewer_context(deck_id, uuid.uuid4().hex[:8])
        log.info("ws.viewer.connect.request")
        await websocket.accept()
        await registry.connect(deck_id, websocket, session)
        pump = asyncio.create_task(_pump_outbound(websocket, channel))

        await websocket.send_text(
            json.dumps(
                {
                    "type": "connected",
                    "deckId": deck_id,
                    "message": "Connected to viewer session",
                }
            )
        )

        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.websocket_heartbeat_interval,
                )
            except asyncio.TimeoutError:
                await websocket.send_text(json.dumps({"type": "ping"}))
                continue

            try:
                raw = json.loads(data)
            except json.JSONDecodeError:
                log.warning("ws.viewer.invalid_json")
                continue

            if isinstance(raw, dict) and raw.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
                continue
            if isinstance(raw, dict) and raw.get("type") == "pong":
                continue

            try:
                message = parse_client_message(raw)
            except InvalidMessageError as e:
                log.warning("ws.viewer.invalid_message", error=e.reason[:200])
                continue

            await session.receive(message)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        log.exception("ws.viewer.error", deck_id=deck_id, error=str(e))
    finally:
        if pump is not None:
            pump.cancel()
        await session.close()
        await registry.disconnect(deck_id, websocket)
        clear_viewer_context()


@router.websocket("/renderer")
async def websocket_renderer(
    websocket: WebSocket,
    renderer: PlaywrightRenderer = Depends(get_renderer),
):
    """
    Capture service for host shells without a browser of their own.

    Accepts forwarded capture-request frames and answers each with
    capture-result or capture-error. Requests are served one at a time.
    """
    await websocket.accept()
    log.info("ws.renderer.connect")
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = parse_outbound_message(data)
            except InvalidMessageError as e:
                log.warning("ws.renderer.invalid_message", error=e.reason[:200])
                continue
            if not isinstance(message, CaptureRequestMessage):
                log.debug("ws.renderer.ignored", type=message.type)
                continue

            reply = await serve_capture_request(renderer, message)
            await websocket.send_text(json.dumps(reply.to_wire()))
    except WebSocketDisconnect:
        log.info("ws.renderer.disconnect")

@router.get("/connections/stats")
async def get_connection_stats(
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    """WebSocket connection statistics."""
    try:
        decks = await registry.get_connected_decks()
        return {
            "connected_decks": len(decks),
            "connections": await registry.connection_count(),
            "decks": decks,
        }
    except Exception as e:
        log.exception("ws.stats.error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get connection stats")
