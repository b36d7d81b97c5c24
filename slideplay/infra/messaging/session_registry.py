"""
Registry of viewer sessions attached to open WebSocket connections.
"""

from typing import Dict, List

from fastapi import WebSocket

from slideplay.application.session import ViewerSession
from slideplay.infra.config.logging_config import get_logger


class SessionRegistry:
    def __init__(self) -> None:
        # deck_id -> [(websocket, session)]
        self._deck_sessions: Dict[str, List[tuple[WebSocket, ViewerSession]]] = {}
        self._log = get_logger("infra.websocket")

    async def connect(self, deck_id: str, websocket: WebSocket, session: ViewerSession) -> None:
        self._deck_sessions.setdefault(deck_id, []).append((websocket, session))
        self._log.info("ws.connect.viewer", deck_id=deck_id)

    async def disconnect(self, deck_id: str, websocket: WebSocket) -> None:
        entries = self._deck_sessions.get(deck_id)
        if entries is not None:
            self._deck_sessions[deck_id] = [e for e in entries if e[0] is not websocket]
            if not self._deck_sessions[deck_id]:
                del self._deck_sessions[deck_id]
        self._log.info("ws.disconnect.viewer", deck_id=deck_id)

    def sessions_for(self, deck_id: str) -> List[ViewerSession]:
        return [session for _, session in self._deck_sessions.get(deck_id, [])]

    async def get_connected_decks(self) -> List[str]:
        return list(self._deck_sessions.keys())

    async def connection_count(self) -> int:
        return sum(len(entries) for entries in self._deck_sessions.values())
