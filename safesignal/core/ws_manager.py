"""WebSocket connection manager for alert change notifications."""

import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks active WebSocket connections keyed by profile_id."""

    def __init__(self) -> None:
        # profile_id -> set of active websocket connections
        self._connections: dict[int, set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, profile_id: int) -> None:
        await websocket.accept()
        self._connections.setdefault(profile_id, set()).add(websocket)
        logger.info("WS connected: profile=%s (total=%s)", profile_id, self.total_connections)

    def disconnect(self, websocket: WebSocket, profile_id: int) -> None:
        conns = self._connections.get(profile_id)
        if conns:
            conns.discard(websocket)
            if not conns:
                del self._connections[profile_id]
        logger.info("WS disconnected: profile=%s (total=%s)", profile_id, self.total_connections)

    async def send_to_profile(self, profile_id: int, event: str, data: Any) -> None:
        """Send event to all connections for a profile."""
        conns = self._connections.get(profile_id, set())
        payload = json.dumps({"event": event, "data": data}, default=str)
        dead: list[WebSocket] = []
        for ws in list(conns):
            try:
                await ws.send_text(payload)
            except Exception:  # noqa: BLE001
                dead.append(ws)
        for ws in dead:
            conns.discard(ws)

    async def send_to_profiles(self, profile_ids: list[int], event: str, data: Any) -> None:
        """Broadcast event to multiple profiles, once per profile."""
        for pid in dict.fromkeys(profile_ids):
            await self.send_to_profile(pid, event, data)

    @property
    def total_connections(self) -> int:
        return sum(len(c) for c in self._connections.values())


# Shared by the API layer; the lifecycle services never touch it.
ws_manager = ConnectionManager()
