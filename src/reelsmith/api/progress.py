"""WebSocket progress broadcasting."""

import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ProgressBroadcaster:
    """Fan-out of progress payloads to every connected WebSocket client."""

    def __init__(self):
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.info("WebSocket connected (%d open)", len(self._connections))

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info("WebSocket disconnected (%d open)", len(self._connections))

    async def broadcast(self, payload: dict) -> None:
        """Send ``{"type": "progress", "data": payload}`` to all clients."""
        message = {"type": "progress", "data": payload}
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
            except (RuntimeError, OSError) as e:
                logger.warning("Dropping WebSocket after send failure: %s", e)
                self._connections.discard(websocket)
