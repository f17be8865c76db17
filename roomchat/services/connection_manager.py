# roomchat/services/connection_manager.py

from __future__ import annotations

from typing import Dict
import asyncio
import contextlib
import logging
import uuid

from fastapi import WebSocket
from pydantic import BaseModel

from roomchat.models.events import to_wire

logger = logging.getLogger(__name__)

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Owns the WebSocket sessions and delivers hub events to them.

    The room hub never awaits a socket. It calls ``deliver()``, which only
    serializes the event onto the connection's outbox queue; a writer task
    per connection drains that queue to the socket in order. This keeps every
    hub operation atomic on the event loop while still preserving the order
    in which each connection was addressed.

    Data Structures:
        connections: Maps connection_id -> WebSocket
        outboxes:    Maps connection_id -> asyncio.Queue of wire dicts
        writers:     Maps connection_id -> writer Task
    """

    def __init__(self) -> None:
        self.connections: Dict[str, WebSocket] = {}
        self.outboxes: Dict[str, asyncio.Queue] = {}
        self.writers: Dict[str, asyncio.Task] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a WebSocket and assign it a connection id.

        Returns:
            The new connection id (stable for the session lifetime).
        """
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        queue: asyncio.Queue = asyncio.Queue()

        self.connections[connection_id] = websocket
        self.outboxes[connection_id] = queue
        self.writers[connection_id] = asyncio.create_task(self._writer(connection_id, websocket, queue))

        logger.info("✓ Socket %s accepted. Total: %d", connection_id, len(self.connections))
        return connection_id

    def deliver(self, connection_id: str, event: BaseModel) -> None:
        queue = self.outboxes.get(connection_id)
        if queue is None:
            logger.debug("[routing] Skipped %s: connection %s is gone", type(event).__name__, connection_id)
            return
        queue.put_nowait(to_wire(event))

    async def disconnect(self, connection_id: str) -> None:
        """Forget a connection and stop its writer. Undelivered events are dropped."""
        self.connections.pop(connection_id, None)
        self.outboxes.pop(connection_id, None)
        writer = self.writers.pop(connection_id, None)

        if writer is not None and not writer.done():
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer

        logger.info("✗ Socket %s released. Total: %d", connection_id, len(self.connections))

    async def close_all(self) -> None:
        """Release every connection; used on application shutdown."""
        for connection_id in list(self.connections):
            await self.disconnect(connection_id)

    async def _writer(self, connection_id: str, websocket: WebSocket, queue: asyncio.Queue) -> None:
        while True:
            payload = await queue.get()
            try:
                await websocket.send_json(payload)
            except Exception as e:
                # The receive loop sees the broken socket and runs the disconnect
                logger.error("Send error on %s: %s", connection_id, e)
                self.outboxes.pop(connection_id, None)
                return
