# roomchat/api/websocket.py

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from roomchat.models.events import parse_inbound
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.room_hub import RoomHub

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for the room chat protocol.

    Protocol:
    =========

    Client -> Server Actions:
    -------------------------
    Join Room:
        {"action": "join_room", "username": "alice", "room": "general"}

    Send Message:
        {"action": "send_message", "username": "alice", "room": "general", "message": "hi"}

    Typing / Stop Typing:
        {"action": "typing", "username": "alice", "room": "general"}
        {"action": "stop_typing", "username": "alice", "room": "general"}

    Server -> Client Messages:
    -------------------------
    On connect:
        {"type": "available_rooms", "rooms": ["general", "random", ...]}

    After joining:
        {"type": "initial_messages", "room": "general", "messages": [...]}
        {"type": "online_users_update", "room": "general", "users": [...]}

    Room traffic:
        {"type": "receive_message", "username": ..., "message": ..., "room": ...,
         "timestamp": "14:05", "connectionId": ...}
        {"type": "user_typing_update", "room": ..., "users": [...]}
        {"type": "user_joined_notification", "username": ..., "room": ...}
        {"type": "user_left_notification", "username": ..., "room": ...}

    Anywhere:
        {"type": "new_message_in_room", "room": "general"}

    Lifecycle:
    ==========
    1. Socket accepted, connection id assigned, room list sent
    2. Client sends "join_room" (again to switch rooms)
    3. Client sends messages / typing signals for its current room
    4. On close, the hub removes it and notifies its room

    Error Handling:
        - Invalid JSON, unknown actions, missing fields: dropped and logged,
          nothing is sent back
        - Connection errors: cleanup and log
    """
    hub: RoomHub = websocket.app.state.hub
    manager: ConnectionManager = websocket.app.state.connection_manager

    connection_id = await manager.connect(websocket)
    hub.connect(connection_id)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            data = frame.get("text")
            if data is None:
                data = frame.get("bytes")
            if data is None:
                continue

            event = parse_inbound(data)
            if event is None:
                continue

            logger.debug("Websocket input from %s: %s", connection_id, event.action)
            hub.handle(connection_id, event)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error on %s: %s", connection_id, e)
    finally:
        hub.disconnect(connection_id)
        await manager.disconnect(connection_id)
