# roomchat/api/routes/rooms.py

from typing import List

from fastapi import APIRouter, HTTPException, Request

from roomchat.models.models import Message, RoomSummary

router = APIRouter()

# ============================================================================
# ROOM READ ENDPOINTS
# ============================================================================
# Rooms are created by clients over the WebSocket (join or message); these
# routes only read and never create a room.

@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(request: Request):
    """
    List all known rooms in creation order.

    Returns:
        List[RoomSummary]: Rooms with current members, typing users and
        message counts
    """
    return request.app.state.hub.snapshot().rooms


@router.get("/rooms/{room}", response_model=RoomSummary)
async def get_room(room: str, request: Request):
    """
    Get details of a specific room.

    Raises:
        HTTPException: 404 if room not found
    """
    summary = request.app.state.hub.room_summary(room)
    if summary is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return summary


@router.get("/rooms/{room}/messages", response_model=List[Message])
async def get_room_messages(room: str, request: Request):
    """
    Full message history of a room, oldest first.

    Raises:
        HTTPException: 404 if room not found
    """
    hub = request.app.state.hub
    if room not in hub.available_rooms():
        raise HTTPException(status_code=404, detail="Room not found")
    return hub.history(room)
