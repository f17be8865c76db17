# roomchat/api/routes/health.py

from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/health")
async def health(request: Request):
    """
    Health check endpoint.

    Returns current system status, connection counts, and room counts.
    Used by container health probes and monitoring.

    Returns:
        dict: Status, connection count, room count, active room count
    """
    snapshot = request.app.state.hub.snapshot()
    return {
        "status": "healthy",
        "connections": snapshot.connections,
        "rooms": len(snapshot.rooms),
        "active_rooms_with_members": sum(1 for room in snapshot.rooms if room.members),
    }
