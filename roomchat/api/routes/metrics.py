# roomchat/api/routes/metrics.py
from fastapi import APIRouter, Request
from datetime import datetime, timezone

router = APIRouter()

@router.get("/metrics")
async def get_metrics(request: Request):
    """
    Usage metrics for the running hub.

    Reads one consistent snapshot of the hub, so counts never mix state
    from before and after an event.

    Example Response:
        {
            "total_messages": 120,
            "uptime_hours": 1.5,
            "messages_per_second": 0.02,
            "concurrent_connections": 12,
            "joined_connections": 10,
            "total_rooms": 5,
            "active_rooms_with_members": 3,
            "typing_users": 1
        }
    """
    snapshot = request.app.state.hub.snapshot()
    uptime_seconds = (datetime.now(timezone.utc) - request.app.state.started_at).total_seconds()

    if uptime_seconds > 0:
        messages_per_second = snapshot.total_messages / uptime_seconds
    else:
        messages_per_second = 0

    return {
        # Statistics
        "total_messages": snapshot.total_messages,
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "messages_per_second": round(messages_per_second, 2),

        # Capacity
        "concurrent_connections": snapshot.connections,
        "joined_connections": snapshot.joined_connections,
        "total_rooms": len(snapshot.rooms),
        "active_rooms_with_members": sum(1 for room in snapshot.rooms if room.members),
        "typing_users": sum(len(room.typing) for room in snapshot.rooms),
    }
