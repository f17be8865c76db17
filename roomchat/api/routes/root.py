# roomchat/api/routes/root.py

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.

    Returns basic info about the chat hub and where to find it.
    """
    return {
        "message": "Room chat hub is running",
        "version": "1.0",
        "features": ["rooms", "history", "presence", "typing", "unread_signal"],
        "endpoints": {
            "websocket": "/ws",
            "rooms": "/rooms",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
