# roomchat/core/state.py
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI

from roomchat.core.config import Settings
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.message_store import MessageStore
from roomchat.services.presence_registry import PresenceRegistry
from roomchat.services.room_hub import RoomHub
from roomchat.services.typing_tracker import TypingTracker


def init_state(app: FastAPI, settings: Settings) -> None:
    """
    Build the process-lifetime chat state and attach it to the app.

    The hub owns its registry, store and tracker; routes reach it through
    ``app.state.hub`` and never hold module-level copies.
    """
    connection_manager = ConnectionManager()
    hub = RoomHub(
        presence=PresenceRegistry(),
        messages=MessageStore(),
        typing=TypingTracker(),
        gateway=connection_manager,
        default_rooms=settings.DEFAULT_ROOMS,
    )

    app.state.connection_manager = connection_manager
    app.state.hub = hub
    # Metrics
    app.state.started_at = datetime.now(timezone.utc)
