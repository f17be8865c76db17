from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from roomchat.core.config import Settings
from roomchat.main import create_app
from roomchat.models.events import to_wire
from roomchat.services.message_store import MessageStore
from roomchat.services.presence_registry import PresenceRegistry
from roomchat.services.room_hub import RoomHub
from roomchat.services.typing_tracker import TypingTracker


class RecordingGateway:
    """Stands in for the socket layer: remembers every delivery in order."""

    def __init__(self):
        self.sent = []

    def deliver(self, connection_id, event):
        self.sent.append((connection_id, to_wire(event)))

    def events_for(self, connection_id, event_type=None):
        return [
            payload
            for cid, payload in self.sent
            if cid == connection_id and (event_type is None or payload["type"] == event_type)
        ]

    def of_type(self, event_type):
        return [(cid, payload) for cid, payload in self.sent if payload["type"] == event_type]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def hub(gateway):
    return RoomHub(
        presence=PresenceRegistry(),
        messages=MessageStore(),
        typing=TypingTracker(),
        gateway=gateway,
        default_rooms=["general", "random"],
        clock=lambda: datetime(2024, 5, 1, 14, 5),
    )


@pytest.fixture
def client():
    with TestClient(create_app(Settings())) as test_client:
        yield test_client
