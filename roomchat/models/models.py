# roomchat/models/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List


class Message(BaseModel):
    """One chat utterance, immutable once appended to a room."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str
    message: str
    room: str
    timestamp: str
    connection_id: str = Field(alias="connectionId")


class RoomSummary(BaseModel):
    name: str
    members: List[str] = []
    typing: List[str] = []
    message_count: int = 0


class HubSnapshot(BaseModel):
    connections: int = 0
    joined_connections: int = 0
    total_messages: int = 0
    rooms: List[RoomSummary] = []
