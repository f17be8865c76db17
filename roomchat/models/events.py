# roomchat/models/events.py

from __future__ import annotations

import logging
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, StringConstraints, TypeAdapter, ValidationError

from roomchat.models.models import Message

logger = logging.getLogger(__name__)

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# ============================================================================
# INBOUND EVENTS (client -> hub)
# ============================================================================

class JoinRoom(BaseModel):
    action: Literal["join_room"] = "join_room"
    username: Name
    room: Name


class SendMessage(BaseModel):
    action: Literal["send_message"] = "send_message"
    username: Name
    message: str
    room: Name


class Typing(BaseModel):
    action: Literal["typing"] = "typing"
    username: Name
    room: Name


class StopTyping(BaseModel):
    action: Literal["stop_typing"] = "stop_typing"
    username: Name
    room: Name


InboundEvent = Annotated[
    Union[JoinRoom, SendMessage, Typing, StopTyping],
    Field(discriminator="action"),
]

_inbound_adapter: TypeAdapter = TypeAdapter(InboundEvent)


def parse_inbound(raw: Union[str, bytes, dict]) -> Optional[InboundEvent]:
    """
    Decode one client frame into an inbound event.

    Accepts a JSON text/bytes frame or an already-decoded dict. Anything that
    is not valid JSON, names an unknown action or is missing a required field
    yields None; the caller drops it without answering the client.
    """
    try:
        if isinstance(raw, dict):
            return _inbound_adapter.validate_python(raw)
        return _inbound_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Dropped malformed event: %d error(s), first: %s", e.error_count(), e.errors()[0]["msg"])
        return None

# ============================================================================
# OUTBOUND EVENTS (hub -> client)
# ============================================================================

class AvailableRooms(BaseModel):
    type: Literal["available_rooms"] = "available_rooms"
    rooms: List[str]


class InitialMessages(BaseModel):
    type: Literal["initial_messages"] = "initial_messages"
    room: str
    messages: List[Message]


class ReceiveMessage(Message):
    type: Literal["receive_message"] = "receive_message"

    @classmethod
    def of(cls, message: Message) -> "ReceiveMessage":
        return cls(**message.model_dump())


class NewMessageInRoom(BaseModel):
    type: Literal["new_message_in_room"] = "new_message_in_room"
    room: str


class OnlineUsersUpdate(BaseModel):
    type: Literal["online_users_update"] = "online_users_update"
    room: str
    users: List[str]


class UserTypingUpdate(BaseModel):
    type: Literal["user_typing_update"] = "user_typing_update"
    room: str
    users: List[str]


class UserJoinedNotification(BaseModel):
    type: Literal["user_joined_notification"] = "user_joined_notification"
    username: str
    room: str


class UserLeftNotification(BaseModel):
    type: Literal["user_left_notification"] = "user_left_notification"
    username: str
    room: str


OutboundEvent = Union[
    AvailableRooms,
    InitialMessages,
    ReceiveMessage,
    NewMessageInRoom,
    OnlineUsersUpdate,
    UserTypingUpdate,
    UserJoinedNotification,
    UserLeftNotification,
]


def to_wire(event: BaseModel) -> dict:
    """Serialize an outbound event to the JSON-ready dict sent on the socket."""
    return event.model_dump(by_alias=True)
