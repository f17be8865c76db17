import json

import pytest

from roomchat.models.events import (
    InitialMessages,
    JoinRoom,
    ReceiveMessage,
    SendMessage,
    StopTyping,
    Typing,
    parse_inbound,
    to_wire,
)
from roomchat.models.models import Message


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"action": "join_room", "username": "alice", "room": "general"}, JoinRoom),
        ({"action": "send_message", "username": "alice", "room": "general", "message": "hi"}, SendMessage),
        ({"action": "typing", "username": "alice", "room": "general"}, Typing),
        ({"action": "stop_typing", "username": "alice", "room": "general"}, StopTyping),
    ],
)
def test_parse_inbound_dispatches_on_action(payload, expected):
    assert isinstance(parse_inbound(json.dumps(payload)), expected)
    assert isinstance(parse_inbound(payload), expected)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps({"username": "alice", "room": "general"}),
        json.dumps({"action": "dance", "username": "alice", "room": "general"}),
        json.dumps({"action": "join_room", "room": "general"}),
        json.dumps({"action": "join_room", "username": "   ", "room": "general"}),
        json.dumps({"action": "send_message", "username": "alice", "room": "general"}),
        json.dumps([1, 2, 3]),
    ],
)
def test_parse_inbound_drops_malformed_payloads(raw):
    assert parse_inbound(raw) is None


def test_parse_inbound_accepts_bytes_and_strips_names():
    event = parse_inbound(b'{"action": "join_room", "username": " alice ", "room": "general"}')
    assert event.username == "alice"


def test_receive_message_wire_shape():
    message = Message(username="alice", message="hi", room="general", timestamp="14:05", connection_id="c1")
    assert to_wire(ReceiveMessage.of(message)) == {
        "type": "receive_message",
        "username": "alice",
        "message": "hi",
        "room": "general",
        "timestamp": "14:05",
        "connectionId": "c1",
    }


def test_initial_messages_serializes_nested_aliases():
    message = Message(username="alice", message="hi", room="general", timestamp="14:05", connection_id="c1")
    wire = to_wire(InitialMessages(room="general", messages=[message]))
    assert wire["type"] == "initial_messages"
    assert wire["messages"][0]["connectionId"] == "c1"
