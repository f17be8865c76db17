def receive_until(ws, event_type):
    """Read frames until one of the given type arrives and return it."""
    while True:
        payload = ws.receive_json()
        if payload["type"] == event_type:
            return payload


def test_connect_receives_available_rooms(client):
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {
            "type": "available_rooms",
            "rooms": ["general", "random", "tech", "sports"],
        }


def test_join_and_chat_between_two_sockets(client):
    with client.websocket_connect("/ws") as alice:
        alice.receive_json()
        alice.send_json({"action": "join_room", "username": "alice", "room": "general"})
        assert alice.receive_json() == {"type": "initial_messages", "room": "general", "messages": []}
        assert alice.receive_json() == {"type": "online_users_update", "room": "general", "users": ["alice"]}

        with client.websocket_connect("/ws") as bob:
            bob.receive_json()
            bob.send_json({"action": "join_room", "username": "bob", "room": "general"})
            assert bob.receive_json()["type"] == "initial_messages"
            assert bob.receive_json()["users"] == ["alice", "bob"]

            assert alice.receive_json()["users"] == ["alice", "bob"]
            assert alice.receive_json() == {"type": "user_joined_notification", "username": "bob", "room": "general"}

            alice.send_json({"action": "send_message", "username": "alice", "room": "general", "message": "hi"})
            echo = alice.receive_json()
            assert echo["type"] == "receive_message"
            assert (echo["username"], echo["message"], echo["room"]) == ("alice", "hi", "general")
            assert len(echo["timestamp"]) == 5

            received = bob.receive_json()
            assert received == echo
            assert bob.receive_json() == {"type": "new_message_in_room", "room": "general"}

            bob.send_json({"action": "typing", "username": "bob", "room": "general"})
            assert alice.receive_json() == {"type": "user_typing_update", "room": "general", "users": ["bob"]}

        assert alice.receive_json() == {"type": "user_left_notification", "username": "bob", "room": "general"}
        assert alice.receive_json() == {"type": "online_users_update", "room": "general", "users": ["alice"]}
        assert alice.receive_json() == {"type": "user_typing_update", "room": "general", "users": []}


def test_malformed_frames_are_dropped_without_reply(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_text("not json at all")
        ws.send_json({"action": "join_room", "room": "general"})
        ws.send_json({"action": "send_message", "username": "alice", "room": "general", "message": "early"})
        ws.send_bytes(b'{"action": "join_room", "username": "alice", "room": "tech"}')

        assert ws.receive_json() == {"type": "initial_messages", "room": "tech", "messages": []}


def test_history_is_replayed_to_late_joiner(client):
    with client.websocket_connect("/ws") as alice:
        alice.receive_json()
        alice.send_json({"action": "join_room", "username": "alice", "room": "lobby"})
        alice.send_json({"action": "send_message", "username": "alice", "room": "lobby", "message": "first"})
        receive_until(alice, "receive_message")

    with client.websocket_connect("/ws") as carol:
        rooms = carol.receive_json()["rooms"]
        assert "lobby" in rooms
        carol.send_json({"action": "join_room", "username": "carol", "room": "lobby"})
        initial = carol.receive_json()
        assert [m["message"] for m in initial["messages"]] == ["first"]
        assert initial["messages"][0]["username"] == "alice"
        assert "connectionId" in initial["messages"][0]
