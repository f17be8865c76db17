from http import HTTPStatus


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["endpoints"]["websocket"] == "/ws"


def test_health_counts_connections(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"action": "join_room", "username": "alice", "room": "general"})
        ws.receive_json()
        ws.receive_json()

        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["connections"] == 1
        assert data["rooms"] == 4
        assert data["active_rooms_with_members"] == 1


def test_metrics_reports_messages(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"action": "join_room", "username": "alice", "room": "general"})
        ws.send_json({"action": "send_message", "username": "alice", "room": "general", "message": "hi"})
        while ws.receive_json()["type"] != "receive_message":
            pass

        data = client.get("/metrics").json()
        assert data["total_messages"] == 1
        assert data["concurrent_connections"] == 1
        assert data["joined_connections"] == 1
        assert data["total_rooms"] == 4


def test_rooms_listing_and_history(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"action": "join_room", "username": "alice", "room": "tech"})
        ws.send_json({"action": "send_message", "username": "alice", "room": "tech", "message": "ping"})
        while ws.receive_json()["type"] != "receive_message":
            pass

        names = [room["name"] for room in client.get("/rooms").json()]
        assert names == ["general", "random", "tech", "sports"]

        tech = client.get("/rooms/tech").json()
        assert tech == {"name": "tech", "members": ["alice"], "typing": [], "message_count": 1}

        messages = client.get("/rooms/tech/messages").json()
        assert [(m["username"], m["message"]) for m in messages] == [("alice", "ping")]
        assert "connectionId" in messages[0]


def test_unknown_room_is_404_and_not_created(client):
    assert client.get("/rooms/nowhere").status_code == HTTPStatus.NOT_FOUND
    assert client.get("/rooms/nowhere/messages").status_code == HTTPStatus.NOT_FOUND
    assert "nowhere" not in [room["name"] for room in client.get("/rooms").json()]
