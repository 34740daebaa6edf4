"""
End-to-end tests through the FastAPI app.
"""

from fastapi.testclient import TestClient

from ito_engine.main import app


def test_health_check():
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert set(body) == {"status", "rooms", "connections"}


def test_join_over_websocket():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join_room", "roomId": "ws-join", "username": "Ann"})
            message = ws.receive_json()

    assert message["type"] == "update_gamestate"
    state = message["state"]
    assert state["id"] == "ws-join"
    assert state["phase"] == "lobby"
    assert [p["username"] for p in state["players"]] == ["Ann"]
    assert state["players"][0]["isHost"] is True


def test_two_clients_see_redacted_hands():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as host, client.websocket_connect("/ws") as guest:
            host.send_json({"type": "join_room", "roomId": "ws-play", "username": "Host"})
            host.receive_json()
            guest.send_json({"type": "join_room", "roomId": "ws-play", "username": "Guest"})
            host.receive_json()
            guest.receive_json()

            host.send_json({"type": "start_game", "roomId": "ws-play"})
            host_state = host.receive_json()["state"]
            guest_state = guest.receive_json()["state"]

    assert host_state["phase"] == "playing"
    assert isinstance(host_state["players"][0]["hand"][0], int)
    assert host_state["players"][1]["hand"] == ["?"]
    assert guest_state["players"][0]["hand"] == ["?"]
    assert isinstance(guest_state["players"][1]["hand"][0], int)


def test_malformed_message_keeps_connection_open():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            ws.send_json({"type": "nonsense"})
            ws.send_json({"type": "join_room", "roomId": "ws-bad", "username": "Ann"})
            message = ws.receive_json()

    assert message["state"]["id"] == "ws-bad"

