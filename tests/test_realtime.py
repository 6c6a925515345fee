"""Tests for the WebSocket event channel."""

from app.core.persona import DEMO_PERSONA


def _send(ws, event, data=None):
    ws.send_json({"event": event, "data": data})


def test_ping(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "ping")
        assert ws.receive_json() == {"event": "pong", "data": None}


def test_start_and_chat(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "start_conversation", {"userId": "u1", "isCallSimulator": True})
        started = ws.receive_json()
        assert started["event"] == "conversation_started"
        assert started["data"]["welcomeMessage"] == DEMO_PERSONA.greeting
        conversation_id = started["data"]["conversationId"]

        _send(ws, "user_message", {"conversationId": conversation_id, "message": "My Apple watch broke"})

        assert ws.receive_json() == {"event": "typing", "data": True}
        assert ws.receive_json() == {"event": "typing", "data": False}
        reply = ws.receive_json()
        assert reply["event"] == "ai_response"
        assert reply["data"]["message"] == "Happy to help with that."
        assert reply["data"]["audioUrl"].startswith("/audio/")
        assert reply["data"]["title"] == "Order Cancellation Request"
        assert reply["data"]["company"] == "apple"


def test_start_with_agent_info(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "start_conversation", {
            "userId": "u1",
            "agentInfo": {"name": "Sam", "company": "Netflix", "companyInfo": "Streaming plans"}
        })
        started = ws.receive_json()
        assert started["event"] == "conversation_started"
        assert "Sam" in started["data"]["welcomeMessage"]

    conversation = client.get(f"/api/conversations/{started['data']['conversationId']}").json()
    assert conversation["agentId"] is None


def test_first_message_can_carry_agent_info(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "user_message", {
            "userId": "u1",
            "message": "Hi",
            "agentInfo": {"name": "Sam", "company": "Netflix"}
        })
        assert ws.receive_json()["event"] == "conversation_started"
        assert ws.receive_json() == {"event": "typing", "data": True}
        assert ws.receive_json() == {"event": "typing", "data": False}
        assert ws.receive_json()["event"] == "ai_response"


def test_unknown_conversation_reports_error(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "user_message", {"conversationId": "missing", "message": "Hello"})

        assert ws.receive_json()["data"] is True
        assert ws.receive_json()["data"] is False
        error = ws.receive_json()
        assert error["event"] == "error"
        assert error["data"]["message"] == "Conversation not found"

        # connection stays usable
        _send(ws, "ping")
        assert ws.receive_json()["event"] == "pong"


def test_start_without_persona_is_rejected(client):
    with client.websocket_connect("/ws") as ws:
        _send(ws, "start_conversation", {"userId": "u1"})
        error = ws.receive_json()
        assert error["event"] == "error"
        assert error["data"]["code"] == "VALIDATION_ERROR"


def test_invalid_frames(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["event"] == "error"

        _send(ws, "dance")
        assert ws.receive_json()["data"]["message"] == "Unknown event: dance"
