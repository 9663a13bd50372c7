import json

from openai import OpenAIError

from backend.app.api.deps import provide_chat_client
from backend.app.main import app

from fakes import FakeChatClient


def collect_until_done(ws):
    messages = []
    while True:
        message = ws.receive_json()
        messages.append(message)
        if message["type"] in ("done", "error"):
            return messages


def test_steps_stream_then_navigation_and_timers(client, recipe_request):
    with client.websocket_connect("/api/v1/ws") as ws:
        ws.send_text(json.dumps(recipe_request))
        messages = collect_until_done(ws)

        steps = [m for m in messages if m["type"] == "step"]
        assert [m["index"] for m in steps] == [0, 1, 2, 3, 4]
        assert [m["step"]["time"] for m in steps] == [None, 120, 600, 3600, 45]
        assert messages[-1] == {"type": "done", "count": 5}

        ws.send_json({"type": "next"})
        current = ws.receive_json()
        assert current["type"] == "current"
        assert current["index"] == 1
        assert current["step"]["text"] == "1. Rinse the rice for 2 minutes."

        ws.send_json({"type": "goto", "index": 2})
        assert ws.receive_json()["index"] == 2

        ws.send_json({"type": "start_timer"})
        assert ws.receive_json() == {"type": "timer_started", "index": 2, "seconds": 600}

        ws.send_json({"type": "add_minute"})
        extended = ws.receive_json()
        assert extended["type"] == "timer_extended"
        assert 655 <= extended["remaining"] <= 660

        ws.send_json({"type": "stop_timer"})
        assert ws.receive_json() == {"type": "timer_stopped", "index": 2, "stopped": True}

        ws.send_json({"type": "start_timer", "seconds": 0.01})
        assert ws.receive_json()["type"] == "timer_started"
        assert ws.receive_json() == {"type": "timer_done", "index": 2, "label": "Step 2"}


def test_commands_without_timer_or_unknown(client, recipe_request):
    with client.websocket_connect("/api/v1/ws") as ws:
        ws.send_text(json.dumps(recipe_request))
        collect_until_done(ws)

        # Step 0 is the ingredients block and has no duration.
        ws.send_json({"type": "start_timer"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "add_minute"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "goto", "index": "two"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "dance"})
        assert ws.receive_json()["message"] == "Unknown command: dance"

        ws.send_text("not json")
        assert ws.receive_json()["type"] == "error"


def test_bad_timer_durations_keep_session_alive(client, recipe_request):
    with client.websocket_connect("/api/v1/ws") as ws:
        ws.send_text(json.dumps(recipe_request))
        collect_until_done(ws)

        ws.send_json({"type": "start_timer", "seconds": 1e20})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "start_timer", "seconds": True})
        assert ws.receive_json() == {"type": "error", "message": "No timer for this step"}

        ws.send_json({"type": "next"})
        current = ws.receive_json()
        assert current["type"] == "current"
        assert current["index"] == 1


def test_invalid_recipe_request(client):
    with client.websocket_connect("/api/v1/ws") as ws:
        ws.send_text(json.dumps({"dish": ""}))
        message = ws.receive_json()
        assert message["type"] == "error"
        assert "Invalid recipe request" in message["message"]


def test_missing_api_key(client):
    app.dependency_overrides[provide_chat_client] = lambda: None
    with client.websocket_connect("/api/v1/ws") as ws:
        message = ws.receive_json()
        assert message["type"] == "error"
        assert "OPENAI_API_KEY" in message["message"]


def test_openai_failure(client, recipe_request):
    app.dependency_overrides[provide_chat_client] = lambda: FakeChatClient(error=OpenAIError("boom"))
    with client.websocket_connect("/api/v1/ws") as ws:
        ws.send_text(json.dumps(recipe_request))
        message = ws.receive_json()
        assert message == {"type": "error", "message": "OpenAI request failed: boom"}
