"""Tests for the game WebSocket."""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from api.main import app
from api.session import get_session_store
from api.websocket import manager
from core.game import BlackjackGame


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(manager, "step_delay", 0)
    return TestClient(app)


@pytest.fixture
def session(deck_of):
    def create(*cards: str, balance: int = 1000) -> str:
        game = BlackjackGame(initial_balance=balance, deck_factory=deck_of(cards) if cards else None)
        return get_session_store().create(game)

    return create


def _receive_until(ws, event_type: str) -> list[dict]:
    """Collect messages up to and including the named event."""
    messages = []
    while True:
        message = ws.receive_json()
        messages.append(message)
        if message.get("event_type") == event_type:
            return messages


def test_unknown_session_is_closed(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/game/not-a-session") as ws:
            ws.receive_json()
    assert exc_info.value.code == 4404


def test_initial_state(client, session):
    with client.websocket_connect(f"/ws/game/{session()}") as ws:
        message = ws.receive_json()
        assert message["type"] == "state_update"
        assert message["state"]["state"] == "IDLE"
        assert message["state"]["balance"] == 1000


def test_bet_sends_event_with_state(client, session):
    with client.websocket_connect(f"/ws/game/{session()}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": "100"})

        message = ws.receive_json()
        assert message["type"] == "event"
        assert message["event_type"] == "BET_PLACED"
        assert message["data"]["amount"] == 100
        assert message["state"]["current_bet"] == 100
        assert message["state"]["balance"] == 900


def test_round_streams_dealer_draws(client, session):
    token = session("10S", "7D", "9C", "6H", "5S")
    with client.websocket_connect(f"/ws/game/{token}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 100})
        _receive_until(ws, "BET_PLACED")

        ws.send_json({"type": "deal"})
        dealt = _receive_until(ws, "ROUND_STARTED")
        cards = [m["data"]["card"] for m in dealt if m["event_type"] == "CARD_DEALT"]
        assert cards == ["10♠", "7♦", "9♣", "??"]
        assert dealt[-1]["state"]["dealer_hand"]["value"] is None

        ws.send_json({"type": "action", "action": "stand"})
        played = _receive_until(ws, "ROUND_ENDED")
        types = [m["event_type"] for m in played]
        assert types.index("DEALER_REVEALS") < types.index("DEALER_HITS") < types.index("DEALER_STANDS")

        draw = next(m for m in played if m["event_type"] == "DEALER_HITS")
        assert draw["data"]["hand_value"] == 18

        final = played[-1]
        assert final["data"]["outcome"] == "win"
        assert final["state"]["state"] == "IDLE"
        assert final["state"]["balance"] == 1100


def test_hit_streams_card(client, session):
    token = session("5S", "7D", "6C", "6H", "4S")
    with client.websocket_connect(f"/ws/game/{token}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 10})
        _receive_until(ws, "BET_PLACED")
        ws.send_json({"type": "deal"})
        _receive_until(ws, "ROUND_STARTED")

        ws.send_json({"type": "action", "action": "hit"})
        messages = _receive_until(ws, "PLAYER_HIT")
        assert messages[-1]["data"]["card"] == "4♠"
        assert messages[-1]["state"]["player_hand"]["value"] == 15


def test_rejected_action_reports_error(client, session):
    with client.websocket_connect(f"/ws/game/{session()}") as ws:
        ws.receive_json()
        ws.send_json({"type": "action", "action": "hit"})

        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["error"] == "IllegalAction"

        event = ws.receive_json()
        assert event["event_type"] == "INVALID_ACTION"
        assert event["state"]["state"] == "IDLE"


def test_insufficient_balance(client, session):
    with client.websocket_connect(f"/ws/game/{session(balance=50)}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 60})

        error = ws.receive_json()
        assert error["error"] == "InsufficientBalance"
        event = ws.receive_json()
        assert event["event_type"] == "INSUFFICIENT_FUNDS"
        assert event["state"]["balance"] == 50


def test_bad_messages(client, session):
    with client.websocket_connect(f"/ws/game/{session()}") as ws:
        ws.receive_json()

        ws.send_text("not json")
        assert ws.receive_json()["error"] == "BadMessage"

        ws.send_json(["a", "list"])
        assert ws.receive_json()["error"] == "BadMessage"

        ws.send_json({"type": "shuffle"})
        assert ws.receive_json()["error"] == "UnknownMessage"

        ws.send_json({"type": "action", "action": "split"})
        assert ws.receive_json()["error"] == "UnknownAction"


def test_reset_game(client, session):
    token = session("10S", "10D", "7C", "9H", balance=50)
    with client.websocket_connect(f"/ws/game/{token}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 50})
        _receive_until(ws, "BET_PLACED")
        ws.send_json({"type": "deal"})
        _receive_until(ws, "ROUND_STARTED")
        ws.send_json({"type": "action", "action": "stand"})
        ended = _receive_until(ws, "GAME_ENDED")
        assert ended[-1]["state"]["game_over"] is True

        ws.send_json({"type": "reset_game"})
        message = ws.receive_json()
        assert message["type"] == "state_update"
        assert message["state"]["state"] == "IDLE"
        assert message["state"]["balance"] == 1000

    assert get_session_store().get(token).balance == 1000


def test_resumes_open_dealer_turn_on_connect(client, session):
    token = session("10S", "2D", "8C", "3H", "4S", "2C", "6D")
    game = get_session_store().get(token)
    game.place_bet(10)
    game.deal()
    game.stand(run_dealer=False)

    with client.websocket_connect(f"/ws/game/{token}") as ws:
        first = ws.receive_json()
        assert first["state"]["state"] == "DEALER_TURN"

        played = _receive_until(ws, "ROUND_ENDED")
        hits = [m for m in played if m["event_type"] == "DEALER_HITS"]
        assert [m["data"]["hand_value"] for m in hits] == [9, 11, 17]
        assert played[-1]["state"]["balance"] == 1010


def test_events_carry_timestamp(client, session):
    with client.websocket_connect(f"/ws/game/{session()}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 10})
        assert ws.receive_json()["timestamp"]


def test_second_connection_is_refused(client, session):
    token = session()
    with client.websocket_connect(f"/ws/game/{token}") as first:
        first.receive_json()

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"/ws/game/{token}") as second:
                second.receive_json()
        assert exc_info.value.code == 4409

        first.send_json({"type": "get_state"})
        assert first.receive_json()["type"] == "state_update"

    # The session can be reopened once the first socket is gone
    with client.websocket_connect(f"/ws/game/{token}") as again:
        assert again.receive_json()["type"] == "state_update"


def test_round_settled_over_http_during_dealer_pause(client, session, monkeypatch):
    monkeypatch.setattr(manager, "step_delay", 1.0)
    token = session("10S", "2D", "8C", "3H", "4S", "2C", "6D")
    with client.websocket_connect(f"/ws/game/{token}") as ws:
        ws.receive_json()
        ws.send_json({"type": "bet", "amount": 10})
        _receive_until(ws, "BET_PLACED")
        ws.send_json({"type": "deal"})
        _receive_until(ws, "ROUND_STARTED")

        ws.send_json({"type": "action", "action": "stand"})
        _receive_until(ws, "DEALER_HITS")

        # The socket is now sleeping before the next dealer draw
        response = client.get("/api/game/state", headers={"X-Session-ID": token})
        assert response.json()["state"] == "IDLE"
        assert response.json()["balance"] == 1010

        played = _receive_until(ws, "ROUND_ENDED")
        assert all(m["type"] == "event" for m in played)
        assert played[-1]["state"]["balance"] == 1010

        ws.send_json({"type": "get_state"})
        assert ws.receive_json()["state"]["state"] == "IDLE"
