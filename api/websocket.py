"""WebSocket connection management with game engine integration."""

import asyncio
import json
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from api.schemas import GameStateResponse
from api.session import get_session_store, new_game
from config import config
from core.errors import GameError
from core.game import BlackjackGame, GameState
from core.game.events import GameEvent
from logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _game_state_to_dict(game: BlackjackGame) -> dict[str, Any]:
    """Convert game state to a dictionary for JSON serialization."""
    return GameStateResponse.from_view(game.view()).model_dump()


class ConnectionManager:
    """Track open sockets and buffer each session's game events until sent."""

    def __init__(self, step_delay: float | None = None) -> None:
        self.step_delay = config.game.dealer_step_delay if step_delay is None else step_delay
        self._connections: dict[str, WebSocket] = {}
        self._pending: dict[str, list[GameEvent]] = {}
        self._watched: dict[str, tuple[BlackjackGame, Any]] = {}

    def is_connected(self, session_id: str) -> bool:
        return session_id in self._connections

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a session's only connection."""
        await websocket.accept()
        self._connections[session_id] = websocket
        self._pending[session_id] = []

    def watch(self, session_id: str, game: BlackjackGame) -> None:
        """Buffer events from ``game`` for this session, replacing any previous game."""
        self.unwatch(session_id)
        pending = self._pending.setdefault(session_id, [])
        handler = pending.append
        game.subscribe(handler)
        self._watched[session_id] = (game, handler)

    def unwatch(self, session_id: str) -> None:
        watched = self._watched.pop(session_id, None)
        if watched is not None:
            game, handler = watched
            game.events.unsubscribe(handler)

    def disconnect(self, session_id: str) -> None:
        """Remove a connection; the game stays in the session store."""
        self.unwatch(session_id)
        self._connections.pop(session_id, None)
        self._pending.pop(session_id, None)

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        websocket = self._connections.get(session_id)
        if websocket is not None:
            await websocket.send_json(message)

    async def send_state(self, session_id: str, game: BlackjackGame) -> None:
        await self.send_message(session_id, {
            "type": "state_update",
            "state": _game_state_to_dict(game),
        })

    async def flush(self, session_id: str, game: BlackjackGame) -> None:
        """Send buffered events, each with the current table state."""
        pending = self._pending.get(session_id, [])
        events = list(pending)
        pending.clear()
        for event in events:
            await self.send_message(session_id, {
                "type": "event",
                **event.to_dict(),
                "state": _game_state_to_dict(game),
            })

    async def play_dealer(self, session_id: str, game: BlackjackGame) -> None:
        """
        Run the dealer turn one draw at a time, pausing between draws.

        An HTTP request on the same session may settle the round during a
        pause; the loop then stops and forwards that request's events.
        """
        await self.flush(session_id, game)
        while game.state == GameState.DEALER_TURN and game.dealer_step():
            await self.flush(session_id, game)
            await asyncio.sleep(self.step_delay)
        await self.flush(session_id, game)


# Global connection manager
manager = ConnectionManager()


async def _handle_message(session_id: str, game: BlackjackGame, message: dict[str, Any]) -> BlackjackGame:
    """Apply one client message; returns the (possibly replaced) game."""
    msg_type = message.get("type")

    if msg_type == "get_state":
        await manager.send_state(session_id, game)

    elif msg_type == "bet":
        game.place_bet(message.get("amount"))
        await manager.flush(session_id, game)

    elif msg_type == "deal":
        game.deal()
        await manager.flush(session_id, game)

    elif msg_type == "action":
        action = message.get("action")
        if action == "hit":
            game.hit()
            await manager.flush(session_id, game)
        elif action == "stand":
            game.stand(run_dealer=False)
            await manager.play_dealer(session_id, game)
        else:
            await manager.send_message(session_id, {
                "type": "error",
                "error": "UnknownAction",
                "message": f"Unknown action: {action}",
            })

    elif msg_type == "reset_game":
        game = new_game()
        get_session_store().put(session_id, game)
        manager.watch(session_id, game)
        await manager.send_state(session_id, game)

    else:
        await manager.send_message(session_id, {
            "type": "error",
            "error": "UnknownMessage",
            "message": f"Unknown message type: {msg_type}",
        })

    return game


async def _report_error(session_id: str, game: BlackjackGame, exc: GameError) -> None:
    """Send a rejected operation to the client, then the events it raised."""
    await manager.send_message(session_id, {
        "type": "error",
        "error": exc.kind,
        "message": exc.message,
    })
    await manager.flush(session_id, game)


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "bet", "amount": 100}
    - {"type": "deal"}
    - {"type": "action", "action": "hit"|"stand"}
    - {"type": "reset_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "timestamp": "...", "state": {...}}
    - {"type": "error", "error": "...", "message": "..."}
    """
    game = get_session_store().get(session_id)
    if game is None:
        await websocket.close(code=4404, reason="Unknown or expired session")
        return
    if manager.is_connected(session_id):
        await websocket.close(code=4409, reason="Session already has an open connection")
        return

    await manager.connect(websocket, session_id)
    manager.watch(session_id, game)

    try:
        await manager.send_state(session_id, game)
        if game.state == GameState.DEALER_TURN:
            try:
                await manager.play_dealer(session_id, game)
            except GameError as exc:
                await _report_error(session_id, game, exc)

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None
            if not isinstance(message, dict):
                await manager.send_message(session_id, {
                    "type": "error",
                    "error": "BadMessage",
                    "message": "Messages must be JSON objects",
                })
                continue

            try:
                game = await _handle_message(session_id, game, message)
            except GameError as exc:
                await _report_error(session_id, game, exc)

    except WebSocketDisconnect:
        logger.info("WebSocket closed for session (state %s)", game.state.name)
    finally:
        manager.disconnect(session_id)
