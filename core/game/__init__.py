"""Round engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameState
from core.game.engine import BlackjackGame, DEALER_STANDS_ON
from core.game.view import CardView, TableView

__all__ = [
    "GameEvent",
    "EventType",
    "GameState",
    "BlackjackGame",
    "DEALER_STANDS_ON",
    "CardView",
    "TableView",
]
