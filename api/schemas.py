"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict
from typing import Any, Literal

from core.game.view import TableView


class BetRequest(BaseModel):
    """Request to place a bet.

    The amount is passed through unconverted (int, text from an input box,
    or anything else) so the ledger alone decides what is a valid bet.
    """

    amount: Any = None


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int
    is_red: bool = False
    hidden: bool = False


class HandResponse(BaseModel):
    """Hand representation; value is None while a card is hidden."""

    cards: list[CardResponse]
    value: int | None


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    message: str
    player_hand: HandResponse
    dealer_hand: HandResponse
    dealer_showing: int
    dealer_revealed: bool
    balance: float
    current_bet: int
    allowed_actions: list[str]
    outcome: str | None = None
    multiplier: float | None = None
    game_over: bool = False

    @classmethod
    def from_view(cls, view: TableView) -> "GameStateResponse":
        """Convert an engine snapshot to a response."""
        return cls(
            state=view.state,
            message=view.message,
            player_hand=HandResponse(
                cards=[CardResponse.model_validate(c) for c in view.player_cards],
                value=view.player_value,
            ),
            dealer_hand=HandResponse(
                cards=[CardResponse.model_validate(c) for c in view.dealer_cards],
                value=view.dealer_value,
            ),
            dealer_showing=view.dealer_showing,
            dealer_revealed=view.dealer_revealed,
            balance=float(view.balance),
            current_bet=view.current_bet,
            allowed_actions=list(view.allowed_actions),
            outcome=view.outcome,
            multiplier=float(view.multiplier) if view.multiplier is not None else None,
            game_over=view.is_game_over,
        )


class ErrorResponse(BaseModel):
    """Rejected operation."""

    detail: str
    error: str
