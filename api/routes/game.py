"""Game API endpoints."""

from fastapi import APIRouter, HTTPException, Header
from typing import Annotated

from api.schemas import (
    BetRequest,
    ActionRequest,
    ErrorResponse,
    GameStateResponse,
)
from api.session import get_session_store, new_game
from core.game import BlackjackGame, GameState

router = APIRouter()

_REJECTIONS = {400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


def _get_game(session_id: str) -> BlackjackGame:
    """Look up the session's game, finishing a dealer turn left open."""
    game = get_session_store().get(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")

    # A client that dropped mid-animation leaves the dealer turn unsettled
    if game.state == GameState.DEALER_TURN:
        game.finish_dealer_turn()
    return game


def _game_state_response(game: BlackjackGame) -> GameStateResponse:
    """Convert game state to response."""
    return GameStateResponse.from_view(game.view())


@router.post("/new")
async def new_game_session(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new game session, or reset the balance of an existing one."""
    store = get_session_store()
    if session_id is not None and store.get(session_id) is not None:
        store.put(session_id, new_game())
        return {"session_id": session_id}

    return {"session_id": store.create()}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game = _get_game(session_id)
    return _game_state_response(game)


@router.post("/bet", responses=_REJECTIONS)
async def place_bet(
    request: BetRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Commit a bet; cards are dealt by /deal."""
    game = _get_game(session_id)
    game.place_bet(request.amount)
    return _game_state_response(game)


@router.post("/deal", responses=_REJECTIONS)
async def deal(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Deal the opening cards."""
    game = _get_game(session_id)
    game.deal()
    return _game_state_response(game)


@router.post("/action", responses=_REJECTIONS)
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Execute a player action."""
    game = _get_game(session_id)

    actions = {
        "hit": game.hit,
        "stand": game.stand,
    }
    actions[request.action]()
    return _game_state_response(game)
