"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Round state machine states.

    Flow: IDLE → BET_COMMITTED → PLAYER_TURN → DEALER_TURN → SETTLED → IDLE
    """

    # No bet, no round
    IDLE = auto()

    # Bet taken, cards not yet dealt
    BET_COMMITTED = auto()

    # Player actions
    PLAYER_TURN = auto()

    # Dealer plays
    DEALER_TURN = auto()

    # Outcome computed, ledger updated
    SETTLED = auto()

    # Balance exhausted
    BANKRUPT = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid state transitions
VALID_TRANSITIONS: dict[GameState, list[GameState]] = {
    GameState.IDLE: [GameState.BET_COMMITTED],
    GameState.BET_COMMITTED: [GameState.PLAYER_TURN],
    GameState.PLAYER_TURN: [GameState.PLAYER_TURN, GameState.DEALER_TURN, GameState.SETTLED],  # SETTLED on bust
    GameState.DEALER_TURN: [GameState.SETTLED],
    GameState.SETTLED: [GameState.IDLE, GameState.BANKRUPT],
    GameState.BANKRUPT: [],  # Terminal state
}


def is_valid_transition(from_state: GameState, to_state: GameState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
