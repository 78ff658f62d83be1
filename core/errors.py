"""Game error types.

All errors are recoverable: the operation that raised leaves the game
unchanged, and ``message`` is safe to show to the player.
"""


class GameError(Exception):
    """Base class for rejected game operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        """Return the error kind name (e.g. 'InvalidAmount')."""
        return type(self).__name__


class InvalidAmount(GameError):
    """Bet amount is missing, non-numeric, zero, or negative."""


class InsufficientBalance(GameError):
    """Bet exceeds the available balance."""

    def __init__(self, required: int, available) -> None:
        super().__init__(f"Insufficient balance (${available}) for a ${required} bet")
        self.required = required
        self.available = available


class IllegalAction(GameError):
    """Action invoked outside the phase where it is allowed."""


class EmptyDeck(GameError, IndexError):
    """Draw attempted on a deck with no cards left."""

    def __init__(self, message: str = "Cannot draw from empty deck") -> None:
        super().__init__(message)
