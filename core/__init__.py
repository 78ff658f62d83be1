"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Deck, Rank, Suit
from core.errors import (
    EmptyDeck,
    GameError,
    IllegalAction,
    InsufficientBalance,
    InvalidAmount,
)
from core.hand import Hand, is_natural_blackjack, score
from core.ledger import Ledger, parse_bet_amount
from core.outcome import Outcome, OutcomeKind, resolve

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "Hand",
    "score",
    "is_natural_blackjack",
    "Ledger",
    "parse_bet_amount",
    "Outcome",
    "OutcomeKind",
    "resolve",
    "GameError",
    "InvalidAmount",
    "InsufficientBalance",
    "IllegalAction",
    "EmptyDeck",
]
