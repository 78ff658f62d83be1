"""Pytest fixtures for blackjack table tests."""

import pytest
from decimal import Decimal
from random import Random

from core.cards import Card, Deck
from core.hand import Hand
from core.ledger import Ledger
from core.game import BlackjackGame


def make_hand(*cards: str) -> Hand:
    """Build a hand from card strings like 'AS', '10H', 'K♣'."""
    return Hand(cards=[Card.from_string(c) for c in cards])


def stacked_deck(cards):
    """Deck factory that deals ``cards`` first-to-last."""

    def factory(rng: Random) -> Deck:
        deck = Deck(rng=rng)
        deck._cards = [Card.from_string(c) for c in reversed(cards)]
        return deck

    return factory


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    return Deck.fresh(rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S", "6H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S", "6H", "KC")


@pytest.fixture
def ledger():
    """Ledger with the default 1000 balance."""
    return Ledger(balance=Decimal("1000"))


@pytest.fixture
def game(rng):
    """A new game instance."""
    return BlackjackGame(
        initial_balance=Decimal("1000"),
        rng=rng,
    )


@pytest.fixture
def stacked_game():
    """
    Factory for games whose deck deals the given cards in order.

    Deal order is player, dealer, player, dealer, then hits and dealer draws.
    """

    def make(*cards: str, balance: int = 1000) -> BlackjackGame:
        return BlackjackGame(
            initial_balance=Decimal(balance),
            deck_factory=stacked_deck(cards),
        )

    return make



@pytest.fixture
def deck_of():
    """Return the stacked deck factory builder for tests that build games themselves."""
    return stacked_deck
