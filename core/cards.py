"""Playing cards and the single 52-card deck dealt each round."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterator

from core.errors import EmptyDeck


class Suit(Enum):
    """Card suits, as (letter, symbol)."""

    SPADES = ("S", "♠")
    CLUBS = ("C", "♣")
    HEARTS = ("H", "♥")
    DIAMONDS = ("D", "♦")

    def __init__(self, letter: str, symbol: str) -> None:
        self.letter = letter
        self.symbol = symbol

    def __str__(self) -> str:
        return self.symbol

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @classmethod
    def parse(cls, text: str) -> "Suit":
        """Look up a suit by letter ('S', 'h') or symbol ('♠')."""
        text = text.upper()
        for suit in cls:
            if text in (suit.letter, suit.symbol):
                return suit
        raise ValueError(f"Invalid suit: {text}")


class Rank(Enum):
    """Card ranks, as (label, points with an ace counted high)."""

    ACE = ("A", 11)
    TWO = ("2", 2)
    THREE = ("3", 3)
    FOUR = ("4", 4)
    FIVE = ("5", 5)
    SIX = ("6", 6)
    SEVEN = ("7", 7)
    EIGHT = ("8", 8)
    NINE = ("9", 9)
    TEN = ("10", 10)
    JACK = ("J", 10)
    QUEEN = ("Q", 10)
    KING = ("K", 10)

    def __init__(self, label: str, points: int) -> None:
        self.label = label
        self.points = points

    def __str__(self) -> str:
        return self.label

    @property
    def is_ace(self) -> bool:
        return self is Rank.ACE

    @classmethod
    def parse(cls, text: str) -> "Rank":
        """Look up a rank by label; 'T' is accepted for ten."""
        text = text.upper()
        if text == "T":
            return cls.TEN
        for rank in cls:
            if rank.label == text:
                return rank
        raise ValueError(f"Invalid rank: {text}")


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card. Equal cards compare and hash equal."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Point value, with an ace at 11; ``hand.score`` lowers aces as needed."""
        return self.rank.points

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @property
    def is_red(self) -> bool:
        return self.suit.is_red

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse a card such as 'AS', '10h', 'TD' or 'K♥'."""
        s = s.strip()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s!r}")
        return cls(Rank.parse(s[:-1]), Suit.parse(s[-1]))


def build_cards() -> list[Card]:
    """Return one card per (rank, suit) pair, unshuffled."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """
    One 52-card deck. Cards are dealt from the end of the list.

    Every round gets a freshly built and shuffled deck (see ``Deck.fresh``);
    nothing carries over between rounds.
    """

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()
        self._cards: list[Card] = build_cards()

    @classmethod
    def fresh(cls, rng: Random | None = None) -> "Deck":
        """Build a full deck and shuffle it."""
        deck = cls(rng=rng)
        deck.shuffle()
        return deck

    def reset(self) -> None:
        """Put all 52 cards back, in order."""
        self._cards = build_cards()

    def shuffle(self) -> None:
        # Random.shuffle is a Fisher-Yates shuffle: every order equally likely
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """Remove and return the next card."""
        if not self._cards:
            raise EmptyDeck()
        return self._cards.pop()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)
