"""Read-only table snapshot for the presentation layer."""

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from core.cards import Card
from core.hand import score

if TYPE_CHECKING:
    from core.game.engine import BlackjackGame


@dataclass(frozen=True)
class CardView:
    """A card as it should be displayed; hidden cards carry no face."""

    rank: str
    suit: str
    value: int
    is_red: bool = False
    hidden: bool = False

    @classmethod
    def face_up(cls, card: Card) -> "CardView":
        return cls(rank=str(card.rank), suit=str(card.suit), value=card.value, is_red=card.is_red)

    @classmethod
    def face_down(cls) -> "CardView":
        return cls(rank="?", suit="?", value=0, hidden=True)


@dataclass(frozen=True)
class TableView:
    """
    Everything a renderer needs for one frame.

    ``dealer_value`` is None while the hole card is hidden; ``dealer_showing``
    is always the total of the face-up dealer cards.
    """

    state: str
    message: str
    balance: Decimal
    current_bet: int
    player_cards: tuple[CardView, ...]
    player_value: int
    dealer_cards: tuple[CardView, ...]
    dealer_value: int | None
    dealer_showing: int
    dealer_revealed: bool
    allowed_actions: tuple[str, ...]
    outcome: str | None = None
    multiplier: Decimal | None = None

    @property
    def is_game_over(self) -> bool:
        return self.state == "BANKRUPT"


def build_view(game: "BlackjackGame") -> TableView:
    """Build a ``TableView`` from the engine's current state."""
    revealed = game.dealer_revealed
    hole = game.hole_card

    dealer_cards = []
    face_up_cards = []
    for card in game.dealer_hand:
        if not revealed and card == hole:
            dealer_cards.append(CardView.face_down())
        else:
            dealer_cards.append(CardView.face_up(card))
            face_up_cards.append(card)

    outcome = game.last_outcome
    return TableView(
        state=game.state.name,
        message=game.message,
        balance=game.balance,
        current_bet=game.current_bet,
        player_cards=tuple(CardView.face_up(c) for c in game.player_hand),
        player_value=game.player_hand.value,
        dealer_cards=tuple(dealer_cards),
        dealer_value=game.dealer_hand.value if revealed else None,
        dealer_showing=score(face_up_cards),
        dealer_revealed=revealed,
        allowed_actions=tuple(game.allowed_actions),
        outcome=outcome.kind.value if outcome else None,
        multiplier=outcome.multiplier if outcome else None,
    )
