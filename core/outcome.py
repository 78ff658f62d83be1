"""Round outcome resolution and payout multipliers."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from core.hand import BLACKJACK, Hand


class OutcomeKind(Enum):
    """Round results with their payout multipliers."""

    PLAYER_BUST = "player_bust"
    DEALER_BUST = "dealer_bust"
    BLACKJACK = "blackjack"
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"

    @property
    def multiplier(self) -> Decimal:
        """Return the stake multiplier credited on settlement."""
        return _MULTIPLIERS[self]

    @property
    def is_win(self) -> bool:
        return self.multiplier > 1

    @property
    def is_loss(self) -> bool:
        return self.multiplier == 0

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


_MULTIPLIERS: dict[OutcomeKind, Decimal] = {
    OutcomeKind.PLAYER_BUST: Decimal("0"),
    OutcomeKind.DEALER_BUST: Decimal("2"),
    OutcomeKind.BLACKJACK: Decimal("2.5"),
    OutcomeKind.WIN: Decimal("2"),
    OutcomeKind.LOSS: Decimal("0"),
    OutcomeKind.PUSH: Decimal("1"),
}


@dataclass(frozen=True)
class Outcome:
    """Resolved round result."""

    kind: OutcomeKind
    player_score: int
    dealer_score: int

    @property
    def multiplier(self) -> Decimal:
        return self.kind.multiplier

    @property
    def message(self) -> str:
        """Return the result line shown to the player."""
        p, d = self.player_score, self.dealer_score
        return {
            OutcomeKind.PLAYER_BUST: f"Bust! ({p}) Dealer wins!",
            OutcomeKind.DEALER_BUST: f"Dealer busts! ({d}) You win!",
            OutcomeKind.BLACKJACK: "Blackjack! You win!",
            OutcomeKind.WIN: f"You win! ({p} vs {d})",
            OutcomeKind.LOSS: f"Dealer wins! ({p} vs {d})",
            OutcomeKind.PUSH: f"Push! ({p} vs {d})",
        }[self.kind]


def resolve(player_hand: Hand, dealer_hand: Hand) -> Outcome:
    """
    Compare final player and dealer hands.

    Checks run in a fixed order and the first match wins, so a dealer
    bust pays 2x even when the player holds a natural.
    """
    player_value = player_hand.value
    dealer_value = dealer_hand.value

    if player_value > BLACKJACK:
        kind = OutcomeKind.PLAYER_BUST
    elif dealer_value > BLACKJACK:
        kind = OutcomeKind.DEALER_BUST
    elif player_hand.is_blackjack:
        kind = OutcomeKind.BLACKJACK
    elif player_value > dealer_value:
        kind = OutcomeKind.WIN
    elif dealer_value > player_value:
        kind = OutcomeKind.LOSS
    else:
        kind = OutcomeKind.PUSH

    return Outcome(kind=kind, player_score=player_value, dealer_score=dealer_value)
