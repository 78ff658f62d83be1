"""Betting ledger: balance, escrowed wager, and settlement."""

import re
from dataclasses import dataclass
from decimal import Decimal

from core.errors import IllegalAction, InsufficientBalance, InvalidAmount

_WHOLE_NUMBER = re.compile(r"[+-]?\d+", re.ASCII)


def parse_bet_amount(raw: object) -> int:
    """
    Validate a bet amount taken from an int or free-form text.

    Args:
        raw: An ``int`` or a string such as ``" 100 "``

    Returns:
        The amount as a positive integer

    Raises:
        InvalidAmount: If the input is missing, not a whole number, or not positive
    """
    if isinstance(raw, bool):
        raise InvalidAmount("Enter a valid bet amount")

    if isinstance(raw, int):
        amount = raw
    elif isinstance(raw, str) and _WHOLE_NUMBER.fullmatch(raw.strip()):
        try:
            amount = int(raw.strip())
        except ValueError as exc:
            # Past the interpreter's int digit limit
            raise InvalidAmount("Enter a valid bet amount") from exc
    else:
        raise InvalidAmount("Enter a valid bet amount")

    if amount <= 0:
        raise InvalidAmount("Bet amount must be positive")
    return amount


@dataclass
class Ledger:
    """
    Player balance with an escrowed wager.

    A committed bet leaves the balance immediately and comes back,
    scaled by the outcome multiplier, when the round is settled.
    """

    balance: Decimal = Decimal("1000")
    current_bet: int = 0

    def __post_init__(self) -> None:
        self.balance = Decimal(str(self.balance))
        if self.balance < 0:
            raise ValueError("Balance cannot be negative")

    @property
    def has_bet(self) -> bool:
        """Check if a wager is currently held."""
        return self.current_bet > 0

    @property
    def is_bankrupt(self) -> bool:
        """Check if no whole-number bet can be placed with the balance."""
        return not self.has_bet and self.balance < 1

    def commit_bet(self, amount: object) -> int:
        """
        Move a wager from the balance into escrow.

        Args:
            amount: Bet amount (int or free-form text)

        Returns:
            The committed amount

        Raises:
            InvalidAmount: Amount is not a positive whole number
            InsufficientBalance: Amount exceeds the balance
            IllegalAction: A wager is already held
        """
        value = parse_bet_amount(amount)

        if self.has_bet:
            raise IllegalAction("A bet is already placed")

        if Decimal(value) > self.balance:
            raise InsufficientBalance(required=value, available=self.balance)

        self.balance -= value
        self.current_bet = value
        return value

    def settle(self, multiplier: Decimal) -> Decimal:
        """
        Pay out the escrowed wager.

        Args:
            multiplier: 0 (loss), 1 (push), 2 (win) or 2.5 (blackjack)

        Returns:
            The amount credited to the balance
        """
        if not self.has_bet:
            raise IllegalAction("No bet to settle")

        payout = Decimal(self.current_bet) * Decimal(str(multiplier))
        self.balance += payout
        self.current_bet = 0
        return payout
