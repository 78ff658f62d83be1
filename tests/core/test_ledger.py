"""Tests for the betting ledger."""

from decimal import Decimal

import pytest

from core.errors import IllegalAction, InsufficientBalance, InvalidAmount
from core.ledger import Ledger, parse_bet_amount


class TestParseBetAmount:
    """Tests for bet amount validation."""

    @pytest.mark.parametrize("raw, expected", [(100, 100), ("100", 100), (" 25 ", 25), ("+5", 5)])
    def test_accepts_positive_whole_numbers(self, raw, expected):
        assert parse_bet_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [0, -5, "0", "-5", "", "   ", "abc", "12abc", "12.5", "1e3", None, 12.0, True, "٣"],
    )
    def test_rejects_everything_else(self, raw):
        with pytest.raises(InvalidAmount):
            parse_bet_amount(raw)

    def test_rejects_oversized_digit_string(self):
        # Longer than int() will convert from text
        with pytest.raises(InvalidAmount):
            parse_bet_amount("9" * 5000)

    def test_oversized_digit_string_leaves_ledger_untouched(self, ledger):
        with pytest.raises(InvalidAmount):
            ledger.commit_bet(" " + "1" * 5000 + " ")
        assert ledger.balance == Decimal("1000")
        assert not ledger.has_bet


class TestLedger:
    """Tests for commit and settle."""

    def test_commit_moves_stake_into_escrow(self, ledger):
        assert ledger.commit_bet(100) == 100
        assert ledger.balance == Decimal("900")
        assert ledger.current_bet == 100
        assert ledger.has_bet

    def test_commit_whole_balance(self, ledger):
        ledger.commit_bet(1000)
        assert ledger.balance == 0
        assert not ledger.is_bankrupt  # stake still in play

    @pytest.mark.parametrize("amount", [0, -5, "abc"])
    def test_invalid_amount_leaves_balance(self, ledger, amount):
        with pytest.raises(InvalidAmount):
            ledger.commit_bet(amount)
        assert ledger.balance == Decimal("1000")
        assert ledger.current_bet == 0

    def test_insufficient_balance(self, ledger):
        with pytest.raises(InsufficientBalance) as exc_info:
            ledger.commit_bet(1001)
        assert exc_info.value.required == 1001
        assert ledger.balance == Decimal("1000")
        assert ledger.current_bet == 0

    def test_second_commit_rejected(self, ledger):
        ledger.commit_bet(100)
        with pytest.raises(IllegalAction):
            ledger.commit_bet(100)
        assert ledger.balance == Decimal("900")
        assert ledger.current_bet == 100

    @pytest.mark.parametrize(
        "multiplier, balance",
        [("0", "900"), ("1", "1000"), ("2", "1100"), ("2.5", "1150")],
    )
    def test_settle(self, ledger, multiplier, balance):
        ledger.commit_bet(100)
        payout = ledger.settle(Decimal(multiplier))
        assert payout == Decimal(100) * Decimal(multiplier)
        assert ledger.balance == Decimal(balance)
        assert ledger.current_bet == 0

    def test_blackjack_on_odd_stake_keeps_half_units(self):
        ledger = Ledger(balance=Decimal("15"))
        ledger.commit_bet(15)
        ledger.settle(Decimal("2.5"))
        assert ledger.balance == Decimal("37.5")

    def test_settle_without_bet(self, ledger):
        with pytest.raises(IllegalAction):
            ledger.settle(Decimal("2"))

    def test_bankrupt_after_losing_everything(self):
        ledger = Ledger(balance=Decimal("50"))
        ledger.commit_bet(50)
        ledger.settle(Decimal("0"))
        assert ledger.balance == 0
        assert ledger.is_bankrupt

    def test_fractional_remainder_is_bankrupt(self):
        assert Ledger(balance=Decimal("0.5")).is_bankrupt
        assert not Ledger(balance=Decimal("1")).is_bankrupt

    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError):
            Ledger(balance=Decimal("-1"))
