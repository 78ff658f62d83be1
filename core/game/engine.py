"""Blackjack round engine with state machine."""

from decimal import Decimal
from random import Random
from typing import Callable, NoReturn

from transitions import Machine

from core.cards import Card, Deck
from core.errors import EmptyDeck, GameError, IllegalAction, InsufficientBalance
from core.hand import Hand
from core.ledger import Ledger
from core.outcome import Outcome, OutcomeKind, resolve
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import GameState
from core.game.view import TableView, build_view
from logging_utils import get_logger

logger = get_logger(__name__)

# Dealer draws below this total and stands on it or above, soft or hard
DEALER_STANDS_ON = 17


class BlackjackGame:
    """
    Single-player blackjack round engine using a state machine.

    This is the core game logic, completely UI-agnostic. The engine owns
    the deck, both hands and the ledger; callers drive it through
    ``place_bet``, ``deal``, ``hit`` and ``stand`` and read it through
    properties, ``view()`` and events. Rejected operations raise a
    ``GameError`` and leave the game untouched.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "commit", "source": "idle", "dest": "bet_committed"},
        {"trigger": "open_play", "source": "bet_committed", "dest": "player_turn"},
        {"trigger": "player_action", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "settle_round", "source": ["player_turn", "dealer_turn"], "dest": "settled"},
        {"trigger": "new_round", "source": "settled", "dest": "idle"},
        {"trigger": "end_game", "source": "settled", "dest": "bankrupt"},
    ]

    def __init__(
        self,
        initial_balance: Decimal | int = Decimal("1000"),
        rng: Random | None = None,
        deck_factory: Callable[[Random], Deck] | None = None,
    ) -> None:
        """
        Initialize a new blackjack game.

        Args:
            initial_balance: Starting balance
            rng: Random number generator for reproducible games
            deck_factory: Builds the shuffled deck for each deal
                (defaults to a fresh 52-card deck)
        """
        self._rng = rng or Random()
        self._deck_factory = deck_factory or Deck.fresh
        self.ledger = Ledger(balance=Decimal(str(initial_balance)))
        self.deck: Deck | None = None
        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.hole_card: Card | None = None
        self.last_outcome: Outcome | None = None
        self.message = "Place your bet."
        self.events = EventEmitter()

        initial = GameState.BANKRUPT if self.ledger.is_bankrupt else GameState.IDLE
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=initial.name.lower(),
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    @property
    def balance(self) -> Decimal:
        return self.ledger.balance

    @property
    def current_bet(self) -> int:
        return self.ledger.current_bet

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def _fail(self, error: GameError) -> NoReturn:
        """Surface a rejected operation and raise it."""
        self.message = error.message
        if isinstance(error, InsufficientBalance):
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=error.required,
                available=float(error.available),
            )
        else:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                error=error.kind,
                message=error.message,
                state=self.state.name,
            )
        logger.warning("Rejected in %s: %s", self.state.name, error.message)
        raise error

    def _require(self, state: GameState, action: str) -> None:
        if self.state != state:
            self._fail(IllegalAction(f"Cannot {action} now ({self.state})"))

    def place_bet(self, amount: object) -> int:
        """
        Commit a bet for the next round.

        Args:
            amount: Bet amount, an int or free-form text such as "100"

        Returns:
            The committed amount
        """
        if self.state == GameState.BANKRUPT:
            self._fail(IllegalAction("Out of money! Game over."))
        self._require(GameState.IDLE, "bet")

        try:
            committed = self.ledger.commit_bet(amount)
        except GameError as exc:
            self._fail(exc)

        # Reset for new round
        self.player_hand.clear()
        self.dealer_hand.clear()
        self.hole_card = None
        self.last_outcome = None

        self.commit()
        self.message = f"Bet ${committed} placed. Press Deal."
        self.events.emit_new(EventType.BET_PLACED, amount=committed, balance=float(self.balance))
        logger.info("Bet %d committed, balance now %s", committed, self.balance)
        return committed

    def deal(self) -> None:
        """Shuffle a fresh deck and deal two cards each."""
        if self.state == GameState.IDLE:
            self._fail(IllegalAction("Place a bet first."))
        self._require(GameState.BET_COMMITTED, "deal")

        self.deck = self._deck_factory(self._rng)
        self.events.emit_new(EventType.DECK_SHUFFLED, cards_remaining=len(self.deck))

        # Deal: player, dealer, player, dealer (face down)
        try:
            self._deal_card_to_hand(self.player_hand)
            self._deal_card_to_hand(self.dealer_hand)
            self._deal_card_to_hand(self.player_hand)
            self.hole_card = self._deal_card_to_hand(self.dealer_hand, face_up=False)
        except EmptyDeck:
            # Back to a committed bet with nothing dealt
            self.player_hand.clear()
            self.dealer_hand.clear()
            self.hole_card = None
            self.deck = None
            raise

        self.open_play()
        self.message = "Game in progress..."
        self.events.emit_new(EventType.ROUND_STARTED, bet=self.current_bet)
        logger.info("Dealt player %s, dealer shows %s", self.player_hand, self.dealer_hand.cards[0])

        if self.player_hand.is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK)
            self._begin_dealer_turn()
            self.finish_dealer_turn()

    def _draw(self) -> Card:
        if self.deck is None:
            self._fail(IllegalAction("No cards have been dealt"))
        try:
            return self.deck.draw()
        except EmptyDeck as exc:
            self._fail(exc)

    def _deal_card_to_hand(self, hand: Hand, face_up: bool = True) -> Card:
        """Deal a card to a hand."""
        card = self._draw()
        hand.add_card(card)
        is_dealer = hand is self.dealer_hand
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer" if is_dealer else "player",
            hand_value=hand.value if face_up or not is_dealer else None,
        )
        return card

    def hit(self) -> Card:
        """Player hits (takes another card)."""
        self._require(GameState.PLAYER_TURN, "hit")

        card = self._deal_card_to_hand(self.player_hand)
        self.events.emit_new(EventType.PLAYER_HIT, card=str(card), hand_value=self.player_hand.value)

        if self.player_hand.is_busted:
            # Dealer does not play out a player bust
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_value=self.player_hand.value)
            self._resolve_round()
        else:
            self.player_action()
        return card

    def stand(self, run_dealer: bool = True) -> Outcome | None:
        """
        Player stands and the dealer turn begins.

        Args:
            run_dealer: Play the dealer out immediately. Pass False to drive
                the dealer one draw at a time with ``dealer_step``.

        Returns:
            The round outcome, or None while the dealer turn is still open
        """
        self._require(GameState.PLAYER_TURN, "stand")

        self.events.emit_new(EventType.PLAYER_STAND, hand_value=self.player_hand.value)
        self._begin_dealer_turn()
        if run_dealer:
            return self.finish_dealer_turn()
        return None

    def _begin_dealer_turn(self) -> None:
        self.player_done()
        self.message = "Dealer's turn..."
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.hole_card),
            hand_value=self.dealer_hand.value,
        )

    def dealer_step(self) -> bool:
        """
        Advance the dealer turn by one decision.

        Returns:
            True if the dealer drew a card, False once the dealer stood
            and the round was settled
        """
        self._require(GameState.DEALER_TURN, "play the dealer")

        if self.dealer_hand.value < DEALER_STANDS_ON:
            card = self._deal_card_to_hand(self.dealer_hand)
            self.events.emit_new(EventType.DEALER_HITS, card=str(card), hand_value=self.dealer_hand.value)
            logger.debug("Dealer draws %s -> %d", card, self.dealer_hand.value)
            return True

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self._resolve_round()
        return False

    def finish_dealer_turn(self) -> Outcome:
        """Run the remaining dealer draws and settle the round."""
        while self.dealer_step():
            pass
        return self.last_outcome  # type: ignore[return-value]

    def _resolve_round(self) -> Outcome:
        """Resolve the round and pay out the bet."""
        outcome = resolve(self.player_hand, self.dealer_hand)
        payout = self.ledger.settle(outcome.multiplier)
        self.last_outcome = outcome
        self.deck = None

        if outcome.kind.is_win:
            self.events.emit_new(EventType.PLAYER_WINS, outcome=outcome.kind.value, amount=float(payout))
        elif outcome.kind == OutcomeKind.PUSH:
            self.events.emit_new(EventType.PUSH, amount=float(payout))
        else:
            self.events.emit_new(EventType.PLAYER_LOSES, outcome=outcome.kind.value)

        self.settle_round()
        self.message = outcome.message
        self.events.emit_new(
            EventType.ROUND_ENDED,
            outcome=outcome.kind.value,
            multiplier=float(outcome.multiplier),
            payout=float(payout),
            balance=float(self.balance),
        )
        logger.info(
            "Round settled: %s (player %d, dealer %d), paid %s, balance %s",
            outcome.kind.value,
            outcome.player_score,
            outcome.dealer_score,
            payout,
            self.balance,
        )

        # Check for game over
        if self.ledger.is_bankrupt:
            self.message += " Out of money! Game over."
            self.events.emit_new(EventType.GAME_ENDED, reason="bankrupt")
            logger.info("Balance exhausted, game over")
            self.end_game()
        else:
            self.new_round()
        return outcome

    @property
    def dealer_revealed(self) -> bool:
        """Check if the hole card may be shown."""
        return self.state not in (GameState.BET_COMMITTED, GameState.PLAYER_TURN)

    @property
    def can_bet(self) -> bool:
        return self.state == GameState.IDLE

    @property
    def can_deal(self) -> bool:
        return self.state == GameState.BET_COMMITTED

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.state == GameState.PLAYER_TURN and not self.player_hand.is_busted

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.state == GameState.PLAYER_TURN

    @property
    def allowed_actions(self) -> list[str]:
        """Names of the operations the player may invoke right now."""
        flags = {
            "bet": self.can_bet,
            "deal": self.can_deal,
            "hit": self.can_hit,
            "stand": self.can_stand,
        }
        return [name for name, allowed in flags.items() if allowed]

    def view(self) -> TableView:
        """Snapshot of the table for rendering."""
        return build_view(self)
