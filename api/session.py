"""In-memory game sessions with signed session ids."""

from datetime import datetime, timedelta
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config
from core.game import BlackjackGame
from logging_utils import get_logger

logger = get_logger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds since signing, or None to check
                the signature only

        Returns:
            The session ID if valid, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore:
    """
    Games keyed by signed session token.

    Nothing is persisted: a restart loses every balance.
    """

    def __init__(self, signer: SessionSigner | None = None, ttl: int | None = None) -> None:
        self._signer = signer or get_session_signer()
        self._ttl = ttl or config.session_ttl
        self._games: dict[str, tuple[BlackjackGame, datetime]] = {}

    def create(self, game: BlackjackGame | None = None) -> str:
        """Start a session and return its signed token."""
        self.cleanup_expired()
        token = self._signer.sign(str(uuid4()))
        self.put(token, game or new_game())
        logger.info("Session created (%d active)", len(self._games))
        return token

    def put(self, token: str, game: BlackjackGame) -> None:
        """Store a game under a token, replacing any previous one."""
        self._games[token] = (game, datetime.now() + timedelta(seconds=self._ttl))

    def get(self, token: str) -> BlackjackGame | None:
        """Return the session's game, or None if unknown, forged or expired."""
        # Expiry is tracked per access below, not from the signing time
        if self._signer.unsign(token) is None:
            return None
        entry = self._games.get(token)
        if entry is None:
            return None

        game, expiry = entry
        if expiry < datetime.now():
            self.delete(token)
            return None

        self.put(token, game)  # sliding expiry
        return game

    def delete(self, token: str) -> None:
        self._games.pop(token, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions."""
        now = datetime.now()
        expired = [token for token, (_, expiry) in self._games.items() if expiry < now]
        for token in expired:
            del self._games[token]
        if expired:
            logger.info("Dropped %d expired sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._games)


def new_game() -> BlackjackGame:
    """Create a game with the configured starting balance."""
    return BlackjackGame(initial_balance=config.game.initial_balance)


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
