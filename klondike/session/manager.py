"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Client starts a session -> fresh deal (in-memory only)
2. During the game:
   - Client sends discrete actions (clicks, new game, draw mode)
   - The reducer produces the next state
   - Client re-renders from the returned state
   - A timer on the client sends TICK once per second while playing
3. Client ends the session, or it expires -> ALL state deleted

PERSISTENCE RULES:
- NO database
- Game state is ephemeral (session-scoped only)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import threading
import time
import uuid

from ..engine_core.action import Action
from ..engine_core.deal import deal
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, GameStatus


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game dealt or in progress
    GAME_OVER = "game_over"  # Current deal is won
    ENDED = "ended"  # Client ended the session
    EXPIRED = "expired"  # Removed by cleanup


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - Current canonical game state
    - The reducer (with its seeded random source)

    Every dispatch replaces game_state wholesale.
    """
    session_id: str
    game_state: GameState
    reducer: Reducer
    created_at: float
    last_active_at: float
    seed: int | None = None
    state: SessionState = SessionState.ACTIVE
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def is_active(self) -> bool:
        """Check if session is still accepting actions."""
        return self.state in {SessionState.ACTIVE, SessionState.GAME_OVER}

    def dispatch(self, action: Action) -> tuple[GameState, bool]:
        """
        Apply an action to this session's game.

        Returns (new state, changed). changed is False when the reducer
        handed back the identical state object.
        """
        with self._lock:
            previous = self.game_state
            new_state = self.reducer.apply(previous, action)
            self.game_state = new_state
            self.last_active_at = time.time()
            self.state = (
                SessionState.GAME_OVER
                if new_state.status == GameStatus.WON
                else SessionState.ACTIVE
            )
        return new_state, new_state is not previous


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a fresh deal
    - Route actions to the right session
    - Clean up idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, allow_state_load: bool = False):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self.allow_state_load = allow_state_load

    def create_session(self, draw_count: int = 1, seed: int | None = None) -> Session:
        """
        Create a new game session.

        Args:
            draw_count: Cards drawn per stock click (1 or 3)
            seed: Optional seed for a reproducible sequence of deals

        Returns:
            New Session holding an idle deal
        """
        rng = random.Random(seed)
        reducer = Reducer(rng=rng, allow_state_load=self.allow_state_load)
        now = time.time()

        session = Session(
            session_id=str(uuid.uuid4()),
            game_state=deal(draw_count, rng),
            reducer=reducer,
            created_at=now,
            last_active_at=now,
            seed=seed,
        )

        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(
            "Created session %s (draw %d, seed %s)", session.session_id, draw_count, seed
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        with self._lock:
            return self._sessions.get(session_id)

    def dispatch(self, session_id: str, action: Action) -> GameState | None:
        """Apply an action to a session; None if the session does not exist."""
        session = self.get_session(session_id)
        if not session:
            return None
        new_state, _ = session.dispatch(action)
        return new_state

    def tick(self, session_id: str) -> GameState | None:
        """Advance a session's clock by one second."""
        return self.dispatch(session_id, Action.tick())

    def end_session(self, session_id: str, reason: str = "ended") -> bool:
        """
        End a session and remove it from memory.

        Returns True if a session was removed.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.state = SessionState.EXPIRED if reason == "expired" else SessionState.ENDED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        with self._lock:
            sessions = list(self._sessions.items())
        return [sid for sid, session in sessions if session.is_active()]

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> int:
        """
        Remove sessions with no activity for max_idle_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        with self._lock:
            sessions = list(self._sessions.items())
        to_remove = [
            session_id
            for session_id, session in sessions
            if current_time - session.last_active_at > max_idle_seconds
        ]
        return sum(self.end_session(session_id, reason="expired") for session_id in to_remove)
