"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages sessions
3. Converts engine state to response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Failures come back as ErrorResponse objects, never as exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    ActionRequest,
    CreateSessionRequest,
    LoadStateRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    SessionListResponse,
    EndSessionResponse,
    ErrorResponse,
    # Shared
    CardModel,
    GameStateModel,
    SelectionModel,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..engine_core.action import Action
from ..engine_core.cards import Card, Suit
from ..engine_core.rules import is_won
from ..engine_core.state import GameState, GameStatus, Selection, SelectionSource, visible_waste
from ..engine_core.validation import check_invariants
from ..session import Session, SessionManager, SessionState


logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(CreateSessionRequest())

        # Play
        state_response = service.apply_action(session_id, ClickStockAction())
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    session_ttl: int = 3600  # seconds of inactivity before a session is dropped

    @property
    def state_load_enabled(self) -> bool:
        return self.session_manager.allow_state_load

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new session with a fresh idle deal, expiring idle ones first."""
        self.expire_idle_sessions()
        session = self.session_manager.create_session(
            draw_count=request.draw_count,
            seed=request.seed,
        )
        return self._session_to_response(session)

    def expire_idle_sessions(self) -> int:
        """Drop sessions idle longer than session_ttl; returns how many went."""
        removed = self.session_manager.cleanup_stale_sessions(self.session_ttl)
        if removed:
            logger.info("Expired %d idle session(s)", removed)
        return removed

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._session_to_response(session)

    def list_sessions(self) -> SessionListResponse:
        """List active sessions."""
        sessions = self.session_manager.list_active_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def end_session(self, session_id: str) -> EndSessionResponse | ErrorResponse:
        """End a session and drop its state."""
        if not self.session_manager.end_session(session_id):
            return _session_not_found(session_id)
        return EndSessionResponse(session_id=session_id, ended=True)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Get the current game state."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return _state_response(session_id, session.game_state, changed=False)

    def apply_action(
        self, session_id: str, request: ActionRequest
    ) -> GameStateResponse | ErrorResponse:
        """
        Apply a client action.

        Illegal moves are not errors: the response simply carries the
        (possibly selection-cleared) state and changed=False for no-ops.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        new_state, changed = session.dispatch(action_from_request(request))
        return _state_response(session_id, new_state, changed=changed)

    def tick(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Advance the session clock by one second."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        new_state, changed = session.dispatch(Action.tick())
        return _state_response(session_id, new_state, changed=changed)

    def load_state(
        self, session_id: str, request: LoadStateRequest
    ) -> GameStateResponse | ErrorResponse:
        """
        Replace a session's state verbatim.

        Test harness only. The rules are bypassed, but the state must still
        hold the 52 cards in well-formed piles.
        """
        if not self.state_load_enabled:
            return ErrorResponse(
                error="State loading is disabled",
                error_code=ErrorCode.STATE_LOAD_DISABLED,
            )

        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        new_state = state_from_model(request.state)
        errors = check_invariants(new_state)
        if errors:
            return ErrorResponse(
                error="Loaded state is invalid",
                error_code=ErrorCode.INVALID_STATE,
                details={"errors": errors},
            )

        loaded, changed = session.dispatch(Action.load_state(new_state))
        logger.info("Loaded state into session %s", session_id)
        return _state_response(session_id, loaded, changed=changed)

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        status = (
            SessionStatus.GAME_OVER
            if session.state == SessionState.GAME_OVER
            else SessionStatus.ACTIVE
        )
        return SessionResponse(
            session_id=session.session_id,
            status=status,
            created_at=session.created_at,
            seed=session.seed,
            state=state_to_model(session.game_state),
        )


# =============================================================================
# Conversions
# =============================================================================

def card_to_model(card: Card) -> CardModel:
    return CardModel(
        suit=card.suit.value,
        rank=card.rank,
        face_up=card.face_up,
        label=card.label,
    )


def card_from_model(model: CardModel) -> Card:
    return Card(suit=Suit(model.suit), rank=model.rank, face_up=model.face_up)


def selection_to_model(selection: Selection) -> SelectionModel:
    return SelectionModel(
        source=selection.source.value,
        card_index=selection.card_index,
        column=selection.column,
        pile_index=selection.pile_index,
    )


def selection_from_model(model: SelectionModel) -> Selection:
    return Selection(
        source=SelectionSource(model.source),
        card_index=model.card_index,
        column=model.column,
        pile_index=model.pile_index,
    )


def state_to_model(state: GameState) -> GameStateModel:
    """Convert an engine GameState to its API model."""
    return GameStateModel(
        stock=[card_to_model(c) for c in state.stock],
        waste=[card_to_model(c) for c in state.waste],
        foundations=[[card_to_model(c) for c in pile] for pile in state.foundations],
        tableau=[[card_to_model(c) for c in column] for column in state.tableau],
        selection=selection_to_model(state.selection) if state.selection else None,
        status=state.status.value,
        moves=state.moves,
        elapsed_seconds=state.elapsed_seconds,
        draw_count=state.draw_count,
    )


def state_from_model(model: GameStateModel) -> GameState:
    """Convert an API model back to an engine GameState."""
    return GameState(
        stock=tuple(card_from_model(c) for c in model.stock),
        waste=tuple(card_from_model(c) for c in model.waste),
        foundations=tuple(tuple(card_from_model(c) for c in pile) for pile in model.foundations),
        tableau=tuple(tuple(card_from_model(c) for c in column) for column in model.tableau),
        selection=selection_from_model(model.selection) if model.selection else None,
        status=GameStatus(model.status),
        moves=model.moves,
        elapsed_seconds=model.elapsed_seconds,
        draw_count=model.draw_count,
    )


def action_from_request(request: ActionRequest) -> Action:
    """Map a validated action request onto an engine Action."""
    if request.type == "new_game":
        return Action.new_game()
    elif request.type == "set_draw_count":
        return Action.set_draw_count(request.count)
    elif request.type == "tick":
        return Action.tick()
    elif request.type == "click_stock":
        return Action.click_stock()
    elif request.type == "click_waste":
        return Action.click_waste()
    elif request.type == "click_tableau":
        return Action.click_tableau(request.column, request.card_index)
    elif request.type == "click_foundation":
        return Action.click_foundation(request.pile_index)
    elif request.type == "auto_move_to_foundation":
        return Action.auto_move_to_foundation(selection_from_model(request.source))
    raise ValueError(f"Unknown action type: {request.type}")


def _state_response(session_id: str, state: GameState, changed: bool) -> GameStateResponse:
    return GameStateResponse(
        session_id=session_id,
        state=state_to_model(state),
        changed=changed,
        visible_waste=[card_to_model(c) for c in visible_waste(state)],
        is_won=is_won(state),
    )


def _session_not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )
