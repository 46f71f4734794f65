"""
Reducer - Applies actions to game state.

The reducer is the single point of state change.
All transitions go through Reducer.apply() / apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Total: illegal moves are rejected by returning a state, never by raising
- No-ops return the identical state object, so callers can test `is`
- Every successful card placement, flip or draw counts exactly one move
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from .action import Action, ActionType
from .deal import deal
from .rules import (
    can_place_on_foundation,
    can_place_on_tableau,
    find_foundation_for_card,
    is_won,
)
from .selection import selected_cards, with_selection_removed
from .state import GameState, GameStatus, Selection, SelectionSource


logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from the random source used for re-deals;
    all game state lives in GameState.
    """
    rng: random.Random = field(default_factory=random.Random)
    allow_state_load: bool = False

    def apply(self, state: GameState, action: Action) -> GameState:
        """
        Apply an action to the game state.

        Returns the next state, or the same object when nothing changed.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            logger.debug("No handler for action type %s", action.action_type)
            return state
        return handler(state, action)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.NEW_GAME: self._handle_new_game,
            ActionType.SET_DRAW_COUNT: self._handle_set_draw_count,
            ActionType.TICK: self._handle_tick,
            ActionType.CLICK_STOCK: self._handle_click_stock,
            ActionType.CLICK_WASTE: self._handle_click_waste,
            ActionType.CLICK_TABLEAU: self._handle_click_tableau,
            ActionType.CLICK_FOUNDATION: self._handle_click_foundation,
            ActionType.AUTO_MOVE_TO_FOUNDATION: self._handle_auto_move,
            ActionType.LOAD_STATE: self._handle_load_state,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Game control
    # =========================================================================

    def _handle_new_game(self, state: GameState, action: Action) -> GameState:
        """Re-deal with the current draw count."""
        return deal(state.draw_count, self.rng)

    def _handle_set_draw_count(self, state: GameState, action: Action) -> GameState:
        """Re-deal with a new draw count."""
        return deal(action.payload.draw_count, self.rng)

    def _handle_tick(self, state: GameState, action: Action) -> GameState:
        """Advance the clock by one second while a game is in progress."""
        if state.status != GameStatus.PLAYING:
            return state
        return state._copy_with(elapsed_seconds=state.elapsed_seconds + 1)

    def _handle_load_state(self, state: GameState, action: Action) -> GameState:
        """Install a state verbatim, skipping every rule (test harness only)."""
        if not self.allow_state_load:
            logger.warning("Ignoring LOAD_STATE: state loading is disabled on this reducer")
            return state
        new_state = action.payload.state
        if new_state is None:
            return state
        logger.debug("Loaded state with status %s", new_state.status.value)
        return new_state

    # =========================================================================
    # Stock and waste
    # =========================================================================

    def _handle_click_stock(self, state: GameState, action: Action) -> GameState:
        """Draw from the stock, or turn the waste over when the stock is empty."""
        if state.is_over:
            return state

        if not state.stock:
            if not state.waste:
                return state
            # Waste bottom becomes the new stock top
            playing = _start_playing(state)
            return playing._copy_with(
                stock=tuple(card.flipped(False) for card in reversed(playing.waste)),
                waste=(),
                selection=None,
                moves=playing.moves + 1,
            )

        playing = _start_playing(state)
        draw_n = min(playing.draw_count, len(playing.stock))
        # stock[-1] is the top; drawn cards keep their order so the last one ends on top
        drawn = tuple(card.flipped(True) for card in playing.stock[-draw_n:])
        return playing._copy_with(
            stock=playing.stock[:-draw_n],
            waste=playing.waste + drawn,
            selection=None,
            moves=playing.moves + 1,
        )

    def _handle_click_waste(self, state: GameState, action: Action) -> GameState:
        """Select the waste top, or deselect it if it is already picked up."""
        if state.is_over or not state.waste:
            return state

        if state.selection and state.selection.source == SelectionSource.WASTE:
            return state._copy_with(selection=None)

        playing = _start_playing(state)
        return playing._copy_with(selection=Selection.waste(len(playing.waste) - 1))

    # =========================================================================
    # Tableau
    # =========================================================================

    def _handle_click_tableau(self, state: GameState, action: Action) -> GameState:
        """
        Handle a click on a tableau column.

        Depending on what was clicked and what is held:
        - empty slot / below the stack: drop the selection here
        - face-down top card: flip it
        - face-up card while holding cards from elsewhere: drop them here,
          or pick up the clicked run if the drop is illegal
        - face-up card otherwise: pick up the run from the clicked card
        """
        if state.is_over:
            return state

        column = action.payload.column
        card_index = action.payload.card_index
        cards = state.tableau[column]

        if card_index >= len(cards):
            if not state.selection:
                return state
            moved = self._move_to_tableau(_start_playing(state), state.selection, column)
            if moved is None:
                logger.debug("Rejected move to empty slot of column %d", column)
                return state._copy_with(selection=None)
            return moved

        card = cards[card_index]

        if not card.face_up:
            # Only the top face-down card can be turned over
            if card_index != len(cards) - 1:
                return state
            playing = _start_playing(state)
            return playing.with_column(
                column, cards[:-1] + (card.flipped(True),)
            )._copy_with(
                selection=None,
                moves=playing.moves + 1,
            )

        selection = state.selection
        if selection and not (
            selection.source == SelectionSource.TABLEAU and selection.column == column
        ):
            moved = self._move_to_tableau(_start_playing(state), selection, column)
            if moved is not None:
                return moved
            logger.debug("Rejected move onto column %d; reselecting", column)

        new_selection = Selection.tableau(column, card_index)
        playing = _start_playing(state)
        if playing is state and state.selection == new_selection:
            return state
        return playing._copy_with(selection=new_selection)

    # =========================================================================
    # Foundations
    # =========================================================================

    def _handle_click_foundation(self, state: GameState, action: Action) -> GameState:
        """Drop the selection on a foundation, or pick up its top card."""
        if state.is_over:
            return state

        pile_index = action.payload.pile_index

        if state.selection:
            moved = self._move_to_foundation(_start_playing(state), state.selection, pile_index)
            if moved is not None:
                return moved
            logger.debug("Rejected move to foundation %d", pile_index)
            return state._copy_with(selection=None)

        pile = state.foundations[pile_index]
        if not pile:
            return state
        return _start_playing(state)._copy_with(
            selection=Selection.foundation(pile_index, len(pile) - 1)
        )

    def _handle_auto_move(self, state: GameState, action: Action) -> GameState:
        """Send a single face-up card to the first foundation that takes it."""
        if state.is_over:
            return state

        source = action.payload.source
        if source is None:
            return state
        cards = selected_cards(state, source)
        if len(cards) != 1 or not cards[0].face_up:
            return state

        playing = _start_playing(state)
        pile_index = find_foundation_for_card(cards[0], playing.foundations)
        if pile_index is None:
            return state
        moved = self._move_to_foundation(playing, source, pile_index)
        return moved if moved is not None else state

    # =========================================================================
    # Moves
    # =========================================================================

    def _move_to_foundation(
        self, state: GameState, selection: Selection, pile_index: int
    ) -> GameState | None:
        """Move a single selected card onto a foundation; None if illegal."""
        cards = selected_cards(state, selection)
        if len(cards) != 1:
            return None
        if not can_place_on_foundation(cards[0], state.foundations[pile_index]):
            return None

        after_remove = with_selection_removed(state, selection)
        pile = after_remove.foundations[pile_index] + (cards[0].flipped(True),)
        return _with_win_check(
            after_remove.with_foundation(pile_index, pile)._copy_with(
                selection=None,
                moves=after_remove.moves + 1,
            )
        )

    def _move_to_tableau(
        self, state: GameState, selection: Selection, column: int
    ) -> GameState | None:
        """Move the selected run onto a tableau column; None if illegal."""
        cards = selected_cards(state, selection)
        if not can_place_on_tableau(cards, state.tableau[column]):
            return None

        after_remove = with_selection_removed(state, selection)
        landed = after_remove.tableau[column] + tuple(card.flipped(True) for card in cards)
        return _with_win_check(
            after_remove.with_column(column, landed)._copy_with(
                selection=None,
                moves=after_remove.moves + 1,
            )
        )


def _start_playing(state: GameState) -> GameState:
    """Move an idle game to playing; leave any other status alone."""
    if state.status == GameStatus.IDLE:
        return state._copy_with(status=GameStatus.PLAYING)
    return state


def _with_win_check(state: GameState) -> GameState:
    if is_won(state):
        logger.info("Game won in %d moves", state.moves)
        return state._copy_with(status=GameStatus.WON)
    return state


def apply_action(state: GameState, action: Action, reducer: Reducer | None = None) -> GameState:
    """
    Convenience function to apply an action.

    Uses the given Reducer, or a fresh one with state loading disabled.
    """
    reducer = reducer or Reducer()
    return reducer.apply(state, action)

