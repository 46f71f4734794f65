"""
Engine Core - Deterministic Klondike state management.

The engine is the runtime that:
1. Deals a GameState
2. Checks move legality
3. Resolves selections (what is picked up, and from where)
4. Applies actions via the reducer
5. Detects the win
"""

from .cards import Card, Suit, create_deck, shuffle, is_red
from .state import GameState, GameStatus, Selection, SelectionSource, visible_waste
from .deal import deal
from .rules import can_place_on_foundation, can_place_on_tableau, find_foundation_for_card, is_won
from .selection import selected_cards, with_selection_removed, is_selected
from .action import Action, ActionType, ActionPayload
from .reducer import Reducer, apply_action
from .validation import check_invariants, validate_state, StateValidationError

__all__ = [
    "Card",
    "Suit",
    "create_deck",
    "shuffle",
    "is_red",
    "GameState",
    "GameStatus",
    "Selection",
    "SelectionSource",
    "visible_waste",
    "deal",
    "can_place_on_foundation",
    "can_place_on_tableau",
    "find_foundation_for_card",
    "is_won",
    "selected_cards",
    "with_selection_removed",
    "is_selected",
    "Action",
    "ActionType",
    "ActionPayload",
    "Reducer",
    "apply_action",
    "check_invariants",
    "validate_state",
    "StateValidationError",
]
