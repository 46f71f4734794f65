"""
State Validation - Structural checks for a GameState.

Validates that:
1. The 52 cards are all present exactly once
2. Zones have the right shape (4 foundations, 7 columns, draw count 1 or 3)
3. Orientation holds (stock face down, waste face up, columns are a
   face-down prefix followed by a face-up suffix)
4. Foundations are ascending single-suit runs from the Ace
5. Counters and status are consistent

The reducer never needs this; it is used to vet states that bypass the
rules (LOAD_STATE from a harness) and by the test suite.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass

from .cards import ACE, create_deck
from .rules import is_won
from .selection import selected_cards
from .state import (
    GameState,
    GameStatus,
    SelectionSource,
    DRAW_COUNTS,
    FOUNDATION_PILES,
    TABLEAU_COLUMNS,
)


class StateValidationError(Exception):
    """Raised when a state fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"State validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors."""
    valid: bool
    errors: list[str]


def check_invariants(state: GameState) -> list[str]:
    """Return a list of violated invariants; empty when the state is sound."""
    errors: list[str] = []

    if len(state.foundations) != FOUNDATION_PILES:
        errors.append(f"expected {FOUNDATION_PILES} foundations, got {len(state.foundations)}")
    if len(state.tableau) != TABLEAU_COLUMNS:
        errors.append(f"expected {TABLEAU_COLUMNS} tableau columns, got {len(state.tableau)}")
    if state.draw_count not in DRAW_COUNTS:
        errors.append(f"draw_count must be one of {DRAW_COUNTS}")
    if state.moves < 0:
        errors.append("moves must be >= 0")
    if state.elapsed_seconds < 0:
        errors.append("elapsed_seconds must be >= 0")

    # Card universe
    counts = Counter(card.key for card in state.all_cards())
    expected = {card.key for card in create_deck()}
    for key, count in counts.items():
        if key not in expected:
            errors.append(f"unknown card {key[1]} of {key[0].value}")
        elif count > 1:
            errors.append(f"duplicate card {key[1]} of {key[0].value}")
    missing = expected - set(counts)
    if missing:
        errors.append(f"{len(missing)} card(s) missing")

    # Orientation
    if any(card.face_up for card in state.stock):
        errors.append("stock holds a face-up card")
    if any(not card.face_up for card in state.waste):
        errors.append("waste holds a face-down card")

    for i, column in enumerate(state.tableau):
        seen_face_up = False
        for card in column:
            if card.face_up:
                seen_face_up = True
            elif seen_face_up:
                errors.append(f"column {i} has a face-down card above a face-up card")
                break

    for i, pile in enumerate(state.foundations):
        if not pile:
            continue
        suit = pile[0].suit
        for position, card in enumerate(pile):
            if card.suit != suit or card.rank != ACE + position:
                errors.append(f"foundation {i} is not an ascending run of {suit.value}")
                break

    if state.status == GameStatus.WON and not is_won(state):
        errors.append("status is won but foundations are incomplete")

    errors.extend(_check_selection(state))
    return errors


def _check_selection(state: GameState) -> list[str]:
    """A selection must point at existing face-up cards."""
    selection = state.selection
    if selection is None:
        return []

    if selection.source == SelectionSource.TABLEAU:
        if selection.column is None or not 0 <= selection.column < len(state.tableau):
            return ["selection column out of range"]
        column = state.tableau[selection.column]
        if not 0 <= selection.card_index < len(column):
            return ["selection card_index out of range"]
    elif selection.source == SelectionSource.FOUNDATION:
        if selection.pile_index is None or not 0 <= selection.pile_index < len(state.foundations):
            return ["selection pile_index out of range"]
        if selection.card_index != len(state.foundations[selection.pile_index]) - 1:
            return ["foundation selection must be the top card"]
    elif selection.source == SelectionSource.WASTE:
        if selection.card_index != len(state.waste) - 1:
            return ["waste selection must be the top card"]

    if not all(card.face_up for card in selected_cards(state, selection)):
        return ["selection includes a face-down card"]
    return []


def validate_state(state: GameState, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete game state.

    Returns ValidationResult with errors.
    Raises StateValidationError if raise_on_error=True and errors exist.
    """
    errors = check_invariants(state)
    if errors and raise_on_error:
        raise StateValidationError(errors)
    return ValidationResult(valid=not errors, errors=errors)
