"""
Selection Model - Reading and removing the picked-up cards.

A Selection names a contiguous suffix of one pile. Each source has its
own extraction and removal rule:
- waste: the top card, plain truncation
- foundation: the top card, plain truncation
- tableau: card_index..end, then flip a newly exposed face-down top
"""

from __future__ import annotations

from .state import GameState, Pile, Selection, SelectionSource


def selected_cards(state: GameState, selection: Selection) -> Pile:
    """Return the cards the selection denotes, without touching state."""
    if selection.source == SelectionSource.WASTE:
        return state.waste[-1:]
    elif selection.source == SelectionSource.TABLEAU:
        return state.tableau[selection.column][selection.card_index:]
    elif selection.source == SelectionSource.FOUNDATION:
        return state.foundations[selection.pile_index][-1:]
    return ()


def with_selection_removed(state: GameState, selection: Selection) -> GameState:
    """
    Return a new state with the selected cards taken out of their pile.

    For tableau sources, a face-down card left on top is turned face up.
    That is the only automatic flip in the game.
    """
    if selection.source == SelectionSource.WASTE:
        return state._copy_with(waste=state.waste[:-1])

    elif selection.source == SelectionSource.TABLEAU:
        remaining = state.tableau[selection.column][:selection.card_index]
        if remaining and not remaining[-1].face_up:
            remaining = remaining[:-1] + (remaining[-1].flipped(True),)
        return state.with_column(selection.column, remaining)

    elif selection.source == SelectionSource.FOUNDATION:
        pile = state.foundations[selection.pile_index]
        return state.with_foundation(selection.pile_index, pile[:-1])

    return state


def is_selected(
    selection: Selection | None,
    source: SelectionSource,
    index: int | None = None,
    card_index: int | None = None,
) -> bool:
    """
    Check whether a rendered card belongs to the picked-up run.

    index is the column (tableau) or pile (foundation); it is ignored
    for the waste. For the tableau every card at or above the selection's
    card_index in the same column counts as selected.
    """
    if selection is None or selection.source != source:
        return False
    if source == SelectionSource.WASTE:
        return card_index is None or card_index == selection.card_index
    if source == SelectionSource.FOUNDATION:
        return index == selection.pile_index
    if index != selection.column:
        return False
    return card_index is None or card_index >= selection.card_index

