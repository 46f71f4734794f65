"""
Rules - Move legality and win detection.

Pure predicates over cards and piles. Nothing here builds a new state;
the reducer consults these before it executes a move.
"""

from __future__ import annotations
from typing import Sequence, TYPE_CHECKING

from .cards import Card, ACE, KING, SUIT_SIZE

if TYPE_CHECKING:
    from .state import GameState


def can_place_on_foundation(card: Card, pile: Sequence[Card]) -> bool:
    """
    Check whether a card may go onto a foundation pile.

    An Ace starts an empty pile; otherwise the card must follow the
    top card in the same suit. The moving card is assumed face up.
    """
    if not pile:
        return card.rank == ACE
    top = pile[-1]
    return card.suit == top.suit and card.rank == top.rank + 1


def can_place_on_tableau(cards: Sequence[Card], column: Sequence[Card]) -> bool:
    """
    Check whether a run of cards may go onto a tableau column.

    cards[0] is the card that lands on the column's current top. The run
    itself is already a valid descending alternating-colour sequence.
    """
    if not cards:
        return False
    card = cards[0]
    if not column:
        return card.rank == KING
    top = column[-1]
    if not top.face_up:
        return False
    return card.is_red != top.is_red and card.rank == top.rank - 1


def find_foundation_for_card(card: Card, foundations: Sequence[Sequence[Card]]) -> int | None:
    """Index of the first foundation pile that accepts the card, or None."""
    for i, pile in enumerate(foundations):
        if can_place_on_foundation(card, pile):
            return i
    return None


def is_won(state: GameState) -> bool:
    """True when all four foundations are complete."""
    return all(len(pile) == SUIT_SIZE for pile in state.foundations)
