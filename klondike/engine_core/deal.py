"""
Deal - Creates the initial game state.

Shuffles a fresh deck and lays out the tableau: column i receives i+1
cards with only the last one face up. The remaining 24 cards form the
face-down stock.
"""

from __future__ import annotations
import random

from .cards import Card, create_deck, shuffle
from .state import GameState, GameStatus, DRAW_COUNTS, TABLEAU_COLUMNS


def deal(draw_count: int = 1, rng: random.Random | None = None) -> GameState:
    """
    Deal a new game.

    Args:
        draw_count: Cards drawn per stock click (1 or 3)
        rng: Random source for the shuffle (seed it for deterministic deals)

    Returns:
        Initial GameState with status idle and zeroed counters
    """
    if draw_count not in DRAW_COUNTS:
        raise ValueError(f"draw_count must be one of {DRAW_COUNTS}, got {draw_count}")

    deck = shuffle(create_deck(), rng)

    tableau: list[tuple[Card, ...]] = []
    idx = 0
    for col in range(TABLEAU_COLUMNS):
        column = []
        for i in range(col + 1):
            column.append(deck[idx].flipped(i == col))
            idx += 1
        tableau.append(tuple(column))

    return GameState(
        stock=tuple(card.flipped(False) for card in deck[idx:]),
        waste=(),
        tableau=tuple(tableau),
        selection=None,
        status=GameStatus.IDLE,
        moves=0,
        elapsed_seconds=0,
        draw_count=draw_count,
    )
