"""
Game State - Immutable container for one Klondike position.

Design principles:
- Immutable: every transition returns a new GameState
- Piles are tuples; the last element is the top card
- The reducer owns all writes; collaborators only read
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum

from .cards import Card


TABLEAU_COLUMNS = 7
FOUNDATION_PILES = 4
DRAW_COUNTS = (1, 3)

Pile = tuple[Card, ...]


class GameStatus(Enum):
    """Lifecycle of a single deal."""
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"


class SelectionSource(Enum):
    """Which zone a selection was picked up from."""
    WASTE = "waste"
    TABLEAU = "tableau"
    FOUNDATION = "foundation"


@dataclass(frozen=True)
class Selection:
    """
    A reference to the picked-up cards: a contiguous suffix of one pile.

    For waste and foundation the suffix is the single top card.
    For tableau it runs from card_index to the end of the column.
    A selection is a reference, not a copy; it is discarded whenever
    its source pile changes.
    """
    source: SelectionSource
    card_index: int
    column: int | None = None  # tableau column (0-6)
    pile_index: int | None = None  # foundation pile (0-3)

    @classmethod
    def waste(cls, card_index: int) -> Selection:
        return cls(source=SelectionSource.WASTE, card_index=card_index)

    @classmethod
    def tableau(cls, column: int, card_index: int) -> Selection:
        return cls(source=SelectionSource.TABLEAU, column=column, card_index=card_index)

    @classmethod
    def foundation(cls, pile_index: int, card_index: int) -> Selection:
        return cls(source=SelectionSource.FOUNDATION, pile_index=pile_index, card_index=card_index)


def _empty_piles(count: int) -> tuple[Pile, ...]:
    return tuple(() for _ in range(count))


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    Created by deal(), replaced wholesale by every reducer transition.
    """
    stock: Pile = ()
    waste: Pile = ()
    foundations: tuple[Pile, ...] = field(default_factory=lambda: _empty_piles(FOUNDATION_PILES))
    tableau: tuple[Pile, ...] = field(default_factory=lambda: _empty_piles(TABLEAU_COLUMNS))
    selection: Selection | None = None
    status: GameStatus = GameStatus.IDLE
    moves: int = 0
    elapsed_seconds: int = 0
    draw_count: int = 1

    @property
    def is_over(self) -> bool:
        return self.status == GameStatus.WON

    def all_cards(self) -> list[Card]:
        """Every card in every zone, stock first."""
        cards = list(self.stock) + list(self.waste)
        for pile in self.foundations:
            cards.extend(pile)
        for column in self.tableau:
            cards.extend(column)
        return cards

    def with_column(self, index: int, column: Pile) -> GameState:
        """Return new state with one tableau column replaced."""
        new_tableau = tuple(
            column if i == index else c
            for i, c in enumerate(self.tableau)
        )
        return self._copy_with(tableau=new_tableau)

    def with_foundation(self, index: int, pile: Pile) -> GameState:
        """Return new state with one foundation pile replaced."""
        new_foundations = tuple(
            pile if i == index else p
            for i, p in enumerate(self.foundations)
        )
        return self._copy_with(foundations=new_foundations)

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def visible_waste(state: GameState) -> Pile:
    """
    The waste cards a player can see.

    Three in draw-3 mode (only the last is playable), otherwise one.
    """
    return state.waste[-state.draw_count:] if state.waste else ()
