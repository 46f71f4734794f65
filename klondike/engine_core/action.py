"""
Action System - The discrete intents a collaborator can send.

Actions represent:
1. Game control (new game, draw-count change, timer tick)
2. Clicks on a zone (stock, waste, tableau, foundation)
3. The double-click convenience (auto-move to foundation)
4. Harness-only state replacement (LOAD_STATE)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState, Selection


class ActionType(Enum):
    """Types of actions the reducer understands."""
    # Game control
    NEW_GAME = "new_game"
    SET_DRAW_COUNT = "set_draw_count"
    TICK = "tick"

    # Clicks
    CLICK_STOCK = "click_stock"
    CLICK_WASTE = "click_waste"
    CLICK_TABLEAU = "click_tableau"
    CLICK_FOUNDATION = "click_foundation"
    AUTO_MOVE_TO_FOUNDATION = "auto_move_to_foundation"

    # Test harness only
    LOAD_STATE = "load_state"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields; the rest stay None.
    """
    draw_count: int | None = None
    column: int | None = None
    card_index: int | None = None
    pile_index: int | None = None
    source: Selection | None = None
    state: GameState | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Build actions with the factory classmethods rather than by hand.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def new_game(cls) -> Action:
        return cls(action_type=ActionType.NEW_GAME)

    @classmethod
    def set_draw_count(cls, count: int) -> Action:
        return cls(
            action_type=ActionType.SET_DRAW_COUNT,
            payload=ActionPayload(draw_count=count),
        )

    @classmethod
    def tick(cls) -> Action:
        return cls(action_type=ActionType.TICK)

    @classmethod
    def click_stock(cls) -> Action:
        return cls(action_type=ActionType.CLICK_STOCK)

    @classmethod
    def click_waste(cls) -> Action:
        return cls(action_type=ActionType.CLICK_WASTE)

    @classmethod
    def click_tableau(cls, column: int, card_index: int) -> Action:
        """Click a tableau card; card_index past the last card means the empty slot."""
        return cls(
            action_type=ActionType.CLICK_TABLEAU,
            payload=ActionPayload(column=column, card_index=card_index),
        )

    @classmethod
    def click_foundation(cls, pile_index: int) -> Action:
        return cls(
            action_type=ActionType.CLICK_FOUNDATION,
            payload=ActionPayload(pile_index=pile_index),
        )

    @classmethod
    def auto_move_to_foundation(cls, source: Selection) -> Action:
        """Send the card named by source to the first foundation that accepts it."""
        return cls(
            action_type=ActionType.AUTO_MOVE_TO_FOUNDATION,
            payload=ActionPayload(source=source),
        )

    @classmethod
    def load_state(cls, state: GameState) -> Action:
        """
        Replace the whole state verbatim.

        Bypasses every rule. Only honoured by a Reducer built with
        allow_state_load=True.
        """
        return cls(
            action_type=ActionType.LOAD_STATE,
            payload=ActionPayload(state=state),
        )
