"""
Tests for the reducer (state transitions).

Tests:
- Game control (new game, draw count, tick)
- Stock draws and waste recycling
- Selection and moves on waste, tableau and foundations
- Auto-move to foundation
- Win detection and the terminal won state
- Harness-only state loading
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.cards import Suit
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.state import GameStatus, Selection
from .factories import card, down, run, complete_state, nearly_won_state


class TestNewGame:
    """Tests for NEW_GAME and SET_DRAW_COUNT."""

    def test_new_game_keeps_draw_count(self, reducer):
        state = complete_state(draw_count=3, moves=12, elapsed_seconds=40)
        new_state = reducer.apply(state, Action.new_game())

        assert new_state.draw_count == 3
        assert new_state.status == GameStatus.IDLE
        assert new_state.moves == 0
        assert new_state.elapsed_seconds == 0
        assert [len(c) for c in new_state.tableau] == [1, 2, 3, 4, 5, 6, 7]

    def test_new_game_from_won(self, reducer):
        state = complete_state(foundations=[run(s, 13) for s in Suit], status=GameStatus.WON)
        new_state = reducer.apply(state, Action.new_game())
        assert new_state.status == GameStatus.IDLE

    def test_set_draw_count_redeals(self, reducer, fresh_deal):
        new_state = reducer.apply(fresh_deal, Action.set_draw_count(3))

        assert new_state.draw_count == 3
        assert new_state.status == GameStatus.IDLE
        assert len(new_state.stock) == 24


class TestTick:
    """Tests for TICK."""

    def test_tick_while_playing(self, reducer):
        state = complete_state(status=GameStatus.PLAYING, elapsed_seconds=9)
        new_state = reducer.apply(state, Action.tick())

        assert new_state.elapsed_seconds == 10
        assert new_state.moves == state.moves

    def test_tick_when_idle_is_noop(self, reducer, fresh_deal):
        assert reducer.apply(fresh_deal, Action.tick()) is fresh_deal

    def test_tick_when_won_is_noop(self, reducer):
        state = complete_state(foundations=[run(s, 13) for s in Suit], status=GameStatus.WON)
        assert reducer.apply(state, Action.tick()) is state


class TestClickStock:
    """Tests for CLICK_STOCK."""

    def test_draw_one(self, reducer, fresh_deal):
        """Scenario B: first draw in draw-1 mode."""
        top = fresh_deal.stock[-1]
        new_state = reducer.apply(fresh_deal, Action.click_stock())

        assert len(new_state.waste) == 1
        assert new_state.waste[0] == top.flipped(True)
        assert len(new_state.stock) == 23
        assert new_state.moves == 1
        assert new_state.status == GameStatus.PLAYING

    def test_draw_three_preserves_order(self, reducer, fresh_deal_draw_three):
        state = fresh_deal_draw_three
        expected = tuple(c.flipped(True) for c in state.stock[-3:])
        new_state = reducer.apply(state, Action.click_stock())

        assert new_state.waste == expected
        assert new_state.waste[-1].key == state.stock[-1].key
        assert len(new_state.stock) == 21
        assert new_state.moves == 1

    def test_draw_three_with_two_left(self, reducer):
        stock = (down(2, Suit.SPADES), down(3, Suit.SPADES))
        state = complete_state(stock=stock, draw_count=3)
        new_state = reducer.apply(state, Action.click_stock())

        assert new_state.stock == ()
        assert new_state.waste == (card(2, Suit.SPADES), card(3, Suit.SPADES))

    def test_draw_clears_selection(self, reducer):
        state = complete_state(
            tableau=[(card(5, Suit.HEARTS),), (), (), (), (), (), ()],
            selection=Selection.tableau(0, 0),
        )
        new_state = reducer.apply(state, Action.click_stock())
        assert new_state.selection is None

    def test_recycle_waste(self, reducer):
        """Scenario E: empty stock turns the waste over."""
        waste = [card(r, Suit.SPADES) for r in range(1, 6)]
        state = complete_state(waste=waste, stock=(), moves=7)
        new_state = reducer.apply(state, Action.click_stock())

        assert new_state.waste == ()
        assert new_state.stock == tuple(c.flipped(False) for c in reversed(waste))
        assert new_state.moves == 8

    def test_recycle_then_draw_gives_first_waste_card(self, reducer):
        waste = [card(r, Suit.SPADES) for r in range(1, 6)]
        state = complete_state(waste=waste, stock=())
        state = reducer.apply(state, Action.click_stock())
        state = reducer.apply(state, Action.click_stock())

        assert state.waste == (card(1, Suit.SPADES),)

    def test_both_empty_is_noop(self, reducer):
        state = complete_state(stock=(), waste=())
        assert reducer.apply(state, Action.click_stock()) is state


class TestClickWaste:
    """Tests for CLICK_WASTE."""

    def test_selects_waste_top(self, reducer):
        state = complete_state(waste=[card(3, Suit.CLUBS), card(8, Suit.SPADES)])
        new_state = reducer.apply(state, Action.click_waste())

        assert new_state.selection == Selection.waste(1)
        assert new_state.moves == state.moves

    def test_toggle_deselects(self, reducer):
        """Clicking the selected waste card twice leaves no selection and nothing else changed."""
        state = complete_state(waste=[card(8, Suit.SPADES)])
        selected = reducer.apply(state, Action.click_waste())
        deselected = reducer.apply(selected, Action.click_waste())

        assert deselected.selection is None
        assert deselected == state

    def test_empty_waste_is_noop(self, reducer, fresh_deal):
        assert reducer.apply(fresh_deal, Action.click_waste()) is fresh_deal

    def test_replaces_tableau_selection(self, reducer):
        state = complete_state(
            waste=[card(8, Suit.SPADES)],
            tableau=[(card(5, Suit.HEARTS),), (), (), (), (), (), ()],
            selection=Selection.tableau(0, 0),
        )
        new_state = reducer.apply(state, Action.click_waste())
        assert new_state.selection == Selection.waste(0)

    def test_selecting_starts_game(self, reducer):
        state = complete_state(waste=[card(8, Suit.SPADES)], status=GameStatus.IDLE)
        new_state = reducer.apply(state, Action.click_waste())
        assert new_state.status == GameStatus.PLAYING


class TestClickTableau:
    """Tests for CLICK_TABLEAU."""

    def test_flip_face_down_top(self, reducer):
        state = complete_state(
            tableau=[(down(4, Suit.CLUBS), down(9, Suit.HEARTS)), (), (), (), (), (), ()],
            status=GameStatus.IDLE,
        )
        new_state = reducer.apply(state, Action.click_tableau(0, 1))

        assert new_state.tableau[0] == (down(4, Suit.CLUBS), card(9, Suit.HEARTS))
        assert new_state.moves == 1
        assert new_state.status == GameStatus.PLAYING

    def test_flip_clears_selection(self, reducer):
        state = complete_state(
            waste=[card(8, Suit.SPADES)],
            tableau=[(down(9, Suit.HEARTS),), (), (), (), (), (), ()],
            selection=Selection.waste(0),
        )
        new_state = reducer.apply(state, Action.click_tableau(0, 0))
        assert new_state.selection is None
        assert new_state.tableau[0][0].face_up

    def test_face_down_non_top_is_noop(self, reducer, fresh_deal):
        assert reducer.apply(fresh_deal, Action.click_tableau(6, 2)) is fresh_deal

    def test_select_face_up_card(self, reducer, fresh_deal):
        new_state = reducer.apply(fresh_deal, Action.click_tableau(3, 3))

        assert new_state.selection == Selection.tableau(3, 3)
        assert new_state.moves == 0
        assert new_state.status == GameStatus.PLAYING

    def test_move_waste_to_tableau(self, reducer):
        """Scenario C: black 8 from the waste onto a red 9."""
        state = complete_state(
            waste=[card(8, Suit.SPADES)],
            tableau=[(down(2, Suit.CLUBS), card(9, Suit.HEARTS)), (), (), (), (), (), ()],
            moves=4,
        )
        state = reducer.apply(state, Action.click_waste())
        new_state = reducer.apply(state, Action.click_tableau(0, 1))

        assert new_state.waste == ()
        assert new_state.tableau[0][-1] == card(8, Suit.SPADES)
        assert len(new_state.tableau[0]) == 3
        assert new_state.moves == 5
        assert new_state.selection is None

    def test_move_stack_flips_exposed_card(self, reducer):
        state = complete_state(
            tableau=[
                (down(3, Suit.CLUBS), card(8, Suit.HEARTS), card(7, Suit.SPADES)),
                (card(9, Suit.CLUBS),),
                (), (), (), (), (),
            ],
        )
        state = reducer.apply(state, Action.click_tableau(0, 1))
        new_state = reducer.apply(state, Action.click_tableau(1, 0))

        assert new_state.tableau[0] == (card(3, Suit.CLUBS),)
        assert new_state.tableau[1] == (
            card(9, Suit.CLUBS), card(8, Suit.HEARTS), card(7, Suit.SPADES)
        )
        assert new_state.moves == state.moves + 1

    def test_move_only_card_leaves_column_empty(self, reducer):
        state = complete_state(
            tableau=[(card(8, Suit.HEARTS),), (card(9, Suit.CLUBS),), (), (), (), (), ()],
        )
        state = reducer.apply(state, Action.click_tableau(0, 0))
        new_state = reducer.apply(state, Action.click_tableau(1, 0))

        assert new_state.tableau[0] == ()
        assert new_state.tableau[1][-1] == card(8, Suit.HEARTS)

    def test_king_to_empty_column(self, reducer):
        state = complete_state(
            tableau=[(down(2, Suit.HEARTS), card(13, Suit.SPADES)), (), (), (), (), (), ()],
        )
        state = reducer.apply(state, Action.click_tableau(0, 1))
        new_state = reducer.apply(state, Action.click_tableau(1, 0))

        assert new_state.tableau[1] == (card(13, Suit.SPADES),)
        assert new_state.tableau[0] == (card(2, Suit.HEARTS),)
        assert new_state.moves == state.moves + 1

    def test_invalid_move_to_empty_column_clears_selection(self, reducer):
        state = complete_state(
            waste=[card(12, Suit.SPADES)],
            selection=Selection.waste(0),
        )
        new_state = reducer.apply(state, Action.click_tableau(2, 0))

        assert new_state.selection is None
        assert new_state.waste == state.waste
        assert new_state.moves == state.moves

    def test_click_below_stack_moves_selection(self, reducer):
        state = complete_state(
            waste=[card(8, Suit.SPADES)],
            tableau=[(card(9, Suit.HEARTS),), (), (), (), (), (), ()],
            selection=Selection.waste(0),
        )
        new_state = reducer.apply(state, Action.click_tableau(0, 5))
        assert new_state.tableau[0] == (card(9, Suit.HEARTS), card(8, Suit.SPADES))

    def test_empty_slot_without_selection_is_noop(self, reducer):
        state = complete_state()
        assert reducer.apply(state, Action.click_tableau(0, 0)) is state

    def test_invalid_move_reselects_clicked_card(self, reducer):
        state = complete_state(
            tableau=[(card(8, Suit.HEARTS),), (card(9, Suit.HEARTS),), (), (), (), (), ()],
            selection=Selection.tableau(0, 0),
        )
        new_state = reducer.apply(state, Action.click_tableau(1, 0))

        assert new_state.selection == Selection.tableau(1, 0)
        assert new_state.tableau == state.tableau
        assert new_state.moves == state.moves

    def test_same_column_click_reselects(self, reducer):
        column = (card(9, Suit.CLUBS), card(8, Suit.HEARTS), card(7, Suit.SPADES))
        state = complete_state(
            tableau=[column, (), (), (), (), (), ()],
            selection=Selection.tableau(0, 2),
        )
        new_state = reducer.apply(state, Action.click_tableau(0, 1))
        assert new_state.selection == Selection.tableau(0, 1)

    def test_lands_on_column_top_not_clicked_card(self, reducer):
        state = complete_state(
            waste=[card(8, Suit.CLUBS)],
            tableau=[
                (down(2, Suit.CLUBS), card(10, Suit.SPADES), card(9, Suit.HEARTS)),
                (), (), (), (), (), (),
            ],
            selection=Selection.waste(0),
        )
        new_state = reducer.apply(state, Action.click_tableau(0, 1))

        assert new_state.tableau[0][-1] == card(8, Suit.CLUBS)
        assert len(new_state.tableau[0]) == 4

    def test_won_is_noop(self, reducer):
        state = complete_state(foundations=[run(s, 13) for s in Suit], status=GameStatus.WON)
        assert reducer.apply(state, Action.click_tableau(0, 0)) is state


class TestClickFoundation:
    """Tests for CLICK_FOUNDATION."""

    def test_move_ace_to_empty_pile(self, reducer):
        state = complete_state(waste=[card(1, Suit.DIAMONDS)], selection=Selection.waste(0))
        new_state = reducer.apply(state, Action.click_foundation(2))

        assert new_state.foundations[2] == (card(1, Suit.DIAMONDS),)
        assert new_state.waste == ()
        assert new_state.moves == state.moves + 1
        assert new_state.selection is None

    def test_move_tableau_card_flips_exposed(self, reducer):
        state = complete_state(
            foundations=[run(Suit.HEARTS, 4), (), (), ()],
            tableau=[(down(9, Suit.CLUBS), card(5, Suit.HEARTS)), (), (), (), (), (), ()],
            selection=Selection.tableau(0, 1),
        )
        new_state = reducer.apply(state, Action.click_foundation(0))

        assert new_state.foundations[0] == run(Suit.HEARTS, 5)
        assert new_state.tableau[0] == (card(9, Suit.CLUBS),)

    def test_select_foundation_top(self, reducer):
        state = complete_state(foundations=[(), run(Suit.SPADES, 3), (), ()])
        new_state = reducer.apply(state, Action.click_foundation(1))

        assert new_state.selection == Selection.foundation(1, 2)
        assert new_state.moves == state.moves

    def test_foundation_card_back_to_tableau(self, reducer):
        state = complete_state(
            foundations=[run(Suit.HEARTS, 5), (), (), ()],
            tableau=[(card(6, Suit.SPADES),), (), (), (), (), (), ()],
        )
        state = reducer.apply(state, Action.click_foundation(0))
        new_state = reducer.apply(state, Action.click_tableau(0, 0))

        assert new_state.foundations[0] == run(Suit.HEARTS, 4)
        assert new_state.tableau[0] == (card(6, Suit.SPADES), card(5, Suit.HEARTS))
        assert new_state.moves == state.moves + 1

    def test_invalid_move_clears_selection(self, reducer):
        state = complete_state(waste=[card(5, Suit.DIAMONDS)], selection=Selection.waste(0))
        new_state = reducer.apply(state, Action.click_foundation(0))

        assert new_state.selection is None
        assert new_state.waste == state.waste
        assert new_state.foundations == state.foundations
        assert new_state.moves == state.moves

    def test_multi_card_selection_rejected(self, reducer):
        state = complete_state(
            foundations=[run(Suit.HEARTS, 2), (), (), ()],
            tableau=[(card(3, Suit.HEARTS), card(2, Suit.SPADES)), (), (), (), (), (), ()],
            selection=Selection.tableau(0, 0),
        )
        new_state = reducer.apply(state, Action.click_foundation(0))

        assert new_state.selection is None
        assert new_state.tableau == state.tableau
        assert new_state.foundations == state.foundations
        assert new_state.moves == state.moves

    def test_empty_pile_without_selection_is_noop(self, reducer):
        state = complete_state()
        assert reducer.apply(state, Action.click_foundation(0)) is state

    def test_completing_foundations_wins(self, reducer, nearly_won):
        """Scenario D: King of clubs from the waste completes the game."""
        state = reducer.apply(nearly_won, Action.click_waste())
        new_state = reducer.apply(state, Action.click_foundation(3))

        assert all(len(pile) == 13 for pile in new_state.foundations)
        assert new_state.status == GameStatus.WON
        assert new_state.moves == nearly_won.moves + 1

    def test_won_is_noop(self, reducer):
        state = complete_state(foundations=[run(s, 13) for s in Suit], status=GameStatus.WON)
        assert reducer.apply(state, Action.click_foundation(0)) is state


class TestAutoMoveToFoundation:
    """Tests for AUTO_MOVE_TO_FOUNDATION."""

    def test_waste_ace(self, reducer):
        state = complete_state(
            waste=[card(1, Suit.CLUBS)],
            foundations=[run(Suit.SPADES, 2), (), (), ()],
        )
        new_state = reducer.apply(state, Action.auto_move_to_foundation(Selection.waste(0)))

        assert new_state.foundations[1] == (card(1, Suit.CLUBS),)
        assert new_state.waste == ()
        assert new_state.moves == state.moves + 1

    def test_tableau_top_flips_exposed(self, reducer):
        state = complete_state(
            tableau=[(down(9, Suit.CLUBS), card(1, Suit.DIAMONDS)), (), (), (), (), (), ()],
        )
        new_state = reducer.apply(state, Action.auto_move_to_foundation(Selection.tableau(0, 1)))

        assert new_state.foundations[0] == (card(1, Suit.DIAMONDS),)
        assert new_state.tableau[0] == (card(9, Suit.CLUBS),)

    def test_finds_suit_pile(self, reducer):
        state = complete_state(
            waste=[card(3, Suit.HEARTS)],
            foundations=[run(Suit.SPADES, 4), run(Suit.HEARTS, 2), (), ()],
        )
        new_state = reducer.apply(state, Action.auto_move_to_foundation(Selection.waste(0)))
        assert new_state.foundations[1] == run(Suit.HEARTS, 3)

    def test_no_target_is_noop(self, reducer):
        state = complete_state(waste=[card(7, Suit.HEARTS)])
        assert reducer.apply(state, Action.auto_move_to_foundation(Selection.waste(0))) is state

    def test_multiple_cards_is_noop(self, reducer):
        state = complete_state(
            tableau=[(card(2, Suit.HEARTS), card(1, Suit.SPADES)), (), (), (), (), (), ()],
        )
        action = Action.auto_move_to_foundation(Selection.tableau(0, 0))
        assert reducer.apply(state, action) is state

    def test_foundation_source_is_noop(self, reducer):
        state = complete_state(foundations=[run(Suit.HEARTS, 3), (), (), ()])
        action = Action.auto_move_to_foundation(Selection.foundation(0, 2))
        assert reducer.apply(state, action) is state

    def test_empty_waste_is_noop(self, reducer):
        state = complete_state()
        assert reducer.apply(state, Action.auto_move_to_foundation(Selection.waste(0))) is state

    def test_auto_move_can_win(self, reducer, nearly_won):
        new_state = reducer.apply(nearly_won, Action.auto_move_to_foundation(Selection.waste(0)))
        assert new_state.status == GameStatus.WON

    def test_won_is_noop(self, reducer):
        state = complete_state(
            waste=[card(1, Suit.CLUBS)],
            status=GameStatus.WON,
        )
        assert reducer.apply(state, Action.auto_move_to_foundation(Selection.waste(0))) is state


class TestWonIsTerminal:
    """Once won, gameplay actions change nothing."""

    @pytest.mark.parametrize("action", [
        Action.click_stock(),
        Action.click_waste(),
        Action.click_tableau(0, 0),
        Action.click_foundation(0),
        Action.tick(),
    ])
    def test_gameplay_actions_are_noops(self, reducer, action):
        state = complete_state(foundations=[run(s, 13) for s in Suit], status=GameStatus.WON)
        assert reducer.apply(state, action) is state


class TestLoadState:
    """Tests for the harness-only LOAD_STATE action."""

    def test_ignored_by_default(self, reducer, fresh_deal):
        other = nearly_won_state()
        assert reducer.apply(fresh_deal, Action.load_state(other)) is fresh_deal

    def test_apply_action_ignores_load(self, fresh_deal):
        assert apply_action(fresh_deal, Action.load_state(nearly_won_state())) is fresh_deal

    def test_harness_reducer_installs_state(self, harness_reducer, fresh_deal):
        other = nearly_won_state()
        assert harness_reducer.apply(fresh_deal, Action.load_state(other)) is other

    def test_play_continues_from_loaded_state(self, harness_reducer, fresh_deal):
        state = harness_reducer.apply(fresh_deal, Action.load_state(nearly_won_state()))
        state = harness_reducer.apply(state, Action.click_waste())
        state = harness_reducer.apply(state, Action.click_foundation(3))
        assert state.status == GameStatus.WON


class TestImmutability:
    """Transitions never modify their input."""

    def test_input_state_untouched(self, reducer, fresh_deal):
        snapshot = fresh_deal
        tableau = fresh_deal.tableau
        stock = fresh_deal.stock

        reducer.apply(fresh_deal, Action.click_stock())
        reducer.apply(fresh_deal, Action.click_tableau(6, 6))

        assert fresh_deal is snapshot
        assert fresh_deal.tableau == tableau
        assert fresh_deal.stock == stock
        assert fresh_deal.moves == 0

    def test_reducer_default_rng(self, fresh_deal):
        new_state = Reducer().apply(fresh_deal, Action.new_game())
        assert len(new_state.stock) == 24
