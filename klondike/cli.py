"""
Klondike CLI - Command-line interface for the engine.

Usage:
    klondike play [--draw 1|3] [--seed N]    Play in the terminal
    klondike deal [--draw 1|3] [--seed N]    Print a fresh deal
    klondike serve [--host H] [--port P]     Run the HTTP API

The terminal game is a thin client: it turns typed commands into actions,
feeds elapsed wall-clock seconds to the engine as TICKs, and prints the
state it gets back.
"""

import argparse
import logging
import random
import sys
import time

from .engine_core.action import Action
from .engine_core.deal import deal
from .engine_core.reducer import Reducer
from .engine_core.state import GameState, Selection, SelectionSource, visible_waste
from .engine_core.selection import is_selected


logger = logging.getLogger(__name__)


HELP_TEXT = """\
Commands:
  s              click the stock (draw / recycle the waste)
  w              click the waste (select / deselect its top card)
  t COL [IDX]    click tableau column COL (0-6) at card IDX
                 (IDX defaults to the top card, or the empty slot)
  f PILE         click foundation PILE (0-3)
  a w            send the waste top to a foundation
  a t COL        send the top card of COL to a foundation
  n              new game
  d 1|3          change draw count (starts a new game)
  h              this help
  q              quit
"""


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Klondike - Solitaire Rules Engine",
        prog="klondike",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("--draw", type=int, choices=[1, 3], default=1, help="Cards per draw")
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible deals")

    # Deal command
    deal_parser = subparsers.add_parser("deal", help="Print a fresh deal")
    deal_parser.add_argument("--draw", type=int, choices=[1, 3], default=1, help="Cards per draw")
    deal_parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "deal":
        cmd_deal(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Run an interactive game."""
    reducer = Reducer(rng=random.Random(args.seed))
    state = deal(args.draw, reducer.rng)
    last_tick = time.monotonic()

    print(HELP_TEXT)
    print(render_state(state))

    while True:
        try:
            line = input("> ")
        except EOFError:
            break

        # Feed wall-clock time to the engine as whole-second ticks
        now = time.monotonic()
        for _ in range(int(now - last_tick)):
            state = reducer.apply(state, Action.tick())
        last_tick += int(now - last_tick)

        command = line.strip().lower()
        if command in ("q", "quit", "exit"):
            break
        if command in ("h", "help", "?"):
            print(HELP_TEXT)
            continue

        try:
            action = parse_command(command, state)
        except ValueError as e:
            print(f"Error: {e}")
            continue

        new_state = reducer.apply(state, action)
        if new_state is state:
            print("(nothing happened)")
        state = new_state
        print(render_state(state))

        if state.is_over:
            print(f"\nYou won in {state.moves} moves and {format_time(state.elapsed_seconds)}!")
            print("Type 'n' for a new game or 'q' to quit.")


def cmd_deal(args):
    """Print a deal without playing it."""
    state = deal(args.draw, random.Random(args.seed))
    print(render_state(state))


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn

    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


def parse_command(command: str, state: GameState) -> Action:
    """
    Turn a typed command into an action.

    Raises ValueError for commands that cannot be parsed or that name
    a column or pile out of range.
    """
    parts = command.split()
    if not parts:
        raise ValueError("empty command")

    verb, params = parts[0], parts[1:]

    if verb == "s":
        return Action.click_stock()
    if verb == "w":
        return Action.click_waste()
    if verb == "n":
        return Action.new_game()
    if verb == "d":
        count = _int_param(params, 0, "draw count")
        if count not in (1, 3):
            raise ValueError("draw count must be 1 or 3")
        return Action.set_draw_count(count)
    if verb == "t":
        column = _ranged_param(params, 0, "column", len(state.tableau))
        if len(params) > 1:
            card_index = _int_param(params, 1, "card index")
            if card_index < 0:
                raise ValueError("card index must be >= 0")
        else:
            card_index = max(len(state.tableau[column]) - 1, 0)
        return Action.click_tableau(column, card_index)
    if verb == "f":
        pile_index = _ranged_param(params, 0, "pile", len(state.foundations))
        return Action.click_foundation(pile_index)
    if verb == "a":
        if params[:1] == ["w"]:
            return Action.auto_move_to_foundation(Selection.waste(len(state.waste) - 1))
        if params[:1] == ["t"]:
            column = _ranged_param(params, 1, "column", len(state.tableau))
            top = len(state.tableau[column]) - 1
            return Action.auto_move_to_foundation(Selection.tableau(column, max(top, 0)))
        raise ValueError("usage: a w | a t COL")

    raise ValueError(f"unknown command '{verb}' (h for help)")


def _int_param(params: list[str], position: int, name: str) -> int:
    try:
        return int(params[position])
    except IndexError:
        raise ValueError(f"missing {name}")
    except ValueError:
        raise ValueError(f"{name} must be a number")


def _ranged_param(params: list[str], position: int, name: str, size: int) -> int:
    value = _int_param(params, position, name)
    if not 0 <= value < size:
        raise ValueError(f"{name} must be between 0 and {size - 1}")
    return value


# =============================================================================
# Rendering
# =============================================================================

def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    return f"{seconds // 60}:{seconds % 60:02d}"


def _card_text(card, selected: bool = False) -> str:
    text = card.label if card.face_up else "##"
    return f"*{text}" if selected else text


def render_state(state: GameState) -> str:
    """Render the whole table as plain text."""
    selection = state.selection
    lines = [
        f"Moves: {state.moves}  Time: {format_time(state.elapsed_seconds)}  "
        f"Draw {state.draw_count}  [{state.status.value}]",
    ]

    waste = visible_waste(state)
    waste_text = " ".join(
        _card_text(card, i == len(waste) - 1 and is_selected(selection, SelectionSource.WASTE))
        for i, card in enumerate(waste)
    ) or "--"
    foundations = "  ".join(
        f"{i}:{_card_text(pile[-1], is_selected(selection, SelectionSource.FOUNDATION, i)) if pile else '--'}"
        for i, pile in enumerate(state.foundations)
    )
    lines.append(f"Stock: [{len(state.stock)}]  Waste: {waste_text}  Foundations: {foundations}")
    lines.append("")
    lines.append("  ".join(f"{i:>4}" for i in range(len(state.tableau))))

    height = max((len(column) for column in state.tableau), default=0)
    for row in range(height):
        cells = []
        for col, column in enumerate(state.tableau):
            if row < len(column):
                selected = is_selected(selection, SelectionSource.TABLEAU, col, row)
                cells.append(f"{_card_text(column[row], selected):>4}")
            else:
                cells.append(" " * 4)
        lines.append("  ".join(cells).rstrip())

    return "\n".join(lines)


if __name__ == "__main__":
    main()
