"""
SuperTTT CLI - Command-line interface for the engine.

Usage:
    superttt play [--size N]        Play the active game in the terminal
    superttt status                 Show the active game
    superttt new [--size N]         Open a new game
    superttt serve [--port P]       Run the local REST API

Games are kept in the JSON store (--store or SUPERTTT_STORE_PATH).
"""

import argparse
import logging
import os
import sys

from .engine_core.state import MAX_PLAYABLE_SIZE, GameState, index_to_coords, is_playable_size
from .engine_core.action_generator import get_allowed_board_indexes
from .session.storage import JsonFileStorage
from .session.feedback import TransitionKind, classify_transition, describe_game_status, turn_prompt


def render_text(state: GameState) -> str:
    """
    Draw the whole board of boards as text.

    Resolved boards show their winner (or # for a draw) in every cell;
    playable boards are listed under the grid.
    """
    n = state.size
    allowed = set(get_allowed_board_indexes(state))
    lines = []
    separator = "-+-".join("-" * (2 * n - 1) for _ in range(n))

    for meta_row in range(n):
        if meta_row:
            lines.append(separator)
        for cell_row in range(n):
            segments = []
            for meta_col in range(n):
                board = state.boards[meta_row * n + meta_col]
                cells = []
                for cell_col in range(n):
                    if board.winner is not None:
                        cells.append(board.winner.value.lower())
                    elif board.is_draw:
                        cells.append("#")
                    else:
                        cell = board.cells[cell_row * n + cell_col]
                        cells.append(cell.value if cell else ".")
                segments.append(" ".join(cells))
            lines.append(" | ".join(segments))

    marks = []
    for index in sorted(allowed):
        row, col = index_to_coords(index, n)
        marks.append(f"{index}=({row + 1},{col + 1})")
    lines.append("")
    lines.append(f"Moves: {state.move_count}  Open boards: {', '.join(marks) or '-'}")
    return "\n".join(lines)


def board_size(value: str) -> str:
    """argparse type for --size: rejects sizes above MAX_PLAYABLE_SIZE."""
    if not is_playable_size(value):
        raise argparse.ArgumentTypeError(f"size must be at most {MAX_PLAYABLE_SIZE}")
    return value


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SuperTTT - Super Tic-Tac-Toe Engine",
        prog="superttt",
    )
    parser.add_argument("--store", help="Path to the JSON game store")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play the active game")
    play_parser.add_argument("--size", type=board_size, help="Start a new game of this size first")

    subparsers.add_parser("status", help="Show the active game")

    new_parser = subparsers.add_parser("new", help="Open a new game")
    new_parser.add_argument("--size", type=board_size, help="Board size (default 3)")

    serve_parser = subparsers.add_parser("serve", help="Run the local REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "status":
        cmd_status(args)
    elif args.command == "new":
        cmd_new(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_status(args):
    """Print the active game."""
    storage = JsonFileStorage(args.store)
    store = storage.load()
    entry = store.active_game
    print(f"{entry.name} - {describe_game_status(entry.state).label}")
    print(render_text(entry.state))
    print(turn_prompt(entry.state))


def cmd_new(args):
    """Open a new game."""
    storage = JsonFileStorage(args.store)
    store = storage.load()
    entry = store.create_game(args.size)
    storage.save(store)
    print(f"Opened {entry.name} ({entry.state.size}x{entry.state.size})")


def cmd_play(args):
    """Interactive play loop over stdin."""
    storage = JsonFileStorage(args.store)
    store = storage.load()
    if args.size is not None:
        store.create_game(args.size)
        storage.save(store)

    print("Enter 'board cell' to move, 'new [size]' to restart, 'quit' to leave.")
    while True:
        entry = store.active_game
        print()
        print(render_text(entry.state))
        print(turn_prompt(entry.state))

        try:
            line = input("> ").strip()
        except EOFError:
            break

        if not line:
            continue
        if line in ("q", "quit", "exit"):
            break

        parts = line.split()
        if parts[0] == "new":
            size = parts[1] if len(parts) > 1 else None
            if size is not None and not is_playable_size(size):
                print(f"Size must be at most {MAX_PLAYABLE_SIZE}")
                continue
            store.reset_game(size=size)
            storage.save(store)
            continue

        try:
            board_index, cell_index = (int(p) for p in parts)
        except ValueError:
            print("Expected two numbers: board cell")
            continue

        previous = entry.state
        result = store.play(board_index, cell_index)
        kind = classify_transition(previous, result.state)
        if kind is TransitionKind.REJECTED:
            print(f"Illegal move ({result.reason.value.replace('_', ' ')})")
            continue
        storage.save(store)
        if kind is TransitionKind.LOCAL_BOARD_CAPTURED:
            print("Board captured!")


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    import uvicorn

    if args.store:
        os.environ["SUPERTTT_STORE_PATH"] = args.store

    uvicorn.run("superttt.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
