"""
Memory Match CLI - Command-line interface for the engine.

Usage:
    memorymatch presets                      List difficulty presets
    memorymatch deal [-d LEVEL] [--seed N]   Print a shuffled deck
    memorymatch play [-d LEVEL] [--seed N]   Play in the terminal
    memorymatch serve [--host H] [--port P]  Run the HTTP API
"""

import argparse
import logging
import random
import sys
import time

from .engine_core import GameEngine, GameHooks, InvalidConfig, VirtualScheduler
from .engine_core.config import load_config
from .engine_core.deck import build_deck
from .engine_core.difficulty import get_difficulty


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Memory Match - pair-finding puzzle engine",
        prog="memorymatch",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("presets", help="List difficulty presets")

    deal_parser = subparsers.add_parser("deal", help="Print a shuffled deck")
    deal_parser.add_argument("--difficulty", "-d", help="Preset key")
    deal_parser.add_argument("--seed", type=int, help="Shuffle seed")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--difficulty", "-d", help="Preset key")
    play_parser.add_argument("--seed", type=int, help="Shuffle seed")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "presets":
            cmd_presets(args)
        elif args.command == "deal":
            cmd_deal(args)
        elif args.command == "play":
            cmd_play(args)
        elif args.command == "serve":
            cmd_serve(args)
        else:
            parser.print_help()
            sys.exit(1)
    except InvalidConfig as e:
        print(f"Error: {e}")
        sys.exit(2)


def cmd_presets(args):
    """List difficulty presets."""
    config = load_config()
    for key, difficulty in config.difficulties.items():
        marker = " (default)" if key == config.default_difficulty else ""
        print(
            f"{key:<8} {difficulty.columns}x{difficulty.rows}  "
            f"{difficulty.pair_count} pairs{marker}"
        )


def cmd_deal(args):
    """Print a shuffled deck as a grid."""
    config = load_config()
    difficulty = get_difficulty(
        args.difficulty or config.default_difficulty, config.difficulties,
    )
    deck = build_deck(difficulty, config.symbol_pool, random.Random(args.seed))
    for start in range(0, len(deck), difficulty.columns):
        print(" ".join(deck[start:start + difficulty.columns]))


def cmd_play(args, read=input, clock=time.monotonic, sleep=time.sleep):
    """
    Play in the terminal.

    The engine runs on a VirtualScheduler advanced by real elapsed time
    between commands, so the clock and reveal pauses behave as on a board.
    """
    config = load_config()
    scheduler = VirtualScheduler()
    hooks = GameHooks(on_win=lambda: print("\nYou matched all pairs!"))
    engine = GameEngine(
        scheduler,
        config=config,
        hooks=hooks,
        difficulty=args.difficulty,
        seed=args.seed,
    )

    last = clock()

    def catch_up():
        nonlocal last
        now = clock()
        scheduler.advance(int((now - last) * 1000))
        last = now

    print("Commands: card number, r = reset, d <level> = difficulty, q = quit")
    while True:
        catch_up()
        state = engine.snapshot()
        render(state)
        if state.won:
            print(f"Moves: {state.moves}  Time: {state.time_display}")

        try:
            command = read("> ").strip().lower()
        except EOFError:
            break
        catch_up()

        if command in ("q", "quit"):
            break
        if command in ("r", "reset"):
            engine.reset()
            continue
        if command.startswith("d "):
            try:
                engine.set_difficulty(command[2:].strip())
            except InvalidConfig as e:
                print(f"Error: {e}")
            continue
        if not command.isdigit():
            print("Enter a card number")
            continue

        engine.flip(int(command) - 1)
        state = engine.snapshot()
        if state.locked:
            render(state)
            delay = config.match_delay_ms
            if state.deck[state.flipped_indices[0]] != state.deck[state.flipped_indices[1]]:
                delay = config.mismatch_delay_ms
            sleep(delay / 1000)


def render(state):
    """Print the board with card numbers for face-down cards."""
    columns = state.difficulty.columns
    print(
        f"\n{state.difficulty.key}  Moves: {state.moves}  "
        f"Time: {state.time_display}  Pairs: {state.pairs_found}/{state.total_pairs}"
    )
    cards = state.cards()
    for start in range(0, len(cards), columns):
        cells = []
        for card in cards[start:start + columns]:
            if card.face_up:
                cells.append(f"[ {card.symbol} ]")
            else:
                cells.append(f"[{card.index + 1:^4}]")
        print(" ".join(cells))


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("memorymatch.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
