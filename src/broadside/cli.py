"""Console driver: attack coordinates until the whole fleet is sunk."""

from __future__ import annotations

import argparse
import logging
import random
from typing import Sequence

from pydantic import ValidationError

from broadside.config import GameConfig
from broadside.engine.board import GameBoard
from broadside.engine.notifications import ConsoleNotificationSink, LoggingNotificationSink
from broadside.engine.placement import RandomPlacementPolicy
from broadside.telemetry import (
    configure_console_logging,
    init_telemetry,
    load_telemetry_config,
    record_count,
    shutdown_telemetry,
)

logger = logging.getLogger(__name__)

BANNER = "Welcome to World War II, its time to bombs some boats!"
START_PROMPT = "Press any key to start the game!"
CONTINUE_PROMPT = "Press any key to continue..."
COORDINATE_PROMPT = "Enter coordinates (e.g., A1): "
CLEAR_SCREEN = "\033[2J\033[H"


def _clear_screen(enabled: bool) -> None:
    if enabled:
        print(CLEAR_SCREEN, end="")


def setup_board(config: GameConfig) -> GameBoard:
    """Create the shared board, wire the console and log sinks and place the fleet."""
    policy = RandomPlacementPolicy(rng=random.Random(config.seed))
    board = GameBoard.get_instance(config.rows, config.columns, policy)
    board.initialize()
    board.add_observer(ConsoleNotificationSink())
    board.add_observer(LoggingNotificationSink(logger))
    board.place_ships()
    return board


def run_turns(board: GameBoard, clear_screen: bool = True) -> int:
    """Prompt for attacks until the game ends; returns the exit status."""
    while not board.is_game_over():
        _clear_screen(clear_screen)
        print(board.render())
        try:
            text = input(COORDINATE_PROMPT).strip().upper()
        except EOFError:
            logger.info("input_closed", extra={"ships_sunk": board.ships_sunk})
            return 1

        if board.is_valid_input(text):
            print("Hit!" if board.attack(text) else "Miss!")
        else:
            record_count("broadside_cli_invalid_inputs")
            print("Invalid input!")

        print(CONTINUE_PROMPT)
        try:
            input()
        except EOFError:
            logger.info("input_closed", extra={"ships_sunk": board.ships_sunk})
            return 1

    _clear_screen(clear_screen)
    print(board.render())
    print("Game Over!")
    record_count("broadside_games_completed")
    return 0


def play_game(config: GameConfig) -> int:
    print(BANNER)
    print("-" * len(BANNER))
    print(START_PROMPT)
    try:
        input()
    except EOFError:
        return 1
    board = setup_board(config)
    return run_turns(board, clear_screen=config.clear_screen)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sink the hidden fleet from the console.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for a reproducible layout."
    )
    parser.add_argument(
        "--no-clear", action="store_true", help="Do not clear the screen between turns."
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr.")
    args = parser.parse_args(argv)

    overrides: dict[str, object] = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.no_clear:
        overrides["clear_screen"] = False
    try:
        config = GameConfig.from_env(**overrides)
    except ValidationError as exc:
        parser.error(str(exc))

    if args.verbose:
        configure_console_logging(logging.DEBUG)
    init_telemetry(load_telemetry_config())
    try:
        return play_game(config)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    raise SystemExit(main())
