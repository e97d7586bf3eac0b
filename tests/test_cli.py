"""Tests for the console driver."""

from __future__ import annotations

import logging
from typing import Iterator

import pytest

from broadside import cli
from broadside.config import GameConfig
from broadside.engine.board import GameBoard
from broadside.engine.notifications import ConsoleNotificationSink
from broadside.engine.ship import Coordinate


def _feed(monkeypatch: pytest.MonkeyPatch, lines: Iterator[str]) -> None:
    def fake_input(prompt: str = "") -> str:
        print(prompt)
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def _occupied_inputs(board: GameBoard) -> list[str]:
    inputs = []
    for row in range(board.rows):
        for col in range(board.columns):
            if board.cell(Coordinate(row, col)).is_occupied:
                inputs.append(f"{chr(ord('A') + col)}{row + 1}")
    return inputs


def test_run_turns_reports_each_outcome(
    single_ship_board: GameBoard,
    messages: list[str],
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    single_ship_board.add_observer(ConsoleNotificationSink())
    _feed(monkeypatch, iter(["zz", "", "d4", "", "a1", "", "A1", "", " b1 ", ""]))

    assert cli.run_turns(single_ship_board, clear_screen=False) == 0

    out = capsys.readouterr().out
    results = [line for line in out.splitlines() if line.endswith("!")]
    assert results == [
        "Invalid input!",
        "Miss!",
        "Hit!",
        "Miss!",
        "You sank the Dinghy!",
        "Hit!",
        "Game Over!",
    ]
    assert messages == ["You sank the Dinghy!"]
    assert cli.CLEAR_SCREEN not in out
    assert out.count(cli.COORDINATE_PROMPT) == 5


def test_run_turns_stops_on_end_of_input(
    single_ship_board: GameBoard, monkeypatch: pytest.MonkeyPatch
) -> None:
    _feed(monkeypatch, iter(["A1", ""]))
    assert cli.run_turns(single_ship_board, clear_screen=True) == 1
    assert not single_ship_board.is_game_over()


def test_play_game_sinks_whole_fleet(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="broadside.cli")
    config = GameConfig(seed=5, clear_screen=False)
    # Place a board with the same seed to learn where the fleet will be.
    board = cli.setup_board(config)
    targets = _occupied_inputs(board)
    GameBoard.reset_instance()

    script = [""]
    for target in targets:
        script.extend([target, ""])
    _feed(monkeypatch, iter(script))

    assert cli.play_game(config) == 0
    out = capsys.readouterr().out
    assert out.startswith(cli.BANNER)
    assert out.count("You sank the ") == 6
    assert out.rstrip().endswith("Game Over!")
    assert GameBoard.get_instance(7, 7).is_game_over()
    sunk_logs = [message for message in caplog.messages if message.startswith("You sank the ")]
    assert len(sunk_logs) == 6


def test_main_rejects_invalid_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BROADSIDE_ROWS", "3")
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2


def test_main_passes_arguments_to_game(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[GameConfig] = []
    monkeypatch.setattr(cli, "play_game", lambda config: captured.append(config) or 0)
    monkeypatch.setattr(cli, "init_telemetry", lambda config: config)
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: None)

    assert cli.main(["--seed", "4", "--no-clear"]) == 0
    assert captured[0].seed == 4
    assert captured[0].clear_screen is False


def test_main_exits_quietly_when_input_closes(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(cli, "init_telemetry", lambda config: config)
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: None)
    _feed(monkeypatch, iter([""]))
    caplog.set_level(logging.DEBUG, logger="broadside")

    assert cli.main(["--no-clear", "--seed", "1"]) == 1

    closed = [record for record in caplog.records if record.getMessage() == "input_closed"]
    assert len(closed) == 1
    assert closed[0].levelno < logging.WARNING
    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
