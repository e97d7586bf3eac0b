"""Shared fixtures."""

from __future__ import annotations

import pytest

from broadside.engine.board import GameBoard
from broadside.engine.notifications import ConsoleNotificationSink
from broadside.engine.placement import FixedPlacementPolicy
from broadside.engine.ship import Coordinate, Orientation, ShipClass


@pytest.fixture(autouse=True)
def _reset_board_instance():
    GameBoard.reset_instance()
    yield
    GameBoard.reset_instance()


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def single_ship_board(messages: list[str]) -> GameBoard:
    """7x7 board holding one 2-long ship across A1 and B1."""
    policy = FixedPlacementPolicy({"Dinghy": (Coordinate(0, 0), Orientation.HORIZONTAL)})
    board = GameBoard(7, 7, policy, fleet=(ShipClass("Dinghy", 2),))
    board.initialize()
    board.add_observer(ConsoleNotificationSink(write=messages.append))
    board.place_ships()
    return board
