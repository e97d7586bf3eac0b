"""Single-player board: grid, fleet, attacks and sink notifications."""

from __future__ import annotations

import logging
import re
import string
import threading
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Sequence

from broadside.telemetry import get_meter, get_tracer

from .notifications import NotificationSink
from .placement import PlacementError, PlacementPolicy, RandomPlacementPolicy
from .ship import DEFAULT_FLEET, Coordinate, Orientation, Ship, ShipClass

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Attacks resolved by a board",
)

SUNK_COUNTER = meter.create_counter(
    "broadside_engine_ships_sunk",
    unit="1",
    description="Ships sunk across all games",
)

MAX_ROWS = 99
MAX_COLUMNS = len(string.ascii_uppercase)

_INPUT_PATTERN = re.compile(r"([A-Z])([0-9]{1,2})")


class CellState(Enum):
    """What the player is allowed to see of a cell, keyed by its marker."""

    UNKNOWN = "-"
    MISS = "O"
    HIT = "X"


@dataclass
class Cell:
    """One grid square. ``ship_index`` points into the owning board's fleet."""

    is_hit: bool = False
    ship_index: int | None = None

    @property
    def is_occupied(self) -> bool:
        return self.ship_index is not None

    @property
    def state(self) -> CellState:
        if not self.is_hit:
            return CellState.UNKNOWN
        return CellState.HIT if self.is_occupied else CellState.MISS


class GamePhase(Enum):
    """Lifecycle of a single game."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    OVER = "over"


class ShotOutcome(Enum):
    """Result of firing at one cell."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"
    REPEAT = "repeat"

    @property
    def is_hit(self) -> bool:
        return self in (ShotOutcome.HIT, ShotOutcome.SUNK)


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable view of a board for state queries."""

    phase: GamePhase
    ships_sunk: int
    fleet_size: int
    cells: tuple[tuple[CellState, ...], ...]


class BoardConfigurationError(RuntimeError):
    """Raised when the shared board is requested with conflicting settings."""


def parse_coordinate(text: str, rows: int, columns: int) -> Coordinate | None:
    """Decode text such as ``"A1"`` into a zero-based coordinate.

    The column is a single upper-case letter and the row a 1-based number.
    Returns ``None`` for anything malformed or outside a ``rows`` x ``columns``
    grid. Case is not normalised here.
    """
    if not 2 <= len(text) <= 3:
        return None
    match = _INPUT_PATTERN.fullmatch(text)
    if match is None:
        return None
    col = ord(match.group(1)) - ord("A")
    row = int(match.group(2))
    if not 1 <= row <= rows or not 0 <= col < columns:
        return None
    return Coordinate(row - 1, col)


class GameBoard:
    """Owns the grid and fleet for one game and resolves attacks against them."""

    _instance: ClassVar[GameBoard | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        rows: int,
        columns: int,
        placement_policy: PlacementPolicy,
        fleet: Sequence[ShipClass] = DEFAULT_FLEET,
    ) -> None:
        if not 1 <= rows <= MAX_ROWS:
            raise ValueError(f"Rows must be between 1 and {MAX_ROWS}, got {rows}.")
        if not 1 <= columns <= MAX_COLUMNS:
            raise ValueError(f"Columns must be between 1 and {MAX_COLUMNS}, got {columns}.")
        self._rows = rows
        self._columns = columns
        self._placement_policy = placement_policy
        self._fleet: tuple[Ship, ...] = tuple(Ship.from_class(entry) for entry in fleet)
        self._ships_sunk = 0
        self._observers: list[NotificationSink] = []
        self._grid: list[list[Cell]] | None = None
        self._ships_placed = False

    @classmethod
    def get_instance(
        cls,
        rows: int,
        columns: int,
        placement_policy: PlacementPolicy | None = None,
    ) -> GameBoard:
        """Return the process-wide board, creating it on first use.

        Later calls must agree with the dimensions of the existing board and
        either omit the policy or pass the same policy object; anything else
        raises ``BoardConfigurationError``.
        """
        instance = cls._instance
        if instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls(rows, columns, placement_policy or RandomPlacementPolicy())
                    logger.info("board_instance_created", extra={"rows": rows, "columns": columns})
                instance = cls._instance

        if (rows, columns) != (instance.rows, instance.columns):
            logger.error(
                "board_instance_conflict",
                extra={
                    "requested_rows": rows,
                    "requested_columns": columns,
                    "rows": instance.rows,
                    "columns": instance.columns,
                },
            )
            raise BoardConfigurationError(
                f"Board already exists as {instance.rows}x{instance.columns}; "
                f"cannot reconfigure it to {rows}x{columns}."
            )
        if placement_policy is not None and placement_policy is not instance._placement_policy:
            logger.error("board_instance_policy_conflict")
            raise BoardConfigurationError("Board already exists with another placement policy.")
        return instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide board."""
        with cls._instance_lock:
            cls._instance = None

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def fleet(self) -> tuple[Ship, ...]:
        return self._fleet

    @property
    def ships_sunk(self) -> int:
        return self._ships_sunk

    @property
    def phase(self) -> GamePhase:
        if self.is_game_over():
            return GamePhase.OVER
        return GamePhase.IN_PROGRESS if self._ships_placed else GamePhase.SETUP

    def initialize(self) -> None:
        """Allocate a fresh grid of empty, unhit cells.

        Calling this again replaces the grid only. Ships keep their remaining
        length and the sunk count is left untouched.
        """
        with tracer.start_as_current_span("board.initialize") as span:
            span.set_attribute("board.rows", self._rows)
            span.set_attribute("board.columns", self._columns)
            if self._grid is not None:
                logger.warning(
                    "board_reinitialized",
                    extra={"ships_sunk": self._ships_sunk, "fleet_size": len(self._fleet)},
                )
            self._grid = [[Cell() for _ in range(self._columns)] for _ in range(self._rows)]
            self._ships_placed = False
            logger.info(
                "board_initialized", extra={"rows": self._rows, "columns": self._columns}
            )

    def add_observer(self, sink: NotificationSink) -> None:
        self._observers.append(sink)

    def notify_observers(self, message: str) -> None:
        """Deliver ``message`` to every registered sink, in registration order."""
        for sink in self._observers:
            sink.notify(message)

    def place_ships(self) -> None:
        """Hand the fleet to the placement policy."""
        self._require_grid()
        with tracer.start_as_current_span("board.place_ships") as span:
            span.set_attribute("fleet.size", len(self._fleet))
            self._placement_policy.place_ships(self, self._fleet)
            self._ships_placed = True
            logger.info("fleet_placed", extra={"fleet_size": len(self._fleet)})

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self._rows and 0 <= coord.col < self._columns

    def can_place_ship(self, length: int, origin: Coordinate, orientation: Orientation) -> bool:
        """Check bounds and overlap for a ship of ``length`` starting at ``origin``."""
        grid = self._require_grid()
        coords = orientation.cells(origin, length)
        if not all(self.is_valid_coordinate(coord) for coord in coords):
            return False
        return not any(grid[coord.row][coord.col].is_occupied for coord in coords)

    def occupy(self, ship: Ship, origin: Coordinate, orientation: Orientation) -> None:
        """Commit ``ship`` to the cells starting at ``origin``."""
        grid = self._require_grid()
        index = self._fleet_index(ship)
        if index is None:
            logger.error("ship_not_in_fleet", extra={"ship_name": ship.name})
            raise PlacementError(f"{ship.name} is not part of this board's fleet.")
        if not self.can_place_ship(ship.length, origin, orientation):
            logger.warning(
                "ship_placement_failed",
                extra={
                    "ship_name": ship.name,
                    "orientation": orientation.name,
                    "row": origin.row,
                    "col": origin.col,
                },
            )
            raise PlacementError(
                f"{ship.name} does not fit {orientation.value} at "
                f"({origin.row}, {origin.col})."
            )
        for coord in orientation.cells(origin, ship.length):
            grid[coord.row][coord.col].ship_index = index
        logger.info(
            "ship_placed",
            extra={
                "ship_name": ship.name,
                "orientation": orientation.name,
                "row": origin.row,
                "col": origin.col,
            },
        )

    def is_valid_input(self, text: str) -> bool:
        return parse_coordinate(text, self._rows, self._columns) is not None

    def attack(self, text: str) -> bool:
        """Attack the cell named by ``text``; True means a ship was hit."""
        coord = parse_coordinate(text, self._rows, self._columns)
        if coord is None:
            raise ValueError(f"Invalid coordinate: {text!r}.")
        return self.fire(coord).is_hit

    def fire(self, coord: Coordinate) -> ShotOutcome:
        """Resolve one shot at ``coord``, notifying sinks if it sinks a ship."""
        grid = self._require_grid()
        with tracer.start_as_current_span("board.fire") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            if not self.is_valid_coordinate(coord):
                logger.error("shot_out_of_bounds", extra={"row": coord.row, "col": coord.col})
                raise ValueError("Shot out of bounds.")

            cell = grid[coord.row][coord.col]
            if cell.is_hit:
                outcome = ShotOutcome.REPEAT
                logger.info("shot_repeat", extra={"row": coord.row, "col": coord.col})
            else:
                cell.is_hit = True
                outcome = self._resolve_hit(cell, coord)

            span.set_attribute("shot.outcome", outcome.value)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome.value})
            return outcome

    def _resolve_hit(self, cell: Cell, coord: Coordinate) -> ShotOutcome:
        if cell.ship_index is None:
            logger.info("shot_miss", extra={"row": coord.row, "col": coord.col})
            return ShotOutcome.MISS

        ship = self._fleet[cell.ship_index]
        if not ship.take_hit():
            logger.info(
                "shot_hit",
                extra={"row": coord.row, "col": coord.col, "ship_name": ship.name},
            )
            return ShotOutcome.HIT

        self._ships_sunk += 1
        SUNK_COUNTER.add(1)
        logger.info(
            "ship_sunk",
            extra={"ship_name": ship.name, "ships_sunk": self._ships_sunk},
        )
        self.notify_observers(f"You sank the {ship.name}!")
        if self.is_game_over():
            logger.info("game_over", extra={"fleet_size": len(self._fleet)})
        return ShotOutcome.SUNK

    def is_game_over(self) -> bool:
        return self._ships_sunk == len(self._fleet)

    def cell(self, coord: Coordinate) -> Cell:
        grid = self._require_grid()
        if not self.is_valid_coordinate(coord):
            raise ValueError("Coordinate out of bounds.")
        return grid[coord.row][coord.col]

    def cell_state(self, coord: Coordinate) -> CellState:
        return self.cell(coord).state

    def render(self) -> str:
        """Return the grid as text with a lettered header and numbered rows."""
        grid = self._require_grid()
        width = len(str(self._rows))
        letters = string.ascii_uppercase[: self._columns]
        lines = [" " * (width + 1) + " ".join(letters)]
        for number, row in enumerate(grid, start=1):
            markers = " ".join(cell.state.value for cell in row)
            lines.append(f"{number:>{width}} {markers}")
        return "\n".join(lines)

    def snapshot(self) -> BoardSnapshot:
        grid = self._require_grid()
        return BoardSnapshot(
            phase=self.phase,
            ships_sunk=self._ships_sunk,
            fleet_size=len(self._fleet),
            cells=tuple(tuple(cell.state for cell in row) for row in grid),
        )

    def _fleet_index(self, ship: Ship) -> int | None:
        for index, candidate in enumerate(self._fleet):
            if candidate is ship:
                return index
        return None

    def _require_grid(self) -> list[list[Cell]]:
        if self._grid is None:
            logger.error("board_not_initialized")
            raise RuntimeError("Board has not been initialized.")
        return self._grid
