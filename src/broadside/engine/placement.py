"""Fleet placement strategies."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Mapping, Protocol, Sequence, runtime_checkable

from broadside.telemetry import get_meter, get_tracer

from .ship import Coordinate, Orientation, Ship

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .board import GameBoard

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.placement")
meter = get_meter("broadside.engine.placement")

ATTEMPT_COUNTER = meter.create_counter(
    "broadside_engine_placement_attempts",
    unit="1",
    description="Candidate positions sampled while placing ships",
)


class PlacementError(ValueError):
    """Raised when a ship cannot be put where it was asked to go."""


@runtime_checkable
class PlacementPolicy(Protocol):
    """Assigns every ship of a fleet to cells of a board."""

    def place_ships(self, board: GameBoard, ships: Sequence[Ship]) -> None:
        ...


class RandomPlacementPolicy:
    """Rejection-samples an origin and orientation for each ship in turn.

    Each ship is committed as soon as a valid position is drawn; earlier ships
    are never moved to make room for later ones. With ``max_attempts=None``
    sampling never gives up, so a board too small or too crowded for the fleet
    will spin forever. Pass a cap to turn that into a ``PlacementError``.
    """

    def __init__(self, rng: random.Random | None = None, max_attempts: int | None = None) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be positive when given.")
        self._rng = rng or random.Random()
        self._max_attempts = max_attempts

    def place_ships(self, board: GameBoard, ships: Sequence[Ship]) -> None:
        with tracer.start_as_current_span("placement.random") as span:
            span.set_attribute("board.rows", board.rows)
            span.set_attribute("board.columns", board.columns)
            span.set_attribute("fleet.size", len(ships))
            orientations = list(Orientation)
            for ship in ships:
                attempts = 0
                while True:
                    if self._max_attempts is not None and attempts >= self._max_attempts:
                        logger.error(
                            "random_placement_exhausted",
                            extra={"ship_name": ship.name, "attempts": attempts},
                        )
                        raise PlacementError(
                            f"Could not place {ship.name} after {attempts} attempts."
                        )
                    attempts += 1
                    origin = Coordinate(
                        self._rng.randrange(board.rows), self._rng.randrange(board.columns)
                    )
                    orientation = self._rng.choice(orientations)
                    if board.can_place_ship(ship.length, origin, orientation):
                        board.occupy(ship, origin, orientation)
                        break
                ATTEMPT_COUNTER.add(attempts, attributes={"policy": "random"})
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_name": ship.name, "attempts": attempts},
                )


class FixedPlacementPolicy:
    """Places ships at positions chosen up front, keyed by ship name."""

    def __init__(self, layout: Mapping[str, tuple[Coordinate, Orientation]]) -> None:
        self._layout = dict(layout)

    def place_ships(self, board: GameBoard, ships: Sequence[Ship]) -> None:
        with tracer.start_as_current_span("placement.fixed") as span:
            span.set_attribute("fleet.size", len(ships))
            for ship in ships:
                try:
                    origin, orientation = self._layout[ship.name]
                except KeyError:
                    logger.error("fixed_placement_missing", extra={"ship_name": ship.name})
                    raise PlacementError(f"No position given for {ship.name}.") from None
                board.occupy(ship, origin, orientation)
