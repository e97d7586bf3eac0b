"""Ship domain model for the Broadside engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable zero-based grid position."""

    row: int
    col: int


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def cells(self, origin: Coordinate, length: int) -> list[Coordinate]:
        """Return the contiguous coordinates covered by a ship starting at ``origin``."""
        if self is Orientation.HORIZONTAL:
            return [Coordinate(origin.row, origin.col + offset) for offset in range(length)]
        return [Coordinate(origin.row + offset, origin.col) for offset in range(length)]


@dataclass(frozen=True)
class ShipClass:
    """Description of one fleet entry."""

    name: str
    length: int


DEFAULT_FLEET: tuple[ShipClass, ...] = (
    ShipClass("Patrol Boat", 6),
    ShipClass("Aircraft Carrier", 5),
    ShipClass("Battleship", 4),
    ShipClass("Cruiser", 3),
    ShipClass("Submarine", 3),
    ShipClass("Destroyer", 2),
)


class Ship:
    """A ship afloat (or not) on a board.

    Ships do not know where they are placed; cells point back at them by
    fleet index. Only the remaining length changes over a game.
    """

    def __init__(self, name: str, length: int) -> None:
        if length < 1:
            raise ValueError(f"Ship length must be positive, got {length}.")
        self._name = name
        self._length = length
        self._remaining_length = length

    @classmethod
    def from_class(cls, ship_class: ShipClass) -> Ship:
        return cls(ship_class.name, ship_class.length)

    @property
    def name(self) -> str:
        return self._name

    @property
    def length(self) -> int:
        """Number of contiguous cells the ship occupies."""
        return self._length

    @property
    def remaining_length(self) -> int:
        return self._remaining_length

    @property
    def is_sunk(self) -> bool:
        return self._remaining_length == 0

    def take_hit(self) -> bool:
        """Record one hit and return whether the ship is now sunk."""
        if self.is_sunk:
            raise ValueError(f"{self._name} is already sunk.")
        self._remaining_length -= 1
        return self.is_sunk

    def __repr__(self) -> str:
        return (
            f"Ship(name={self._name!r}, length={self._length}, "
            f"remaining_length={self._remaining_length})"
        )
