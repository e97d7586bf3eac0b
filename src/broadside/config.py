"""Game configuration."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, field_validator, model_validator

from broadside.engine.board import MAX_COLUMNS, MAX_ROWS
from broadside.engine.ship import DEFAULT_FLEET
from broadside.telemetry.config import env_flag


class GameConfig(BaseModel):
    """Board dimensions and console behaviour for one run."""

    rows: int = 7
    columns: int = 7
    seed: int | None = None
    clear_screen: bool = True

    @field_validator("rows")
    @classmethod
    def check_rows(cls, value: int) -> int:
        if not 1 <= value <= MAX_ROWS:
            raise ValueError(f"rows must be between 1 and {MAX_ROWS}")
        return value

    @field_validator("columns")
    @classmethod
    def check_columns(cls, value: int) -> int:
        if not 1 <= value <= MAX_COLUMNS:
            raise ValueError(f"columns must be between 1 and {MAX_COLUMNS}")
        return value

    @model_validator(mode="after")
    def check_fleet_fits(self) -> GameConfig:
        # Necessary, not sufficient: random placement can still run out of room.
        longest = max(ship.length for ship in DEFAULT_FLEET)
        if longest > max(self.rows, self.columns):
            raise ValueError(f"a {self.rows}x{self.columns} grid cannot hold a ship of length {longest}")
        total = sum(ship.length for ship in DEFAULT_FLEET)
        if total > self.rows * self.columns:
            raise ValueError(f"a {self.rows}x{self.columns} grid cannot hold {total} ship cells")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> GameConfig:
        """Read ``BROADSIDE_ROWS``, ``BROADSIDE_COLUMNS``, ``BROADSIDE_SEED`` and ``BROADSIDE_CLEAR_SCREEN``."""
        data: dict[str, Any] = {}
        for field, env_name in (
            ("rows", "BROADSIDE_ROWS"),
            ("columns", "BROADSIDE_COLUMNS"),
            ("seed", "BROADSIDE_SEED"),
        ):
            value = os.getenv(env_name)
            if value:
                data[field] = value
        clear_screen = env_flag("BROADSIDE_CLEAR_SCREEN")
        if clear_screen is not None:
            data["clear_screen"] = clear_screen
        data.update(overrides)
        return cls(**data)
