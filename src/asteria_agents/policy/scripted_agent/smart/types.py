"""
Types and constants for the Smart policy.

Game configuration, world entities (pellets, ships), search records and
the value objects returned by the planner.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from asteria_agents.policy.scripted_agent.common.geometry import Position


class FuelInvariantError(RuntimeError):
    """Raised when executing a plan would drive fuel below zero.

    This is a bug in the planner or the executor, not an infeasible route.
    """


class GameConfig(BaseModel):
    """Process-wide game rules. Injected into every planner component."""

    model_config = ConfigDict(frozen=True)

    max_ship_fuel: int = Field(default=5, ge=0)
    fuel_per_step: int = Field(default=1, ge=1)
    initial_fuel: int = Field(default=5, ge=0)
    min_spawn_distance: int = Field(default=50, ge=0)

    @model_validator(mode="after")
    def _initial_fuel_fits_tank(self) -> GameConfig:
        if self.initial_fuel > self.max_ship_fuel:
            raise ValueError(
                f"initial_fuel ({self.initial_fuel}) exceeds max_ship_fuel ({self.max_ship_fuel})"
            )
        return self

    def fuel_needed(self, distance: int) -> int:
        return distance * self.fuel_per_step

    def clamp_fuel(self, fuel: int) -> int:
        return min(self.max_ship_fuel, fuel)


DEFAULT_GAME_CONFIG = GameConfig()


# Search limits
MAX_SEARCH_ITERATIONS = 1000  # A* expansions before giving up

# Fuel policy
SCARCITY_THRESHOLD = 10  # Fewer pellets than this switches on conservative mode
CONSERVATIVE_REFUEL_BELOW = 3
NORMAL_REFUEL_BELOW = 2


@dataclass(frozen=True)
class Pellet:
    """Fuel source sitting on a grid cell. Consumed once."""

    position: Position
    fuel: int
    ref: Optional[str] = None  # Backing resource, e.g. "txhash#index"


@dataclass(frozen=True)
class Ship:
    """Another agent seen in the world snapshot."""

    position: Position
    fuel: int = 0
    token_name: str = ""


@dataclass
class ShipState:
    """Position and fuel of the ship we control."""

    position: Position
    fuel: int
    max_fuel: int

    def consume_step(self, dx: int, dy: int, cost: int = 1) -> None:
        if self.fuel - cost < 0:
            raise FuelInvariantError(
                f"Move ({dx}, {dy}) from {self.position} needs {cost} fuel, only {self.fuel} left"
            )
        self.fuel -= cost
        self.position = self.position.offset(dx, dy)

    def refuel(self, amount: int) -> int:
        """Add fuel up to the tank limit. Returns the fuel actually gained."""
        before = self.fuel
        self.fuel = min(self.max_fuel, self.fuel + amount)
        return self.fuel - before


@dataclass
class SearchNode:
    position: Position
    g: int  # Steps from start
    h: int  # Manhattan distance to goal
    f: int
    fuel: int
    parent: Optional[SearchNode] = None


@dataclass
class Path:
    """Route from start to goal inclusive. A failed path has no nodes."""

    nodes: list[Position] = field(default_factory=list)
    total_cost: float = math.inf
    fuel_stops: list[Position] = field(default_factory=list)
    success: bool = False

    @classmethod
    def failed(cls) -> Path:
        return cls()

    def next_step(self) -> Optional[tuple[int, int]]:
        if not self.success or len(self.nodes) < 2:
            return None
        here, there = self.nodes[0], self.nodes[1]
        return there.x - here.x, there.y - here.y


@dataclass
class SpawnCandidate:
    position: Position
    score: float
    guaranteed_path: bool
    path_to_origin: Optional[Path] = None
    nearby_pellets: int = 0
    total_moves: float = math.inf


class FuelLevel(Enum):
    """Coarse fuel assessment used for status reporting."""

    CRITICAL = "critical"  # Empty tank, nothing in range
    SUFFICIENT = "sufficient"  # Can reach origin directly
    LOW_WITH_OPTIONS = "low_with_options"  # Short on fuel, pellets in range
    LOW_NO_OPTIONS = "low_no_options"  # Short on fuel, nothing in range


@dataclass(frozen=True)
class FuelStatus:
    level: FuelLevel
    message: str

    def __str__(self) -> str:
        return self.message


class ActionKind(Enum):
    MOVE = "move"
    GATHER = "gather"
    STUCK = "stuck"


@dataclass(frozen=True)
class NextAction:
    kind: ActionKind
    dx: int = 0
    dy: int = 0
