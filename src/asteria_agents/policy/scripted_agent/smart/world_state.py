"""
World state snapshot for the Smart policy.

The planner only reads the world through :class:`WorldStateView`. Whatever
talks to the ledger builds a snapshot, hands it to the planner, and applies
real moves itself. :class:`InMemoryWorldState` is that snapshot for tests,
the navigation simulator and offline runs.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Protocol

from asteria_agents.policy.scripted_agent.common.geometry import ORIGIN, Position, manhattan

from .types import Pellet, Ship


class WorldStateView(Protocol):
    """Read-only view of pellets and agents."""

    def pellet_at(self, position: Position) -> Optional[Pellet]: ...

    def all_pellets(self) -> list[Pellet]: ...

    def pellets_within_distance(self, position: Position, max_distance: int) -> list[Pellet]: ...

    def all_agents(self) -> list[Ship]: ...


def quadrant_of(pos: Position) -> str:
    if pos.x >= 0 and pos.y >= 0:
        return "q1"
    if pos.x < 0 and pos.y >= 0:
        return "q2"
    if pos.x < 0:
        return "q3"
    return "q4"


@dataclass
class PelletStats:
    total_pellets: int = 0
    total_fuel: int = 0
    avg_fuel_per_pellet: float = 0.0
    quadrants: dict[str, int] = field(default_factory=lambda: {"q1": 0, "q2": 0, "q3": 0, "q4": 0})
    closest_to_origin: float = math.inf  # inf when there are no pellets
    closest_pellet: Optional[Position] = None


class InMemoryWorldState:
    """Snapshot of pellets and ships keyed by position."""

    def __init__(self, pellets: Iterable[Pellet] = (), agents: Iterable[Ship] = ()) -> None:
        self._pellets: dict[str, Pellet] = {}
        self._agents: dict[str, Ship] = {}
        self.my_ship_position: Optional[Position] = None
        self.my_ship_fuel: Optional[int] = None
        self.set_pellets(pellets)
        for agent in agents:
            self.add_agent(agent)

    # ------------------------------------------------------------------
    # WorldStateView
    # ------------------------------------------------------------------

    def pellet_at(self, position: Position) -> Optional[Pellet]:
        return self._pellets.get(position.key)

    def all_pellets(self) -> list[Pellet]:
        return list(self._pellets.values())

    def pellets_within_distance(self, position: Position, max_distance: int) -> list[Pellet]:
        """Pellets within ``max_distance`` steps, nearest first (stable on ties)."""
        in_range: list[tuple[int, Pellet]] = []
        for pellet in self._pellets.values():
            dist = manhattan(position, pellet.position)
            if dist <= max_distance:
                in_range.append((dist, pellet))
        in_range.sort(key=lambda item: item[0])
        return [pellet for _, pellet in in_range]

    def all_agents(self) -> list[Ship]:
        return list(self._agents.values())

    # ------------------------------------------------------------------
    # Snapshot maintenance (collaborator side)
    # ------------------------------------------------------------------

    def set_pellets(self, pellets: Iterable[Pellet]) -> None:
        self._pellets.clear()
        for pellet in pellets:
            self.add_pellet(pellet)

    def add_pellet(self, pellet: Pellet) -> None:
        self._pellets[pellet.position.key] = pellet

    def remove_pellet(self, position: Position) -> Optional[Pellet]:
        """Logically delete a consumed pellet."""
        return self._pellets.pop(position.key, None)

    def add_agent(self, agent: Ship) -> None:
        self._agents[agent.position.key] = agent

    def update_my_ship(self, position: Position, fuel: int) -> None:
        self.my_ship_position = position
        self.my_ship_fuel = fuel

    @property
    def pellet_count(self) -> int:
        return len(self._pellets)

    def pellet_stats(self) -> PelletStats:
        stats = PelletStats()
        for pellet in self._pellets.values():
            stats.total_pellets += 1
            stats.total_fuel += pellet.fuel
            stats.quadrants[quadrant_of(pellet.position)] += 1
            dist = manhattan(pellet.position, ORIGIN)
            if dist < stats.closest_to_origin:
                stats.closest_to_origin = dist
                stats.closest_pellet = pellet.position
        if stats.total_pellets:
            stats.avg_fuel_per_pellet = stats.total_fuel / stats.total_pellets
        return stats
