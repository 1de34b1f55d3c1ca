"""
FuelManager service for the Smart policy.

Decides when and where to refuel, and summarizes fuel state.
"""

from __future__ import annotations

from typing import Optional

from asteria_agents.policy.scripted_agent.common.geometry import ORIGIN, Position, manhattan

from .debug_logger import DebugLogger, emit
from .types import (
    CONSERVATIVE_REFUEL_BELOW,
    DEFAULT_GAME_CONFIG,
    NORMAL_REFUEL_BELOW,
    SCARCITY_THRESHOLD,
    FuelLevel,
    FuelStatus,
    GameConfig,
    Pellet,
)
from .world_state import WorldStateView


class FuelManager:
    """Refueling policy over a world snapshot.

    ``conservative_mode`` is the only mutable state. It belongs to this
    instance; do not share one FuelManager across concurrent evaluations.
    """

    # Refuel target scoring
    PROGRESS_WEIGHT = 2.0
    FUEL_GAIN_WEIGHT = 1.5
    PROXIMITY_WEIGHT = 1.0
    REACHES_ORIGIN_BONUS = 100.0

    def __init__(
        self,
        world: WorldStateView,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        debug_logger: Optional[DebugLogger] = None,
    ) -> None:
        self._world = world
        self._config = config
        self._debug_logger = debug_logger
        self.conservative_mode = False

    def update_strategy(self, pellet_count: int) -> None:
        """Switch to conservative mode when pellets are scarce."""
        was_conservative = self.conservative_mode
        self.conservative_mode = pellet_count < SCARCITY_THRESHOLD
        if self.conservative_mode and not was_conservative:
            emit(self._debug_logger, f"conservative fuel mode on ({pellet_count} pellets available)")
        elif was_conservative and not self.conservative_mode:
            emit(self._debug_logger, f"conservative fuel mode off ({pellet_count} pellets available)")

    def is_empty(self, fuel: int) -> bool:
        """True when the tank cannot pay for a single step."""
        return fuel < self._config.fuel_per_step

    def needs_refueling(self, fuel: int, position: Position) -> bool:
        reachable = self.get_reachable_pellets(position, fuel)

        # Empty tank: refuel if there is anything to refuel from (only our own cell)
        if self.is_empty(fuel):
            return bool(reachable)

        if fuel >= self.calculate_fuel_needed(position, ORIGIN):
            return False

        # Nothing in range, refueling is not an option
        if not reachable:
            return False

        threshold = CONSERVATIVE_REFUEL_BELOW if self.conservative_mode else NORMAL_REFUEL_BELOW
        return fuel < threshold

    def find_best_refuel_target(self, position: Position, fuel: int) -> Optional[Pellet]:
        """Pick the reachable pellet with the best progress / fuel / distance trade-off."""
        reachable = self.get_reachable_pellets(position, fuel)
        if not reachable:
            return None

        distance_now = manhattan(position, ORIGIN)
        best: Optional[Pellet] = None
        best_score = float("-inf")
        for pellet in reachable:
            distance_to_pellet = manhattan(position, pellet.position)
            distance_after = manhattan(pellet.position, ORIGIN)
            fuel_after_refuel = self._config.clamp_fuel(
                fuel - self._config.fuel_needed(distance_to_pellet) + pellet.fuel
            )

            score = (
                self.PROGRESS_WEIGHT * (distance_now - distance_after)
                + self.FUEL_GAIN_WEIGHT * pellet.fuel
                - self.PROXIMITY_WEIGHT * distance_to_pellet
            )
            if fuel_after_refuel >= self._config.fuel_needed(distance_after):
                score += self.REACHES_ORIGIN_BONUS

            if score > best_score:
                best, best_score = pellet, score
        return best

    def get_reachable_pellets(self, position: Position, fuel: int) -> list[Pellet]:
        max_steps = fuel // self._config.fuel_per_step
        return self._world.pellets_within_distance(position, max_steps)

    def has_pellet_at_position(self, position: Position) -> bool:
        return self._world.pellet_at(position) is not None

    def calculate_fuel_needed(self, start: Position, target: Position) -> int:
        return self._config.fuel_needed(manhattan(start, target))

    def plan_fuel_stops(self, nodes: list[Position], initial_fuel: int) -> list[Position]:
        """Positions along ``nodes`` where a pellet actually tops up the tank."""
        stops: list[Position] = []
        fuel = initial_fuel
        for position in nodes[1:]:
            fuel -= self._config.fuel_per_step
            if fuel < 0:
                if self._debug_logger is not None:
                    self._debug_logger.warn(f"fuel shortage at {position} while planning stops")
                break

            pellet = self._world.pellet_at(position)
            if pellet is None:
                continue
            fuel_before = fuel
            fuel = self._config.clamp_fuel(fuel + pellet.fuel)
            if fuel_before < self._config.max_ship_fuel:
                stops.append(position)
                emit(self._debug_logger, f"fuel stop at {position}: {fuel_before} -> {fuel}", level=2)
        return stops

    def can_reach_origin(self, position: Position, fuel: int) -> bool:
        """Direct reach, or a reachable pellet that gets us strictly closer."""
        distance = manhattan(position, ORIGIN)
        if fuel >= self._config.fuel_needed(distance):
            return True
        for pellet in self._world.all_pellets():
            reachable = self.calculate_fuel_needed(position, pellet.position) <= fuel
            if reachable and manhattan(pellet.position, ORIGIN) < distance:
                return True
        return False

    def get_fuel_status(self, fuel: int, position: Position) -> FuelStatus:
        needed = self.calculate_fuel_needed(position, ORIGIN)
        reachable = self.get_reachable_pellets(position, fuel)

        if self.is_empty(fuel) and not reachable:
            return FuelStatus(FuelLevel.CRITICAL, "CRITICAL: out of fuel with no pellets in range")
        if fuel >= needed:
            return FuelStatus(FuelLevel.SUFFICIENT, f"Sufficient fuel ({fuel}/{needed} needed)")
        if reachable:
            return FuelStatus(
                FuelLevel.LOW_WITH_OPTIONS,
                f"Low fuel ({fuel}), but {len(reachable)} pellets reachable",
            )
        return FuelStatus(FuelLevel.LOW_NO_OPTIONS, f"Low fuel ({fuel}/{needed} needed)")
