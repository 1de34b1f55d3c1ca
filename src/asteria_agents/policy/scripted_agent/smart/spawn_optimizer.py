"""Spawn position optimizer for the Smart agent.

Samples candidate start cells, asks the pathfinder for a route to the
origin from each, and scores the feasible ones. Selection is best effort:
only sampled cells are considered and evaluation stops early once enough
feasible candidates have been seen.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Optional

import numpy as np

from asteria_agents.policy.scripted_agent.common.geometry import ORIGIN, Position, manhattan

from .debug_logger import DebugLogger, SpawnEvaluationRecord, emit
from .pathfinder import Pathfinder
from .types import DEFAULT_GAME_CONFIG, GameConfig, Path, Pellet, SpawnCandidate
from .world_state import WorldStateView, quadrant_of

# Candidate generation
MAX_SEARCH_RADIUS = 200
GRID_SPACING = 5
RING_SPACING = 10
CHAIN_RING_ANGLES = tuple(range(0, 360, 30))
CHAIN_RING_DEPTH = 20  # Chain rings span min_dist .. min_dist + depth
CHAIN_RING_SPACING = 3
MAX_CHAIN_TARGETS = 20
MAX_CHAIN_PAIRS = 100

# Evaluation radii
NEARBY_PELLET_RADIUS = 10
PELLET_DENSITY_RADIUS = 20
COMPETITION_RADIUS = 15
FALLBACK_PELLET_RADIUS = 15

# Early termination
ENOUGH_FEASIBLE = 10
MIN_EVALUATED = 100

# Score weights
SPAWN_WEIGHTS = {
    "path_success": 1000.0,  # Having any route at all dominates
    "path_efficiency": 500.0,
    "path_safety": 300.0,  # More fuel stops = more slack
    "pellet_access": 200.0,
    "distance": -50.0,
    "competition": -100.0,
}
SAFE_FUEL_STOPS = 3
DENSE_PELLET_COUNT = 10
MAX_COMPETITORS = 3
DISTANCE_NORMALIZER = 200.0


def ring_positions(distance: int, angles_deg: Sequence[int]) -> list[Position]:
    """Cells on a circle of ``distance`` around the origin, rounded half up."""
    radians = np.deg2rad(np.asarray(angles_deg, dtype=float))
    xs = np.floor(distance * np.cos(radians) + 0.5).astype(np.int64)
    ys = np.floor(distance * np.sin(radians) + 0.5).astype(np.int64)
    return [Position(int(x), int(y)) for x, y in zip(xs, ys)]


def deduplicate_positions(positions: Iterable[Position]) -> list[Position]:
    seen: set[str] = set()
    unique: list[Position] = []
    for pos in positions:
        if pos.key not in seen:
            seen.add(pos.key)
            unique.append(pos)
    return unique


class SpawnOptimizer:
    """Chooses where to spawn so that a fuel-feasible route to the origin exists."""

    def __init__(
        self,
        world: WorldStateView,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        pathfinder: Optional[Pathfinder] = None,
        debug_logger: Optional[DebugLogger] = None,
    ) -> None:
        self._world = world
        self._config = config
        self._pathfinder = pathfinder or Pathfinder(world, config, debug_logger=debug_logger)
        self._debug_logger = debug_logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_optimal_spawn_position(self) -> Optional[SpawnCandidate]:
        """Best scored feasible candidate, or the fallback when none is feasible."""
        candidates = self.generate_spawn_candidates()
        emit(self._debug_logger, f"evaluating {len(candidates)} spawn candidates")

        feasible: list[SpawnCandidate] = []
        evaluated = 0
        for position in candidates:
            evaluated += 1
            candidate = self.evaluate_spawn_position(position)
            if candidate.guaranteed_path:
                feasible.append(candidate)

            if len(feasible) >= ENOUGH_FEASIBLE and evaluated >= MIN_EVALUATED:
                break

        emit(self._debug_logger, f"{len(feasible)} feasible spawns out of {evaluated} evaluated")

        if not feasible:
            return self._find_fallback_spawn_position(candidates)

        feasible.sort(key=lambda c: c.score, reverse=True)
        best = feasible[0]
        for rank, candidate in enumerate(feasible[:5], start=1):
            stops = len(candidate.path_to_origin.fuel_stops) if candidate.path_to_origin else 0
            emit(
                self._debug_logger,
                f"#{rank} {candidate.position} score={candidate.score:.0f} "
                f"moves={candidate.total_moves} stops={stops}",
                level=2,
            )
        if self._debug_logger is not None:
            self._debug_logger.record_spawn_selection(best.position, best.score, guaranteed=True)
        return best

    def generate_spawn_candidates(self) -> list[Position]:
        min_dist = self._config.min_spawn_distance
        max_dist = min(MAX_SEARCH_RADIUS, min_dist * 3)

        candidates: list[Position] = []
        candidates.extend(self._pellet_chain_candidates(self._world.all_pellets(), min_dist))
        candidates.extend(self._systematic_grid(min_dist, max_dist))
        candidates.extend(self._radial_candidates(min_dist, max_dist))
        return deduplicate_positions(candidates)

    def evaluate_spawn_position(self, position: Position) -> SpawnCandidate:
        path = self._pathfinder.find_path_with_refueling(position, ORIGIN, self._config.initial_fuel)
        nearby_pellets = len(self._world.pellets_within_distance(position, NEARBY_PELLET_RADIUS))
        nearby_ships = self._count_nearby_ships(position, COMPETITION_RADIUS)
        score = self.calculate_spawn_score(position, path, nearby_ships)

        if self._debug_logger is not None:
            self._debug_logger.record_spawn_evaluation(
                SpawnEvaluationRecord(
                    position=position,
                    score=score,
                    feasible=path.success,
                    fuel_stops=len(path.fuel_stops),
                    nearby_pellets=nearby_pellets,
                )
            )

        return SpawnCandidate(
            position=position,
            score=score,
            guaranteed_path=path.success,
            path_to_origin=path,
            nearby_pellets=nearby_pellets,
            total_moves=path.total_cost,
        )

    def calculate_spawn_score(self, position: Position, path: Path, nearby_ships: int) -> float:
        """Weighted score of a spawn cell. ``-inf`` when there is no route."""
        if not path.success:
            return -math.inf

        distance = manhattan(position, ORIGIN)
        efficiency = min(1.0, distance / path.total_cost) if path.total_cost > 0 else 1.0
        safety = min(1.0, len(path.fuel_stops) / SAFE_FUEL_STOPS)
        dense = len(self._world.pellets_within_distance(position, PELLET_DENSITY_RADIUS))
        pellet_access = min(1.0, dense / DENSE_PELLET_COUNT)
        crowding = min(1.0, nearby_ships / MAX_COMPETITORS)

        return (
            SPAWN_WEIGHTS["path_success"]
            + SPAWN_WEIGHTS["path_efficiency"] * efficiency
            + SPAWN_WEIGHTS["path_safety"] * safety
            + SPAWN_WEIGHTS["pellet_access"] * pellet_access
            + SPAWN_WEIGHTS["distance"] * (distance / DISTANCE_NORMALIZER)
            + SPAWN_WEIGHTS["competition"] * crowding
        )

    def calculate_pellet_density(self, pellets: Sequence[Pellet]) -> dict[str, float]:
        """Share of pellets per quadrant."""
        counts = {"q1": 0, "q2": 0, "q3": 0, "q4": 0}
        for pellet in pellets:
            counts[quadrant_of(pellet.position)] += 1
        total = len(pellets) or 1
        return {quadrant: count / total for quadrant, count in counts.items()}

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------

    def _pellet_chain_candidates(self, pellets: Sequence[Pellet], min_dist: int) -> list[Position]:
        """Ring cells that can reach a pellet whose chain reaches the origin.

        A chain is (first, second) where ``second`` holds enough fuel to reach
        the origin and ``first`` holds enough to reach ``second``.
        """
        finishers = [p for p in pellets if self._config.fuel_needed(manhattan(p.position, ORIGIN)) <= p.fuel]

        pairs: list[tuple[Pellet, Pellet]] = []
        for target in finishers[:MAX_CHAIN_TARGETS]:
            for source in pellets:
                if source is target:
                    continue
                if self._config.fuel_needed(manhattan(source.position, target.position)) <= source.fuel:
                    pairs.append((source, target))

        if not pairs:
            return []

        # Sampled cells in angle-major order, each already at least min_dist out
        distances = range(min_dist, min_dist + CHAIN_RING_DEPTH + 1, CHAIN_RING_SPACING)
        rings = [ring_positions(dist, CHAIN_RING_ANGLES) for dist in distances]
        ring_cells = [
            ring[angle_idx]
            for angle_idx in range(len(CHAIN_RING_ANGLES))
            for ring in rings
            if manhattan(ring[angle_idx], ORIGIN) >= min_dist
        ]

        candidates: list[Position] = []
        for first, _ in pairs[:MAX_CHAIN_PAIRS]:
            for pos in ring_cells:
                if self._config.fuel_needed(manhattan(pos, first.position)) <= self._config.initial_fuel:
                    candidates.append(pos)
        return candidates

    def _systematic_grid(self, min_dist: int, max_dist: int) -> list[Position]:
        candidates: list[Position] = []
        for x in range(-max_dist, max_dist + 1, GRID_SPACING):
            for y in range(-max_dist, max_dist + 1, GRID_SPACING):
                pos = Position(x, y)
                if min_dist <= manhattan(pos, ORIGIN) <= max_dist:
                    candidates.append(pos)
        return candidates

    def _radial_candidates(self, min_dist: int, max_dist: int) -> list[Position]:
        candidates: list[Position] = []
        for dist in range(min_dist, max_dist + 1, RING_SPACING):
            # Denser sampling on the inner rings
            angle_step = 15 if dist <= min_dist + CHAIN_RING_DEPTH else 30
            for pos in ring_positions(dist, range(0, 360, angle_step)):
                if manhattan(pos, ORIGIN) >= min_dist:
                    candidates.append(pos)
        return candidates

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_fallback_spawn_position(self, candidates: Sequence[Position]) -> Optional[SpawnCandidate]:
        """Most pellets nearby, no route guarantee."""
        best: Optional[SpawnCandidate] = None
        for position in candidates:
            nearby = len(self._world.pellets_within_distance(position, FALLBACK_PELLET_RADIUS))
            if best is None or nearby > best.nearby_pellets:
                best = SpawnCandidate(
                    position=position,
                    score=float(nearby),
                    guaranteed_path=False,
                    path_to_origin=None,
                    nearby_pellets=nearby,
                    total_moves=manhattan(position, ORIGIN),
                )

        if best is None:
            emit(self._debug_logger, "no spawn candidates at all")
        elif self._debug_logger is not None:
            self._debug_logger.warn(f"no guaranteed route; falling back to {best.position}")
            self._debug_logger.record_spawn_selection(best.position, best.score, guaranteed=False)
        return best

    def _count_nearby_ships(self, position: Position, radius: int) -> int:
        return sum(1 for ship in self._world.all_agents() if manhattan(position, ship.position) <= radius)
