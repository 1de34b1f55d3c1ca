"""Fuel-aware A* pathfinder for the Smart agent.

Searches the open grid toward a goal while tracking fuel along every
branch. A branch is pruned once it cannot cover the remaining distance,
unless a single reachable pellet would let it finish (one-hop lookahead).
The lookahead is an approximation: it can admit branches a full search
would reject and miss chains of several pellets.
"""

from __future__ import annotations

import heapq
from typing import Optional

from asteria_agents.policy.scripted_agent.common.geometry import (
    MOVE_DELTAS,
    Position,
    direction_toward_origin,
    is_diagonal,
    manhattan,
    step_toward,
)

from .debug_logger import DebugLogger, SearchRecord
from .types import DEFAULT_GAME_CONFIG, MAX_SEARCH_ITERATIONS, GameConfig, Path, SearchNode
from .world_state import WorldStateView


class Pathfinder:
    """A* with fuel bookkeeping over a :class:`WorldStateView` snapshot."""

    def __init__(
        self,
        world: WorldStateView,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        debug_logger: Optional[DebugLogger] = None,
        max_iterations: int = MAX_SEARCH_ITERATIONS,
    ) -> None:
        self._world = world
        self._config = config
        self._debug_logger = debug_logger
        self._max_iterations = max_iterations

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_path(
        self,
        start: Position,
        goal: Position,
        initial_fuel: int,
        consider_pellets: bool = True,
    ) -> Path:
        """A* from ``start`` to ``goal`` that never lets fuel drop below zero.

        The returned cost is minimal only among the branches the fuel filter
        keeps. Failure is returned as ``Path.failed()``.
        """
        h0 = manhattan(start, goal)
        start_node = SearchNode(position=start, g=0, h=h0, f=h0, fuel=initial_fuel)

        tie = 0
        open_set: list[tuple[int, int, str]] = [(start_node.f, tie, start.key)]
        open_nodes: dict[str, tuple[int, SearchNode]] = {start.key: (tie, start_node)}
        closed: set[str] = set()
        iterations = 0

        while open_set and iterations < self._max_iterations:
            _, entry_tie, key = heapq.heappop(open_set)
            entry = open_nodes.get(key)
            if entry is None or entry[0] != entry_tie:
                continue  # Superseded by a cheaper entry
            iterations += 1
            current = entry[1]

            if current.position == goal:
                path = self._reconstruct(current, consider_pellets)
                self._record(start, goal, initial_fuel, True, iterations, path.total_cost)
                return path

            del open_nodes[key]
            closed.add(key)

            for neighbor in self._neighbors(current.position):
                neighbor_key = neighbor.key
                if neighbor_key in closed:
                    continue

                fuel = current.fuel - self._config.fuel_per_step
                if fuel < 0:
                    continue

                if consider_pellets:
                    pellet = self._world.pellet_at(neighbor)
                    if pellet is not None:
                        fuel = self._config.clamp_fuel(fuel + pellet.fuel)

                distance_to_goal = manhattan(neighbor, goal)
                if fuel < self._config.fuel_needed(distance_to_goal) and not self.has_pellet_on_path(
                    neighbor, goal, fuel
                ):
                    continue

                tentative_g = current.g + 1
                existing = open_nodes.get(neighbor_key)
                if existing is not None and tentative_g >= existing[1].g:
                    continue

                node = SearchNode(
                    position=neighbor,
                    g=tentative_g,
                    h=distance_to_goal,
                    f=tentative_g + distance_to_goal,
                    fuel=fuel,
                    parent=current,
                )
                tie += 1
                open_nodes[neighbor_key] = (tie, node)
                heapq.heappush(open_set, (node.f, tie, neighbor_key))

        exhausted = iterations >= self._max_iterations and bool(open_nodes)
        self._record(start, goal, initial_fuel, False, iterations, Path.failed().total_cost, exhausted)
        return Path.failed()

    def find_path_with_refueling(self, start: Position, goal: Position, initial_fuel: int) -> Path:
        """Direct search first, then the cheapest start -> pellet -> goal route.

        Only two legs are considered. Longer pellet chains are left to the
        per-leg search and its lookahead.
        """
        direct = self.find_path(start, goal, initial_fuel, consider_pellets=True)
        if direct.success:
            return direct

        reachable = [
            p
            for p in self._world.all_pellets()
            if self._config.fuel_needed(manhattan(start, p.position)) <= initial_fuel
        ]
        if not reachable:
            return direct

        best = direct
        for pellet in reachable:
            to_pellet = self.find_path(start, pellet.position, initial_fuel, consider_pellets=False)
            if not to_pellet.success:
                continue

            spent = self._config.fuel_needed(int(to_pellet.total_cost))
            fuel_at_pellet = self._config.clamp_fuel(initial_fuel - spent + pellet.fuel)

            from_pellet = self.find_path(pellet.position, goal, fuel_at_pellet, consider_pellets=True)
            if not from_pellet.success:
                continue

            total_cost = to_pellet.total_cost + from_pellet.total_cost
            if total_cost < best.total_cost:
                best = Path(
                    nodes=to_pellet.nodes[:-1] + from_pellet.nodes,
                    total_cost=total_cost,
                    fuel_stops=[pellet.position, *from_pellet.fuel_stops],
                    success=True,
                )

        return best

    def simulate_path(self, nodes: list[Position], initial_fuel: int) -> bool:
        """Replay a route step by step. False as soon as fuel would go negative."""
        fuel = initial_fuel
        for position in nodes[1:]:
            fuel -= self._config.fuel_per_step
            if fuel < 0:
                return False
            pellet = self._world.pellet_at(position)
            if pellet is not None:
                fuel = self._config.clamp_fuel(fuel + pellet.fuel)
        return True

    def has_pellet_on_path(self, start: Position, goal: Position, fuel: int) -> bool:
        """True if some pellet within reach refuels us enough to finish."""
        for pellet in self._world.all_pellets():
            to_pellet = self._config.fuel_needed(manhattan(start, pellet.position))
            if to_pellet > fuel:
                continue
            after_move = fuel - to_pellet
            refuel = min(pellet.fuel, self._config.max_ship_fuel - after_move)
            if after_move + refuel >= self._config.fuel_needed(manhattan(pellet.position, goal)):
                return True
        return False

    def calculate_next_move(self, current: Position, target: Position) -> tuple[int, int]:
        """Greedy one-step fallback toward ``target``."""
        return step_toward(current, target)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _neighbors(self, pos: Position) -> list[Position]:
        # Diagonals are only allowed straight toward the origin, whatever the goal.
        toward_x, toward_y = direction_toward_origin(pos)
        neighbors: list[Position] = []
        for dx, dy in MOVE_DELTAS.values():
            if is_diagonal(dx, dy) and (dx, dy) != (toward_x, toward_y):
                continue
            neighbors.append(pos.offset(dx, dy))
        return neighbors

    def _reconstruct(self, node: SearchNode, consider_pellets: bool = True) -> Path:
        nodes: list[Position] = []
        fuel_stops: list[Position] = []
        current: Optional[SearchNode] = node
        while current is not None:
            nodes.append(current.position)
            # The start cell never counts as a stop, nor does any cell when pellets were ignored
            is_step = current.parent is not None
            if consider_pellets and is_step and self._world.pellet_at(current.position) is not None:
                fuel_stops.append(current.position)
            current = current.parent
        nodes.reverse()
        fuel_stops.reverse()
        return Path(nodes=nodes, total_cost=len(nodes) - 1, fuel_stops=fuel_stops, success=True)

    def _record(
        self,
        start: Position,
        goal: Position,
        initial_fuel: int,
        success: bool,
        iterations: int,
        cost: float,
        exhausted: bool = False,
    ) -> None:
        if self._debug_logger is None:
            return
        self._debug_logger.record_search(
            SearchRecord(
                start=start,
                goal=goal,
                initial_fuel=initial_fuel,
                success=success,
                iterations=iterations,
                cost=cost,
                exhausted=exhausted,
            )
        )
