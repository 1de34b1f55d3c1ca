"""
Offline navigation loop for the Smart agent.

Plays the role of the orchestration layer against an in-memory snapshot:
spawn, then each step either gather the pellet under the ship or take the
move the planner picks. Consumed pellets are removed from the snapshot
the way the ledger would remove them after a real gather.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from asteria_agents.policy.scripted_agent.common.geometry import ORIGIN, Position, manhattan

from .debug_logger import DebugLogger, emit
from .fuel_manager import FuelManager
from .pathfinder import Pathfinder
from .spawn_optimizer import SpawnOptimizer
from .types import DEFAULT_GAME_CONFIG, ActionKind, GameConfig, NextAction, ShipState, SpawnCandidate
from .world_state import InMemoryWorldState, WorldStateView

DEFAULT_MAX_STEPS = 200


def decide_next_action(
    ship: ShipState,
    pathfinder: Pathfinder,
    fuel_manager: FuelManager,
    world: WorldStateView,
) -> NextAction:
    """Combine the refuel policy and the route to pick one action."""
    if fuel_manager.is_empty(ship.fuel):
        if world.pellet_at(ship.position) is not None:
            return NextAction(ActionKind.GATHER)
        return NextAction(ActionKind.STUCK)

    if fuel_manager.needs_refueling(ship.fuel, ship.position):
        target = fuel_manager.find_best_refuel_target(ship.position, ship.fuel)
        if target is not None and target.position != ship.position:
            dx, dy = pathfinder.calculate_next_move(ship.position, target.position)
            return NextAction(ActionKind.MOVE, dx, dy)

    path = pathfinder.find_path(ship.position, ORIGIN, ship.fuel, consider_pellets=True)
    step = path.next_step()
    if step is not None:
        return NextAction(ActionKind.MOVE, *step)

    # No full route: head for the origin and hope for pellets
    dx, dy = pathfinder.calculate_next_move(ship.position, ORIGIN)
    return NextAction(ActionKind.MOVE, dx, dy)


@dataclass
class MoveRecord:
    position: Position
    fuel: int
    action: str


@dataclass
class SimulationResult:
    success: bool
    start_position: Position
    final_position: Position
    final_fuel: int
    total_moves: int
    fuel_gathered: int
    unique_positions: int
    steps: int
    history: list[MoveRecord] = field(default_factory=list)
    spawn: Optional[SpawnCandidate] = None

    @property
    def distance_to_origin(self) -> int:
        return manhattan(self.final_position, ORIGIN)

    @property
    def efficiency(self) -> float:
        """Direct distance over moves actually made."""
        if self.total_moves == 0:
            return 1.0 if self.success else 0.0
        return manhattan(self.start_position, ORIGIN) / self.total_moves


class NavigationSimulator:
    """Runs the Smart planner against an :class:`InMemoryWorldState`."""

    def __init__(
        self,
        world: InMemoryWorldState,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        debug_logger: Optional[DebugLogger] = None,
    ) -> None:
        self.world = world
        self.config = config
        self._debug_logger = debug_logger
        self.pathfinder = Pathfinder(world, config, debug_logger=debug_logger)
        self.fuel_manager = FuelManager(world, config, debug_logger=debug_logger)
        self.spawn_optimizer = SpawnOptimizer(world, config, pathfinder=self.pathfinder, debug_logger=debug_logger)

        self.ship: Optional[ShipState] = None
        self.spawn_candidate: Optional[SpawnCandidate] = None
        self._start: Optional[Position] = None
        self._total_moves = 0
        self._fuel_gathered = 0
        self._steps = 0
        self._visited: set[str] = set()
        self._history: list[MoveRecord] = []

    def spawn(self, position: Optional[Position] = None) -> Optional[ShipState]:
        """Place the ship, asking the optimizer when no position is given."""
        if position is None:
            self.spawn_candidate = self.spawn_optimizer.find_optimal_spawn_position()
            if self.spawn_candidate is None:
                return None
            position = self.spawn_candidate.position

        self.ship = ShipState(position=position, fuel=self.config.initial_fuel, max_fuel=self.config.max_ship_fuel)
        self._start = position
        self._total_moves = 0
        self._fuel_gathered = 0
        self._steps = 0
        self._visited = {position.key}
        self._history = []
        self.world.update_my_ship(position, self.ship.fuel)
        self.fuel_manager.update_strategy(self.world.pellet_count)
        self._record("START")
        return self.ship

    def step(self) -> NextAction:
        """Advance one action. Raises ``FuelInvariantError`` on a move without fuel."""
        ship = self._require_ship()
        self._steps += 1

        pellet = self.world.pellet_at(ship.position)
        if pellet is not None:
            gained = ship.refuel(pellet.fuel)
            self._fuel_gathered += gained
            self.world.remove_pellet(ship.position)
            self.fuel_manager.update_strategy(self.world.pellet_count)
            self.world.update_my_ship(ship.position, ship.fuel)
            self._record(f"GATHER +{gained} fuel")
            return NextAction(ActionKind.GATHER)

        action = decide_next_action(ship, self.pathfinder, self.fuel_manager, self.world)
        if action.kind is ActionKind.MOVE:
            ship.consume_step(action.dx, action.dy, self.config.fuel_per_step)
            self._total_moves += 1
            self._visited.add(ship.position.key)
            self.world.update_my_ship(ship.position, ship.fuel)
            self._record(f"MOVE ({action.dx}, {action.dy})")
        elif action.kind is ActionKind.STUCK:
            self._record("STUCK")
        return action

    def run(self, max_steps: int = DEFAULT_MAX_STEPS) -> SimulationResult:
        ship = self._require_ship()
        while self._steps < max_steps and ship.position != ORIGIN:
            action = self.step()
            if action.kind is ActionKind.STUCK:
                emit(self._debug_logger, f"stuck at {ship.position} with {ship.fuel} fuel")
                break
        if self._steps >= max_steps and ship.position != ORIGIN:
            emit(self._debug_logger, f"stopped at step limit ({max_steps})")
        return self.result()

    def result(self) -> SimulationResult:
        ship = self._require_ship()
        return SimulationResult(
            success=ship.position == ORIGIN,
            start_position=self._start if self._start is not None else ship.position,
            final_position=ship.position,
            final_fuel=ship.fuel,
            total_moves=self._total_moves,
            fuel_gathered=self._fuel_gathered,
            unique_positions=len(self._visited),
            steps=self._steps,
            history=list(self._history),
            spawn=self.spawn_candidate,
        )

    def _require_ship(self) -> ShipState:
        if self.ship is None:
            raise RuntimeError("spawn() must be called before stepping the simulation")
        return self.ship

    def _record(self, action: str) -> None:
        ship = self._require_ship()
        self._history.append(MoveRecord(position=ship.position, fuel=ship.fuel, action=action))
