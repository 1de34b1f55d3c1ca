"""
Smart policy - fuel-aware navigation to the origin.

Planner components:
- Pathfinder: A* with fuel tracking and pellet refuels
- FuelManager: when and where to refuel
- SpawnOptimizer: where to start so that a route exists
- NavigationSimulator: offline step loop over an in-memory snapshot
"""

from .debug_logger import DebugLogger
from .fuel_manager import FuelManager
from .pathfinder import Pathfinder
from .simulator import NavigationSimulator, SimulationResult, decide_next_action
from .spawn_optimizer import SpawnOptimizer
from .types import (
    DEFAULT_GAME_CONFIG,
    FuelInvariantError,
    FuelLevel,
    FuelStatus,
    GameConfig,
    Path,
    Pellet,
    Ship,
    ShipState,
    SpawnCandidate,
)
from .world_state import InMemoryWorldState, WorldStateView

__all__ = [
    "DEFAULT_GAME_CONFIG",
    "DebugLogger",
    "FuelInvariantError",
    "FuelLevel",
    "FuelManager",
    "FuelStatus",
    "GameConfig",
    "InMemoryWorldState",
    "NavigationSimulator",
    "Path",
    "Pathfinder",
    "Pellet",
    "Ship",
    "ShipState",
    "SimulationResult",
    "SpawnCandidate",
    "SpawnOptimizer",
    "WorldStateView",
    "decide_next_action",
]
