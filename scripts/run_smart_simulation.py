#!/usr/bin/env python3
"""run_smart_simulation.py: Run the Smart planner offline against a pellet layout.

Usage:
    python scripts/run_smart_simulation.py [--layout NAME] [--spawn X,Y] [--max-steps N]
                                           [--debug {0,1,2}] [--format {table,json}]

Without --spawn the spawn optimizer picks the start cell. Debug output goes to
stderr so --format json stays machine readable.
"""

from __future__ import annotations

import argparse
import json
import sys

from asteria_agents.evals.smart_evals import LAYOUTS, make_world
from asteria_agents.policy.scripted_agent.common.geometry import Position
from asteria_agents.policy.scripted_agent.smart import DebugLogger, GameConfig, NavigationSimulator, SimulationResult


def parse_spawn(value: str) -> Position:
    try:
        return Position.from_key(value.replace(" ", ""))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {value!r}") from exc


def result_to_dict(result: SimulationResult) -> dict:
    return {
        "success": result.success,
        "start": result.start_position.key,
        "final_position": result.final_position.key,
        "final_fuel": result.final_fuel,
        "distance_to_origin": result.distance_to_origin,
        "total_moves": result.total_moves,
        "fuel_gathered": result.fuel_gathered,
        "unique_positions": result.unique_positions,
        "steps": result.steps,
        "efficiency": round(result.efficiency, 4),
        "guaranteed_spawn": result.spawn.guaranteed_path if result.spawn else None,
    }


def print_table(result: SimulationResult) -> None:
    """Print a human-readable summary followed by the move history."""
    rows = result_to_dict(result)
    width = max(len(k) for k in rows)
    sep = "-" * (width + 20)

    print(sep)
    for key, value in rows.items():
        print(f"{key.ljust(width)}  {'-' if value is None else value}")
    print(sep)
    for i, move in enumerate(result.history):
        print(f"{i:4d}  {str(move.position):>12}  fuel={move.fuel}  {move.action}")
    print(sep)


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate Smart agent navigation to the origin.")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), default="strategic", help="Pellet layout")
    parser.add_argument("--spawn", type=parse_spawn, default=None, help="Start cell as X,Y (default: optimize)")
    parser.add_argument("--max-steps", type=int, default=200, help="Step limit (default: 200)")
    parser.add_argument("--min-spawn-distance", type=int, default=50, help="Minimum spawn distance (default: 50)")
    parser.add_argument("--debug", type=int, choices=[0, 1, 2], default=0, help="Debug verbosity (default: 0)")
    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    args = parser.parse_args()

    config = GameConfig(min_spawn_distance=args.min_spawn_distance)
    logger = DebugLogger(level=args.debug, output=sys.stderr)
    world = make_world(args.layout)
    stats = world.pellet_stats()
    logger.info(f"layout={args.layout} pellets={stats.total_pellets} fuel={stats.total_fuel}")

    sim = NavigationSimulator(world, config, debug_logger=logger)
    if sim.spawn(args.spawn) is None:
        print("Error: no spawn candidates", file=sys.stderr)
        sys.exit(1)

    result = sim.run(max_steps=args.max_steps)
    logger.emit_summary()

    if args.format == "table":
        print_table(result)
    else:
        print(json.dumps(result_to_dict(result), indent=2))

    sys.exit(0 if result.success else 2)


if __name__ == "__main__":
    main()
