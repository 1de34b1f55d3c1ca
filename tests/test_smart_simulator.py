"""
Tests for the offline navigation loop.

Tests verify:
- Direct runs, refuel stops and getting stuck
- Action selection at an empty tank
- Spawning through the optimizer
- The evaluation layouts
"""

from __future__ import annotations

import pytest

from asteria_agents.evals.smart_evals import LAYOUTS, STRATEGIC_LAYOUT
from asteria_agents.evals.smart_evals import make_world as make_eval_world
from asteria_agents.policy.scripted_agent.common.geometry import ORIGIN, Position
from asteria_agents.policy.scripted_agent.smart.fuel_manager import FuelManager
from asteria_agents.policy.scripted_agent.smart.pathfinder import Pathfinder
from asteria_agents.policy.scripted_agent.smart.simulator import NavigationSimulator, decide_next_action
from asteria_agents.policy.scripted_agent.smart.types import ActionKind, GameConfig, ShipState


class TestDecideNextAction:
    def _decide(self, world, position: Position, fuel: int):
        ship = ShipState(position=position, fuel=fuel, max_fuel=5)
        return decide_next_action(ship, Pathfinder(world), FuelManager(world), world)

    def test_gather_on_empty_tank(self, world_factory) -> None:
        world = world_factory([(7, 0, 3)])
        assert self._decide(world, Position(7, 0), 0).kind is ActionKind.GATHER

    def test_stuck_on_empty_tank(self, world_factory) -> None:
        world = world_factory([(6, 0, 3)])
        assert self._decide(world, Position(7, 0), 0).kind is ActionKind.STUCK

    def test_follows_route(self, empty_world) -> None:
        action = self._decide(empty_world, Position(0, -3), 5)
        assert action.kind is ActionKind.MOVE
        assert (action.dx, action.dy) == (0, 1)

    def test_partial_tank_below_step_cost_is_empty(self, world_factory) -> None:
        config = GameConfig(fuel_per_step=2, max_ship_fuel=5, initial_fuel=5)
        world = world_factory([(1, 0, 3)])
        ship = ShipState(position=Position(2, 0), fuel=1, max_fuel=5)
        action = decide_next_action(ship, Pathfinder(world, config), FuelManager(world, config), world)
        assert action.kind is ActionKind.STUCK

        ship = ShipState(position=Position(1, 0), fuel=1, max_fuel=5)
        action = decide_next_action(ship, Pathfinder(world, config), FuelManager(world, config), world)
        assert action.kind is ActionKind.GATHER

    def test_heads_for_refuel_target(self, world_factory) -> None:
        world = world_factory([(5, 4, 5)])
        action = self._decide(world, Position(5, 5), 1)
        assert (action.dx, action.dy) == (0, -1)


class TestNavigationSimulator:
    def test_step_before_spawn_raises(self, empty_world) -> None:
        with pytest.raises(RuntimeError):
            NavigationSimulator(empty_world).step()

    def test_direct_run(self, empty_world) -> None:
        sim = NavigationSimulator(empty_world)
        sim.spawn(Position(5, 0))
        result = sim.run()
        assert result.success
        assert result.total_moves == 5
        assert result.final_fuel == 0
        assert result.fuel_gathered == 0
        assert result.efficiency == 1.0
        assert result.history[0].action == "START"

    def test_run_with_refuel(self, world_factory) -> None:
        world = world_factory([(4, 0, 5)])
        sim = NavigationSimulator(world)
        sim.spawn(Position(8, 0))
        result = sim.run()
        assert result.success
        assert result.total_moves == 8
        assert result.fuel_gathered == 4
        assert result.final_fuel == 1
        assert result.unique_positions == 9
        assert world.pellet_at(Position(4, 0)) is None
        assert any(move.action.startswith("GATHER") for move in result.history)

    def test_stuck_run(self, empty_world, debug_logger, log_buffer) -> None:
        sim = NavigationSimulator(empty_world, debug_logger=debug_logger)
        sim.spawn(Position(10, 0))
        result = sim.run()
        assert not result.success
        assert result.final_position == Position(5, 0)
        assert result.final_fuel == 0
        assert result.distance_to_origin == 5
        assert result.history[-1].action == "STUCK"
        assert "stuck at (5, 0)" in log_buffer.getvalue()

    def test_step_limit(self, empty_world) -> None:
        sim = NavigationSimulator(empty_world)
        sim.spawn(Position(5, 0))
        result = sim.run(max_steps=2)
        assert not result.success
        assert result.steps == 2
        assert result.final_position == Position(3, 0)

    def test_world_tracks_ship(self, empty_world) -> None:
        sim = NavigationSimulator(empty_world)
        sim.spawn(Position(0, 2))
        sim.step()
        assert empty_world.my_ship_position == Position(0, 1)
        assert empty_world.my_ship_fuel == 4

    def test_spawn_through_optimizer(self, world_factory, small_config) -> None:
        world = world_factory([(4, 0, 5), (9, 0, 5)])
        sim = NavigationSimulator(world, small_config)
        ship = sim.spawn()
        assert ship is not None
        assert sim.spawn_candidate is not None
        assert sim.spawn_candidate.guaranteed_path
        assert ship.position == sim.spawn_candidate.position
        assert sim.result().spawn is sim.spawn_candidate

    def test_stops_when_fuel_cannot_pay_for_a_step(self, empty_world) -> None:
        config = GameConfig(fuel_per_step=2, max_ship_fuel=5, initial_fuel=5)
        sim = NavigationSimulator(empty_world, config)
        sim.spawn(Position(3, 0))
        result = sim.run()
        assert not result.success
        assert result.final_position == Position(1, 0)
        assert result.final_fuel == 1
        assert result.history[-1].action == "STUCK"

    def test_run_with_costly_steps(self, empty_world) -> None:
        config = GameConfig(fuel_per_step=2, max_ship_fuel=5, initial_fuel=5)
        sim = NavigationSimulator(empty_world, config)
        sim.spawn(Position(2, 0))
        result = sim.run()
        assert result.success
        assert result.final_fuel == 1


class TestEvalLayouts:
    def test_layout_names(self) -> None:
        assert {"strategic", "corridor", "empty"} <= set(LAYOUTS)

    def test_unknown_layout(self) -> None:
        with pytest.raises(ValueError):
            make_eval_world("nowhere")

    def test_strategic_layout(self) -> None:
        world = make_eval_world("strategic", agents=[(50, 0)])
        stats = world.pellet_stats()
        assert stats.total_pellets == len(STRATEGIC_LAYOUT)
        assert stats.closest_pellet == Position(-1, -2)
        assert len(world.all_agents()) == 1

    def test_corridor_run(self) -> None:
        world = make_eval_world("corridor")
        sim = NavigationSimulator(world)
        sim.spawn(Position(50, 0))
        result = sim.run()
        assert result.success
        assert result.final_position == ORIGIN
        assert result.total_moves == 50
        assert result.fuel_gathered == 45
        assert world.pellet_count == 0
