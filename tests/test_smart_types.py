"""Tests for Smart agent geometry, configuration and value types."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from asteria_agents.policy.scripted_agent.common.geometry import (
    MOVE_DELTAS,
    ORIGIN,
    Position,
    direction_toward_origin,
    is_diagonal,
    manhattan,
    step_toward,
)
from asteria_agents.policy.scripted_agent.smart.types import (
    FuelInvariantError,
    GameConfig,
    Path,
    ShipState,
)


class TestPosition:
    def test_key_roundtrip(self) -> None:
        pos = Position(-12, 7)
        assert pos.key == "-12,7"
        assert Position.from_key(pos.key) == pos

    def test_from_key_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            Position.from_key("1,2,3")
        with pytest.raises(ValueError):
            Position.from_key("a,b")

    def test_large_coordinates_are_exact(self) -> None:
        big = 2**70
        assert Position(big, -big).offset(1, 1) == Position(big + 1, -big + 1)
        assert manhattan(Position(big, 0), ORIGIN) == big

    def test_hashable_and_equal_by_value(self) -> None:
        assert {Position(1, 2), Position(1, 2)} == {Position(1, 2)}

    def test_str(self) -> None:
        assert str(Position(3, -4)) == "(3, -4)"


class TestManhattan:
    POINTS = [Position(0, 0), Position(3, -4), Position(-7, 2), Position(10, 10)]

    def test_symmetric_and_non_negative(self) -> None:
        for a in self.POINTS:
            for b in self.POINTS:
                assert manhattan(a, b) == manhattan(b, a)
                assert manhattan(a, b) >= 0
            assert manhattan(a, a) == 0

    def test_triangle_inequality(self) -> None:
        for a in self.POINTS:
            for b in self.POINTS:
                for c in self.POINTS:
                    assert manhattan(a, c) <= manhattan(a, b) + manhattan(b, c)


class TestMoves:
    def test_move_order(self) -> None:
        assert list(MOVE_DELTAS.values()) == [
            (1, 0),
            (-1, 0),
            (0, 1),
            (0, -1),
            (1, 1),
            (-1, 1),
            (1, -1),
            (-1, -1),
        ]

    def test_direction_toward_origin(self) -> None:
        assert direction_toward_origin(Position(5, -3)) == (-1, 1)
        assert direction_toward_origin(Position(0, 9)) == (0, -1)
        assert direction_toward_origin(ORIGIN) == (0, 0)

    def test_is_diagonal(self) -> None:
        assert is_diagonal(1, -1)
        assert not is_diagonal(0, 1)

    def test_step_toward(self) -> None:
        assert step_toward(Position(5, 5), ORIGIN) == (-1, -1)
        assert step_toward(Position(0, -9), Position(0, 3)) == (0, 1)
        assert step_toward(ORIGIN, ORIGIN) == (0, 0)


class TestGameConfig:
    def test_defaults(self) -> None:
        config = GameConfig()
        assert config.max_ship_fuel == 5
        assert config.fuel_per_step == 1
        assert config.initial_fuel == 5
        assert config.min_spawn_distance == 50

    def test_negative_max_fuel_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameConfig(max_ship_fuel=-1, initial_fuel=0)

    def test_initial_fuel_above_tank_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameConfig(max_ship_fuel=5, initial_fuel=6)

    def test_zero_fuel_per_step_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameConfig(fuel_per_step=0)

    def test_frozen(self) -> None:
        config = GameConfig()
        with pytest.raises(ValidationError):
            config.max_ship_fuel = 10

    def test_fuel_helpers(self) -> None:
        config = GameConfig(fuel_per_step=2, max_ship_fuel=8, initial_fuel=8)
        assert config.fuel_needed(3) == 6
        assert config.clamp_fuel(11) == 8
        assert config.clamp_fuel(4) == 4


class TestShipState:
    def test_consume_step_moves_and_spends(self) -> None:
        ship = ShipState(position=Position(2, 2), fuel=3, max_fuel=5)
        ship.consume_step(-1, -1)
        assert ship.position == Position(1, 1)
        assert ship.fuel == 2

    def test_consume_step_without_fuel_raises(self) -> None:
        ship = ShipState(position=Position(2, 2), fuel=0, max_fuel=5)
        with pytest.raises(FuelInvariantError):
            ship.consume_step(-1, 0)
        assert ship.position == Position(2, 2)
        assert ship.fuel == 0

    def test_refuel_clamps_and_reports_gain(self) -> None:
        ship = ShipState(position=ORIGIN, fuel=4, max_fuel=5)
        assert ship.refuel(3) == 1
        assert ship.fuel == 5


class TestPath:
    def test_failed_path(self) -> None:
        path = Path.failed()
        assert not path.success
        assert path.nodes == []
        assert path.total_cost == math.inf
        assert path.next_step() is None

    def test_next_step(self) -> None:
        path = Path(nodes=[Position(3, 3), Position(2, 2), ORIGIN], total_cost=2, success=True)
        assert path.next_step() == (-1, -1)

    def test_single_node_has_no_next_step(self) -> None:
        assert Path(nodes=[ORIGIN], total_cost=0, success=True).next_step() is None
