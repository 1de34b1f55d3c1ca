"""Shared fixtures for the Smart planner tests."""

from __future__ import annotations

import io

import pytest

from asteria_agents.policy.scripted_agent.common.geometry import Position
from asteria_agents.policy.scripted_agent.smart.debug_logger import DebugLogger
from asteria_agents.policy.scripted_agent.smart.types import GameConfig, Pellet, Ship
from asteria_agents.policy.scripted_agent.smart.world_state import InMemoryWorldState


def make_world(
    pellets: list[tuple[int, int, int]] | None = None,
    agents: list[tuple[int, int]] | None = None,
) -> InMemoryWorldState:
    """Build a snapshot from ``(x, y, fuel)`` pellets and ``(x, y)`` agents."""
    return InMemoryWorldState(
        pellets=[Pellet(position=Position(x, y), fuel=fuel) for x, y, fuel in pellets or []],
        agents=[Ship(position=Position(x, y)) for x, y in agents or []],
    )


@pytest.fixture
def empty_world() -> InMemoryWorldState:
    return make_world()


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def small_config() -> GameConfig:
    """Short spawn distance so spawn searches stay fast."""
    return GameConfig(min_spawn_distance=8)


@pytest.fixture
def log_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def debug_logger(log_buffer: io.StringIO) -> DebugLogger:
    return DebugLogger(level=2, output=log_buffer)


@pytest.fixture
def world_factory():
    return make_world
