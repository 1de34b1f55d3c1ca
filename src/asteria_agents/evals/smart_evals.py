"""Smart planner evaluation layouts.

Small deterministic pellet layouts for exercising the Smart agent offline.
Each layout is a list of ``(x, y, fuel)`` triples turned into an
``InMemoryWorldState`` by :func:`make_world`.
"""

from __future__ import annotations

from asteria_agents.policy.scripted_agent.common.geometry import Position
from asteria_agents.policy.scripted_agent.smart.types import Pellet, Ship
from asteria_agents.policy.scripted_agent.smart.world_state import InMemoryWorldState

PelletSpec = tuple[int, int, int]

# Stepping-stone chains toward the origin in every quadrant, plus strays.
STRATEGIC_LAYOUT: list[PelletSpec] = [
    # Chain from the +x,+y spawn ring
    (48, 15, 3),
    (42, 20, 2),
    (35, 25, 3),
    (28, 22, 2),
    (20, 15, 3),
    (15, 10, 2),
    (8, 6, 2),
    # Other quadrants
    (-45, 20, 3),
    (-30, 15, 2),
    (-15, 8, 2),
    (-25, -35, 3),
    (-18, -25, 2),
    (-10, -12, 2),
    (30, -40, 3),
    (22, -28, 2),
    (12, -15, 2),
    (6, -8, 2),
    # Scattered
    (55, -10, 1),
    (-52, 8, 1),
    (10, 45, 1),
    (-8, -48, 1),
    # Final approach
    (3, 2, 1),
    (-2, 4, 1),
    (4, -3, 1),
    (-1, -2, 1),
]

# A straight line of full pellets from (50, 0); every hop is within the default tank.
CORRIDOR_LAYOUT: list[PelletSpec] = [(x, 0, 5) for x in range(5, 50, 5)]

LAYOUTS: dict[str, list[PelletSpec]] = {
    "strategic": STRATEGIC_LAYOUT,
    "corridor": CORRIDOR_LAYOUT,
    "empty": [],
}


def make_pellets(layout: list[PelletSpec]) -> list[Pellet]:
    return [Pellet(position=Position(x, y), fuel=fuel, ref=f"eval#{i}") for i, (x, y, fuel) in enumerate(layout)]


def make_world(
    layout_name: str = "strategic",
    agents: list[tuple[int, int]] | None = None,
) -> InMemoryWorldState:
    """Build a snapshot for a named layout."""
    if layout_name not in LAYOUTS:
        available = ", ".join(sorted(LAYOUTS))
        raise ValueError(f"Unknown layout '{layout_name}'. Available: {available}")
    ships = [Ship(position=Position(x, y)) for x, y in agents or []]
    return InMemoryWorldState(pellets=make_pellets(LAYOUTS[layout_name]), agents=ships)
