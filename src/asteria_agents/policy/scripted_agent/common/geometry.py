from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Grid cell. Coordinates are plain Python ints, so they never overflow."""

    x: int
    y: int

    @property
    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> Position:
        parts = key.split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid position key: {key!r}")
        return cls(int(parts[0]), int(parts[1]))

    def offset(self, dx: int, dy: int) -> Position:
        return Position(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


ORIGIN = Position(0, 0)

# Orthogonal moves first, then diagonals. Order matters for deterministic search.
MOVE_DELTAS: dict[str, tuple[int, int]] = {
    "right": (1, 0),
    "left": (-1, 0),
    "up": (0, 1),
    "down": (0, -1),
    "up_right": (1, 1),
    "up_left": (-1, 1),
    "down_right": (1, -1),
    "down_left": (-1, -1),
}


def sign(value: int) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def direction_toward_origin(pos: Position) -> tuple[int, int]:
    return -sign(pos.x), -sign(pos.y)


def is_diagonal(dx: int, dy: int) -> bool:
    return dx != 0 and dy != 0


def step_toward(current: Position, target: Position) -> tuple[int, int]:
    """Single greedy step, each axis clamped to {-1, 0, 1}."""
    return sign(target.x - current.x), sign(target.y - current.y)
