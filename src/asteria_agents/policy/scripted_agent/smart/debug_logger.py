"""
Debug output for the Smart planner.

Structured, prefixed lines describing what the planner decided and why.
Output is written to ``sys.stderr`` by default so it never mixes with a
script's JSON on stdout.

Verbosity levels:
    0: disabled
    1: summaries of failed or exhausted searches, spawn selection, fuel mode
        switches and warnings
    2: full detail: every search and every spawn candidate score

All lines are prefixed with ``[smart:debug]``; the end-of-run summary is one
JSON object prefixed with ``[smart:debug:summary]``.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Optional

from asteria_agents.policy.scripted_agent.common.geometry import Position

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class SearchRecord:
    """Outcome of one A* run."""

    start: Position
    goal: Position
    initial_fuel: int
    success: bool
    iterations: int
    cost: float
    exhausted: bool = False  # Hit the iteration cap


@dataclass
class SpawnEvaluationRecord:
    position: Position
    score: float
    feasible: bool
    fuel_stops: int = 0
    nearby_pellets: int = 0


# ---------------------------------------------------------------------------
# DebugLogger
# ---------------------------------------------------------------------------


class DebugLogger:
    """Collects planner events and emits them as prefixed lines.

    Parameters
    ----------
    level : int
        Verbosity level (0, 1 or 2).
    output : file-like, optional
        Where to write output. Defaults to ``sys.stderr``.
    """

    PREFIX = "[smart:debug]"
    SUMMARY_PREFIX = "[smart:debug:summary]"

    def __init__(self, level: int = 1, output: Any = None) -> None:
        self.level = level
        self._out = output or sys.stderr

        self.searches: list[SearchRecord] = []
        self.spawn_evaluations: list[SpawnEvaluationRecord] = []
        self.warnings: list[str] = []

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_search(self, record: SearchRecord) -> None:
        self.searches.append(record)
        if record.exhausted:
            self._emit(
                f"search exhausted {record.start}->{record.goal} fuel={record.initial_fuel} "
                f"after {record.iterations} iterations",
                level=1,
            )
        elif not record.success:
            self._emit(
                f"no path {record.start}->{record.goal} fuel={record.initial_fuel} "
                f"({record.iterations} iterations)",
                level=2,
            )
        else:
            self._emit(
                f"path {record.start}->{record.goal} cost={record.cost} ({record.iterations} iterations)",
                level=2,
            )

    def record_spawn_evaluation(self, record: SpawnEvaluationRecord) -> None:
        self.spawn_evaluations.append(record)
        if record.feasible:
            self._emit(
                f"spawn {record.position} score={record.score:.0f} stops={record.fuel_stops} "
                f"pellets={record.nearby_pellets}",
                level=2,
            )

    def record_spawn_selection(self, candidate_position: Position, score: float, guaranteed: bool) -> None:
        kind = "guaranteed" if guaranteed else "fallback"
        self._emit(f"selected {kind} spawn {candidate_position} score={score:.0f}", level=1)

    def info(self, msg: str, level: int = 1) -> None:
        self._emit(msg, level=level)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)
        self._emit(f"WARNING {msg}", level=1)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def emit_summary(self) -> None:
        """Emit one JSON line describing everything recorded so far."""
        if self.level <= 0:
            return
        successful = [s for s in self.searches if s.success]
        summary = {
            "searches": len(self.searches),
            "successful_searches": len(successful),
            "exhausted_searches": sum(1 for s in self.searches if s.exhausted),
            "total_iterations": sum(s.iterations for s in self.searches),
            "spawn_candidates": len(self.spawn_evaluations),
            "feasible_spawns": sum(1 for e in self.spawn_evaluations if e.feasible),
            "warnings": list(self.warnings),
        }
        line = json.dumps(summary, separators=(",", ":"))
        print(f"{self.SUMMARY_PREFIX} {line}", file=self._out, flush=True)

    def reset(self) -> None:
        self.searches.clear()
        self.spawn_evaluations.clear()
        self.warnings.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _emit(self, msg: str, level: int = 1) -> None:
        if self.level < level:
            return
        print(f"{self.PREFIX} {msg}", file=self._out, flush=True)


def emit(logger: Optional[DebugLogger], msg: str, level: int = 1) -> None:
    """Log through an optional logger."""
    if logger is not None:
        logger.info(msg, level=level)
