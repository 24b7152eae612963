"""
Aggregate statistics and data export for a running simulation.

Read-only: nothing here mutates the simulation.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loadsim.core.simulation import Simulation


@dataclass
class SimulationStats:
    """Headline figures shown alongside the segment and session views."""

    active_sessions: int
    total_sessions: int
    overloaded_segments: int
    total_segments: int
    total_work: float
    running_time: float  # Clock units since the simulation's start_time

    def to_dict(self) -> dict:
        return asdict(self)


def collect_stats(simulation: "Simulation", now: float | None = None) -> SimulationStats:
    """Summarize the simulation as of `now` (defaults to the last tick)."""
    if now is None:
        now = simulation.current_time
    return SimulationStats(
        active_sessions=simulation.active_sessions,
        total_sessions=len(simulation.sessions),
        overloaded_segments=simulation.overloaded_segments,
        total_segments=len(simulation.segments),
        total_work=float(simulation.total_outstanding_work),
        running_time=float(now - simulation.start_time),
    )


def snapshot(simulation: "Simulation", now: float | None = None) -> dict:
    """
    JSON-serializable view of the whole simulation.

    Segments are numbered from 1. Queued slices are counted but their
    work is not part of total_work.
    """
    if now is None:
        now = simulation.current_time

    sessions = [
        {
            "name": session.label,
            "active": session.busy,
            "query_size": session.current_query_size,
            "query_count": session.completed_query_count,
            "next_arrival_in": float(session.next_arrival_in(now)),
        }
        for session in simulation.sessions
    ]
    segments = [
        {
            "number": segment.index + 1,
            "overload_factor": float(segment.overload_factor),
            "total_work": float(segment.total_remaining_work),
            "running_slices": segment.running_count,
            "queued_slices": segment.queued_count,
            "capacity": float(segment.current_capacity),
            "max_capacity": float(segment.max_capacity),
        }
        for segment in simulation.segments
    ]
    return {
        "time": float(now),
        "tick": simulation.tick_count,
        "stats": collect_stats(simulation, now).to_dict(),
        "sessions": sessions,
        "segments": segments,
    }
