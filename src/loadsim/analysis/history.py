"""
History: per-tick time series of a simulation, as numpy arrays.

Record after each tick, then plot or analyse the arrays. Per-segment
series are [n_ticks, n_segments] matrices. The recorded overload
is the one that set that tick's capacity, measured after promotion and
before any slice was retired.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from loadsim.core.simulation import Simulation


@dataclass
class History:
    """Accumulates one row per recorded tick."""

    times: list[float] = field(default_factory=list)
    active_sessions: list[int] = field(default_factory=list)
    total_work: list[float] = field(default_factory=list)
    overloaded_segments: list[int] = field(default_factory=list)
    queries_issued: list[int] = field(default_factory=list)

    _overload: list[list[float]] = field(default_factory=list, init=False, repr=False)
    _capacity: list[list[float]] = field(default_factory=list, init=False, repr=False)
    _work_done: list[list[float]] = field(default_factory=list, init=False, repr=False)

    def record(self, simulation: "Simulation") -> None:
        """Append the simulation's current state."""
        segments = simulation.segments
        self.times.append(float(simulation.current_time))
        self.active_sessions.append(simulation.active_sessions)
        self.total_work.append(float(simulation.total_outstanding_work))
        self.overloaded_segments.append(simulation.overloaded_segments)
        self.queries_issued.append(simulation.ids.issued)

        self._overload.append([s.last_overload for s in segments])
        self._capacity.append([s.last_capacity for s in segments])
        self._work_done.append([s.last_work_done for s in segments])

    def __len__(self) -> int:
        return len(self.times)

    @property
    def overload(self) -> np.ndarray:
        """Overload factor each segment was degraded by, per tick."""
        return np.asarray(self._overload, dtype=np.float64)

    @property
    def capacity(self) -> np.ndarray:
        """Capacity each segment had available, per tick."""
        return np.asarray(self._capacity, dtype=np.float64)

    @property
    def work_done(self) -> np.ndarray:
        """Work each segment retired, per tick."""
        return np.asarray(self._work_done, dtype=np.float64)

    def as_arrays(self) -> dict[str, np.ndarray]:
        return {
            "times": np.asarray(self.times, dtype=np.float64),
            "active_sessions": np.asarray(self.active_sessions, dtype=np.int64),
            "total_work": np.asarray(self.total_work, dtype=np.float64),
            "overloaded_segments": np.asarray(self.overloaded_segments, dtype=np.int64),
            "queries_issued": np.asarray(self.queries_issued, dtype=np.int64),
            "overload": self.overload,
            "capacity": self.capacity,
            "work_done": self.work_done,
        }

    def utilization(self, simulation: "Simulation") -> np.ndarray:
        """
        Fraction of nominal capacity actually spent on work, per tick and segment.

        Low utilization with high overload is the degradation at work.
        """
        max_capacity = np.array([s.max_capacity for s in simulation.segments])
        if len(self) == 0:
            return np.zeros((0, max_capacity.size))
        return self.work_done / max_capacity


def record_run(simulation: "Simulation", n_ticks: int, step: float = 1.0) -> History:
    """Run n_ticks ticks, recording state after each one."""
    history = History()
    for _ in range(n_ticks):
        simulation.tick(simulation.current_time + step)
        history.record(simulation)
    return history
