"""
Session: a recurring workload source.

Two states:
- Idle: no query in flight; issues a query once now ≥ next_arrival_time
- Busy: one query in flight; nothing happens until it is done

A busy session ignores its arrival schedule. Arrivals missed while busy
are absorbed, never queued, so a slow session throttles itself.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

from loadsim.core.work import Query, uniform

if TYPE_CHECKING:
    from loadsim.core.simulation import Simulation


class Session:
    """
    Issues queries of size ~ uniform(job_size_mean, job_size_spread)
    separated by intervals ~ uniform(interval_mean, interval_spread).
    Both draws are floored and never below 1.
    """

    def __init__(
        self,
        simulation: "Simulation",
        label: str,
        job_size_mean: float,
        job_size_spread: float,
        interval_mean: float,
        interval_spread: float,
        start_time: float = 0.0,
    ):
        self.simulation = simulation
        self.label = label
        self.job_size_mean = job_size_mean
        self.job_size_spread = job_size_spread
        self.interval_mean = interval_mean
        self.interval_spread = interval_spread

        self.current_query: Query | None = None
        self.completed_query_count: int = 0  # Incremented when a query is issued

        # Stagger first arrivals so sessions of one group don't fire together
        offset = uniform(simulation.rng, 0.0, interval_spread)
        if offset < 0:
            offset += interval_mean
        self.next_arrival_time: float = start_time + max(1, math.floor(offset))

    def tick(self, now: float) -> None:
        if self.current_query is not None:
            if not self.current_query.done:
                return
            self.current_query = None

        if now >= self.next_arrival_time:
            rng = self.simulation.rng
            size = max(1, math.floor(uniform(rng, self.job_size_mean, self.job_size_spread)))
            self.current_query = self.simulation.create_query(size, now)
            self.completed_query_count += 1

            interval = max(1, math.floor(uniform(rng, self.interval_mean, self.interval_spread)))
            self.next_arrival_time = now + interval

    @property
    def busy(self) -> bool:
        return self.current_query is not None

    @property
    def current_query_size(self) -> float | None:
        if self.current_query is None:
            return None
        return self.current_query.size

    def next_arrival_in(self, now: float) -> float:
        """Time until the next scheduled arrival, 0 if already due."""
        return max(0.0, self.next_arrival_time - now)

    def __repr__(self) -> str:
        state = "busy" if self.busy else "idle"
        return f"Session({self.label!r}, {state}, queries={self.completed_query_count})"
