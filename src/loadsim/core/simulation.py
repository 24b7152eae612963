"""
Simulation: owns the segments and sessions and advances them one tick at a time.

Each tick has two fixed phases:
1. Every segment promotes eligible slices and retires work
2. Every session checks its query and possibly issues a new one

Segments go first so a session sees its query's slices as of this tick.

The clock is supplied by the caller: `tick(now)` takes any monotonic
timestamp. The simulation owns its random generator and its query id
counter, so independent simulations never share state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
from typing import Iterable, Protocol

import numpy as np

from loadsim.core.degradation import DegradationCurve
from loadsim.core.errors import ConfigurationError
from loadsim.core.segment import QUANTUM, Segment
from loadsim.core.session import Session
from loadsim.core.work import Query, QueryIdCounter

log = logging.getLogger(__name__)


class Tickable(Protocol):
    """Anything advanced once per simulation tick."""

    def tick(self, now: float) -> None:
        ...


def _advance(actors: Iterable[Tickable], now: float) -> None:
    for actor in actors:
        actor.tick(now)


def _non_negative(value: float) -> bool:
    # False for NaN and infinities as well as negatives
    return math.isfinite(value) and value >= 0


@dataclass
class SimulationConfig:
    """Static topology and work-distribution parameters."""

    segments: int = 32               # Number of segments (fixed for the run)
    cores: int = 10                  # Cores per segment
    core_capacity: float = 100.0     # Work per core per tick
    slice_spread: float = 0.05       # Slice size spread, as a fraction of query size
    slice_delay: float = 10.0        # Slices start within [0, slice_delay) of arrival
    curve: DegradationCurve = DegradationCurve.LINEAR
    quantum: float = QUANTUM         # Max work per slice per round-robin pass


@dataclass(eq=False)
class Simulation:
    """
    The tick-driven contention model.

    Sessions are registered with `add_session` before the first tick;
    changing topology afterwards is not supported.
    """

    config: SimulationConfig = field(default_factory=SimulationConfig)
    rng: np.random.Generator | None = None
    start_time: float = 0.0

    current_time: float = field(default=0.0, init=False)
    tick_count: int = field(default=0, init=False)
    ids: QueryIdCounter = field(default_factory=QueryIdCounter, init=False)
    _segments: list[Segment] = field(default_factory=list, init=False, repr=False)
    _sessions: list[Session] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        cfg = self.config
        if not (math.isfinite(cfg.segments) and cfg.segments > 0):
            raise ConfigurationError(f"segments must be positive, got {cfg.segments}")
        if not _non_negative(cfg.slice_spread):
            raise ConfigurationError(f"slice_spread must be non-negative, got {cfg.slice_spread}")
        if not _non_negative(cfg.slice_delay):
            raise ConfigurationError(f"slice_delay must be non-negative, got {cfg.slice_delay}")
        cfg.curve = DegradationCurve.from_name(cfg.curve)

        if self.rng is None:
            self.rng = np.random.default_rng()
        self.current_time = self.start_time

        # Segment validates cores, capacity and quantum
        self._segments = [
            Segment(i, cfg.cores, cfg.core_capacity, curve=cfg.curve, quantum=cfg.quantum)
            for i in range(cfg.segments)
        ]
        log.info(
            "Simulation created: %d segments × %d cores × %g capacity, curve=%s",
            cfg.segments, cfg.cores, cfg.core_capacity, cfg.curve.value,
        )

    def add_session(
        self,
        label: str,
        job_size_mean: float,
        job_size_spread: float,
        interval_mean: float,
        interval_spread: float,
    ) -> Session:
        """Register a workload source. Labels must be unique."""
        if any(s.label == label for s in self._sessions):
            raise ConfigurationError(f"duplicate session label {label!r}")
        params = {
            "job_size_mean": job_size_mean,
            "job_size_spread": job_size_spread,
            "interval_mean": interval_mean,
            "interval_spread": interval_spread,
        }
        for name, value in params.items():
            if not _non_negative(value):
                raise ConfigurationError(f"{name} must be non-negative and finite, got {value} for {label!r}")

        session = Session(self, label, start_time=self.start_time, **params)
        self._sessions.append(session)
        log.debug("Session %s added, first arrival at %g", label, session.next_arrival_time)
        return session

    def create_query(self, size: float, now: float) -> Query:
        """Fan a new query out over every segment."""
        cfg = self.config
        return Query(
            size=size,
            arrival_time=now,
            segments=self._segments,
            slice_spread=cfg.slice_spread,
            max_delay=cfg.slice_delay,
            rng=self.rng,
            ids=self.ids,
        )

    def tick(self, now: float) -> None:
        """Advance every segment, then every session."""
        _advance(self._segments, now)
        _advance(self._sessions, now)
        self.current_time = now
        self.tick_count += 1

    def run(self, n_ticks: int, step: float = 1.0) -> dict:
        """Advance n_ticks ticks, `step` time units apart, from the current time."""
        for _ in range(n_ticks):
            self.tick(self.current_time + step)

        return {
            "n_ticks": n_ticks,
            "tick_count": self.tick_count,
            "current_time": self.current_time,
            "queries_issued": self.ids.issued,
            "active_sessions": self.active_sessions,
            "overloaded_segments": self.overloaded_segments,
            "total_work": self.total_outstanding_work,
        }

    # ═══════════════════════════════════════════════════════════════
    # READ SURFACE
    # ═══════════════════════════════════════════════════════════════

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def sessions(self) -> tuple[Session, ...]:
        return tuple(self._sessions)

    @property
    def active_sessions(self) -> int:
        """Sessions with a query in flight."""
        return sum(1 for s in self._sessions if s.busy)

    @property
    def overloaded_segments(self) -> int:
        return sum(1 for s in self._segments if s.overloaded)

    @property
    def total_outstanding_work(self) -> float:
        """Remaining work of running slices across all segments."""
        return sum(s.total_remaining_work for s in self._segments)
