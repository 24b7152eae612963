"""
Segment: a resource pool of `cores` × `per_core_capacity` work per tick.

Each tick:
1. Promote queued slices whose eligible time has come
2. Overload factor = max(0, running − cores) / cores
3. Capacity = max_capacity × (1 − clamp(curve(overload), 0, 1))
4. Retire work round-robin, at most QUANTUM per slice per pass,
   until capacity runs out or no slice has work left

Up to `cores` running slices cost nothing. Beyond that the curve eats
capacity, slices take longer, more of them overlap, and the overload
grows: the feedback loop under study.

A segment never looks at another segment or at any session.
"""

from __future__ import annotations
import math

from loadsim.core.degradation import DegradationCurve
from loadsim.core.errors import ConfigurationError
from loadsim.core.work import Slice


QUANTUM = 10.0  # Max work retired from one slice per round-robin pass


class Segment:
    """One processing segment holding queued and running slices."""

    def __init__(
        self,
        index: int,
        cores: int,
        per_core_capacity: float,
        curve: DegradationCurve = DegradationCurve.LINEAR,
        quantum: float = QUANTUM,
    ):
        # NaN fails every comparison
        if not (math.isfinite(cores) and cores > 0):
            raise ConfigurationError(f"cores must be positive, got {cores}")
        if not (math.isfinite(per_core_capacity) and per_core_capacity > 0):
            raise ConfigurationError(
                f"per_core_capacity must be positive and finite, got {per_core_capacity}"
            )
        if not (math.isfinite(quantum) and quantum > 0):
            raise ConfigurationError(f"quantum must be positive and finite, got {quantum}")

        self.index = index
        self.cores = cores
        self.per_core_capacity = per_core_capacity
        self.curve = curve
        self.quantum = quantum

        # A slice lives in exactly one of these until it is discarded
        self.queued_slices: list[Slice] = []
        self.running_slices: list[Slice] = []

        # Figures from the most recent tick
        self.last_overload: float = 0.0
        self.last_capacity: float = self.max_capacity
        self.last_work_done: float = 0.0

    def enqueue(self, piece: Slice) -> None:
        """Accept a new slice; it waits until its eligible time."""
        self.queued_slices.append(piece)

    def tick(self, now: float) -> None:
        """Promote eligible slices, then retire as much work as capacity allows."""
        self._promote(now)

        self.last_overload = self.overload_factor
        capacity = self.current_capacity
        self.last_capacity = capacity
        retired = 0.0

        while capacity > 0 and self.running_slices:
            for piece in list(self.running_slices):
                amount = piece.consume(min(self.quantum, capacity))
                capacity -= amount
                retired += amount
                if piece.done:
                    self.running_slices.remove(piece)

        self.last_work_done = retired

    def _promote(self, now: float) -> None:
        ready = [piece for piece in self.queued_slices if piece.eligible_time <= now]
        if not ready:
            return
        self.queued_slices = [
            piece for piece in self.queued_slices if piece.eligible_time > now
        ]
        self.running_slices.extend(ready)

    # ═══════════════════════════════════════════════════════════════
    # READ SURFACE
    # ═══════════════════════════════════════════════════════════════

    @property
    def running_count(self) -> int:
        return len(self.running_slices)

    @property
    def queued_count(self) -> int:
        return len(self.queued_slices)

    @property
    def load_average(self) -> int:
        """Running slices in excess of cores."""
        return max(0, self.running_count - self.cores)

    @property
    def overload_factor(self) -> float:
        return self.load_average / self.cores

    @property
    def overloaded(self) -> bool:
        return self.overload_factor > 0

    @property
    def degradation(self) -> float:
        """Fraction of capacity lost at the current overload, clamped to [0, 1]."""
        return min(1.0, max(0.0, float(self.curve(self.overload_factor))))

    @property
    def max_capacity(self) -> float:
        return self.cores * self.per_core_capacity

    @property
    def current_capacity(self) -> float:
        return self.max_capacity * (1.0 - self.degradation)

    @property
    def total_remaining_work(self) -> float:
        """Remaining work of running slices; queued slices are not counted."""
        return sum(piece.remaining_work for piece in self.running_slices)

    def __repr__(self) -> str:
        return (
            f"Segment({self.index}, running={self.running_count}, "
            f"queued={self.queued_count}, overload={self.overload_factor:.2f})"
        )
