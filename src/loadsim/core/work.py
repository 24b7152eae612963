"""
Units of work: queries and the slices they fan out into.

A Query is one job submitted by a session. At construction it creates
exactly one Slice per segment; each slice gets its own randomized size
and start delay, so slices of the same query drift apart across segments.

A Slice is the only thing a segment ever sees. The owning query learns
about completion by polling its slices, never by callback.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from loadsim.core.segment import Segment


def uniform(rng: np.random.Generator, mean: float, spread: float) -> float:
    """Draw from the closed interval [mean − spread, mean + spread]."""
    return float(rng.uniform(mean - spread, mean + spread))


class QueryIdCounter:
    """
    Monotonic query id source owned by one simulation.

    Ids start at 1 and are never reused. Each simulation owns its own
    counter so independent simulations never interleave ids.
    """

    def __init__(self, start: int = 1):
        self._next = start

    def next_id(self) -> int:
        query_id = self._next
        self._next += 1
        return query_id

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._next - 1


@dataclass(eq=False)
class Slice:
    """
    The portion of one query's work assigned to one segment.

    remaining_work only ever decreases. Identity is the (query, segment)
    pair, so equality is by object identity.
    """

    query: "Query"
    segment: "Segment"
    total_work: float
    eligible_time: float
    remaining_work: float = field(init=False)

    def __post_init__(self):
        self.remaining_work = self.total_work

    @property
    def done(self) -> bool:
        return self.remaining_work <= 0

    def consume(self, amount: float) -> float:
        """Deduct up to `amount` of work; returns what was actually retired."""
        retired = min(amount, self.remaining_work)
        self.remaining_work -= retired
        return retired

    def __repr__(self) -> str:
        return f"Slice(q{self.query.id}@seg{self.segment.index} {self.remaining_work:g}/{self.total_work:g})"


class Query:
    """
    One job: nominal size S fanned out into one slice per segment.

    Slice work is max(1, round(uniform(S, spread × S))). Slice eligible time
    is arrival + floor(U[0, max_delay)), drawn independently per slice.
    """

    def __init__(
        self,
        size: float,
        arrival_time: float,
        segments: Sequence["Segment"],
        slice_spread: float,
        max_delay: float,
        rng: np.random.Generator,
        ids: QueryIdCounter,
    ):
        self.id = ids.next_id()
        self.size = size
        self.arrival_time = arrival_time
        self.slices: list[Slice] = []

        for segment in segments:
            work = max(1, round(uniform(rng, size, slice_spread * size)))
            delay = math.floor(rng.random() * max_delay) if max_delay > 0 else 0
            piece = Slice(
                query=self,
                segment=segment,
                total_work=work,
                eligible_time=arrival_time + delay,
            )
            self.slices.append(piece)
            segment.enqueue(piece)

    @property
    def done(self) -> bool:
        """True once every slice has retired all of its work."""
        return all(piece.done for piece in self.slices)

    @property
    def remaining_work(self) -> float:
        return sum(piece.remaining_work for piece in self.slices)

    def __repr__(self) -> str:
        return f"Query(id={self.id}, size={self.size}, slices={len(self.slices)})"
