"""
Core simulation engine.

This layer knows NOTHING about rendering, settings files or export.
It only knows:
- Segments with cores, capacity and a degradation curve
- Queries fanned out into one slice per segment
- Sessions issuing one query at a time
- How much work each segment retires per tick

Everything advances through `Simulation.tick(now)`.
"""

from loadsim.core.errors import LoadSimError, ConfigurationError, MalformedImportError
from loadsim.core.degradation import (
    DegradationCurve,
    zero_degradation,
    linear_degradation,
    exponential_degradation,
    hard_exponential_degradation,
)
from loadsim.core.work import Slice, Query, QueryIdCounter, uniform
from loadsim.core.segment import Segment, QUANTUM
from loadsim.core.session import Session
from loadsim.core.simulation import Simulation, SimulationConfig, Tickable

__all__ = [
    "LoadSimError",
    "ConfigurationError",
    "MalformedImportError",
    "DegradationCurve",
    "zero_degradation",
    "linear_degradation",
    "exponential_degradation",
    "hard_exponential_degradation",
    "Slice",
    "Query",
    "QueryIdCounter",
    "uniform",
    "Segment",
    "QUANTUM",
    "Session",
    "Simulation",
    "SimulationConfig",
    "Tickable",
]
