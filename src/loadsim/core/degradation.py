"""
Degradation curves: how much capacity a segment loses to contention.

A curve maps an overload factor x ≥ 0 (running slices in excess of cores,
normalized by cores) to the fraction of nominal capacity lost that tick.

    capacity = cores × per_core_capacity × (1 − curve(x))

Every curve is 0 at x = 0, non-decreasing, and saturates at a ceiling
below 1 so a segment always retires some work:

- zero:             no degradation (isolates scheduling mechanics)
- linear:           0.09·x, ceiling 0.9 from x = 10
- exponential:      normalized e^(0.4x) ramp, ceiling 0.9 from x = 8
- hardExponential:  normalized e^(0.6x) ramp, ceiling 0.95 from x = 6

Curves accept scalars or numpy arrays, so the same functions serve the
segment's per-tick scalar lookup and the viz layer's sampling.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Callable

import numpy as np

log = logging.getLogger(__name__)


LINEAR_BREAKPOINT = 10.0
LINEAR_CEILING = 0.9

EXPONENTIAL_RATE = 0.4
EXPONENTIAL_BREAKPOINT = 8.0
EXPONENTIAL_CEILING = 0.9

HARD_EXPONENTIAL_RATE = 0.6
HARD_EXPONENTIAL_BREAKPOINT = 6.0
HARD_EXPONENTIAL_CEILING = 0.95


def _as_result(values: np.ndarray, overload_factor) -> float | np.ndarray:
    """Return a float for scalar input, an array otherwise."""
    if np.ndim(overload_factor) == 0:
        return float(values)
    return values


def _ramp(
    overload_factor,
    breakpoint: float,
    ceiling: float,
    ramp: Callable[[np.ndarray], np.ndarray],
) -> float | np.ndarray:
    """
    Piecewise curve: 0 for x ≤ 0, ceiling for x ≥ breakpoint, ramp(x) between.

    The ramp is only evaluated on x clipped to [0, breakpoint], so large
    overload factors never overflow the exponential.
    """
    x = np.asarray(overload_factor, dtype=np.float64)
    inner = np.clip(x, 0.0, breakpoint)
    values = np.where(
        x <= 0.0,
        0.0,
        np.where(x >= breakpoint, ceiling, ramp(inner)),
    )
    return _as_result(values, overload_factor)


def zero_degradation(overload_factor) -> float | np.ndarray:
    """No capacity loss at any load."""
    x = np.asarray(overload_factor, dtype=np.float64)
    return _as_result(np.zeros_like(x), overload_factor)


def linear_degradation(overload_factor) -> float | np.ndarray:
    """0.09·x up to a ceiling of 0.9 at x = 10."""
    slope = LINEAR_CEILING / LINEAR_BREAKPOINT
    return _ramp(
        overload_factor,
        LINEAR_BREAKPOINT,
        LINEAR_CEILING,
        lambda x: slope * x,
    )


def exponential_degradation(overload_factor) -> float | np.ndarray:
    """
    Normalized exponential ramp:

        0.9 · (e^(0.4x) − 1) / (e^(3.2) − 1)

    Gentler than linear at low load, steeper near the ceiling.
    """
    norm = np.expm1(EXPONENTIAL_RATE * EXPONENTIAL_BREAKPOINT)
    return _ramp(
        overload_factor,
        EXPONENTIAL_BREAKPOINT,
        EXPONENTIAL_CEILING,
        lambda x: EXPONENTIAL_CEILING * np.expm1(EXPONENTIAL_RATE * x) / norm,
    )


def hard_exponential_degradation(overload_factor) -> float | np.ndarray:
    """
    Like exponential_degradation but saturates earlier and higher:

        0.95 · (e^(0.6x) − 1) / (e^(3.6) − 1)
    """
    norm = np.expm1(HARD_EXPONENTIAL_RATE * HARD_EXPONENTIAL_BREAKPOINT)
    return _ramp(
        overload_factor,
        HARD_EXPONENTIAL_BREAKPOINT,
        HARD_EXPONENTIAL_CEILING,
        lambda x: HARD_EXPONENTIAL_CEILING * np.expm1(HARD_EXPONENTIAL_RATE * x) / norm,
    )


class DegradationCurve(Enum):
    """
    Closed set of degradation curves, selected once per simulation run.

    Values are the identifiers used in serialized settings. Members are
    callable: ``DegradationCurve.LINEAR(1.0) == 0.09``.
    """

    ZERO = "zero"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    HARD_EXPONENTIAL = "hardExponential"

    def __call__(self, overload_factor) -> float | np.ndarray:
        return _CURVE_FUNCTIONS[self](overload_factor)

    @property
    def ceiling(self) -> float:
        """Maximum fraction of capacity this curve can remove."""
        return _CURVE_CEILINGS[self]

    @classmethod
    def from_name(cls, name: str | None) -> "DegradationCurve":
        """
        Resolve a serialized curve identifier.

        Unknown or missing identifiers fall back to LINEAR so that any
        settings payload still yields a runnable simulation.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            log.warning("Unknown degradation curve %r, falling back to linear", name)
            return cls.LINEAR


_CURVE_FUNCTIONS: dict[DegradationCurve, Callable] = {
    DegradationCurve.ZERO: zero_degradation,
    DegradationCurve.LINEAR: linear_degradation,
    DegradationCurve.EXPONENTIAL: exponential_degradation,
    DegradationCurve.HARD_EXPONENTIAL: hard_exponential_degradation,
}

_CURVE_CEILINGS: dict[DegradationCurve, float] = {
    DegradationCurve.ZERO: 0.0,
    DegradationCurve.LINEAR: LINEAR_CEILING,
    DegradationCurve.EXPONENTIAL: EXPONENTIAL_CEILING,
    DegradationCurve.HARD_EXPONENTIAL: HARD_EXPONENTIAL_CEILING,
}
