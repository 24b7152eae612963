"""
Pytest configuration and shared fixtures.
"""

import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def ids():
    """Fresh query id counter."""
    from loadsim.core import QueryIdCounter
    return QueryIdCounter()


@pytest.fixture
def small_config():
    """Four small segments with no degradation and no start delay."""
    from loadsim.core import SimulationConfig, DegradationCurve
    return SimulationConfig(
        segments=4,
        cores=2,
        core_capacity=10.0,
        slice_spread=0.0,
        slice_delay=0.0,
        curve=DegradationCurve.ZERO,
    )


@pytest.fixture
def busy_config():
    """Eight segments, linear degradation, slices start within 5 time units."""
    from loadsim.core import SimulationConfig, DegradationCurve
    return SimulationConfig(
        segments=8,
        cores=2,
        core_capacity=50.0,
        slice_spread=0.1,
        slice_delay=5.0,
        curve=DegradationCurve.LINEAR,
    )
