"""
Serialized simulation settings.

The settings record is flat, with camelCase keys:

    numSegments, numCores, coreCapacity, sliceDev, sliceDelay,
    degradationFunction, and for each session group (service, etl, adhoc)
    <group>Count, <group>JobSizeAvg, <group>JobSizeDev,
    <group>IntervalAvg, <group>IntervalDev

Any subset of keys is accepted. Unknown keys (including legacy ones such
as concurrencyOverhead) are ignored. Missing keys, empty strings, and a
zero job size or interval fall back to defaults derived from the core
capacity. Times are in seconds.

Numbers must be finite: NaN and Infinity (which JSON parsers accept) are
rejected on import. Counts are integers. Integral floats such as 3.0 and
numeric strings such as "3" are accepted, but fractional counts such as
2.5 or "3.5" are rejected rather than truncated.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from loadsim.core.degradation import DegradationCurve
from loadsim.core.simulation import SimulationConfig


MILLIS_PER_SECOND = 1000.0  # Settings are in seconds, the simulation clock in ms

DEFAULT_SEGMENTS = 16
DEFAULT_CORES = 16
DEFAULT_CORE_CAPACITY = 100.0
DEFAULT_SLICE_DEV = 0.05
DEFAULT_SLICE_DELAY = 1.0

# group: (count, job size as a multiple of core capacity, interval, interval spread)
SESSION_GROUP_DEFAULTS: dict[str, tuple[int, float, float, float]] = {
    "service": (10, 1.0, 40.0, 8.0),
    "etl": (10, 3.0, 650.0, 100.0),
    "adhoc": (5, 5.0, 450.0, 450.0),
}


@dataclass
class SessionGroup:
    """A resolved batch of identically-parameterized sessions (times in seconds)."""

    name: str
    count: int
    job_size_mean: float
    job_size_spread: float
    interval_mean: float
    interval_spread: float

    def labels(self) -> list[str]:
        return [f"{self.name}-{i}" for i in range(self.count)]


class SimulationSettings(BaseModel):
    """Settings payload as produced by the settings/export layer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    num_segments: Optional[int] = None
    num_cores: Optional[int] = None
    core_capacity: Optional[float] = None
    slice_dev: Optional[float] = None
    slice_delay: Optional[float] = None
    degradation_function: Optional[str] = None

    service_count: Optional[int] = None
    service_job_size_avg: Optional[float] = None
    service_job_size_dev: Optional[float] = None
    service_interval_avg: Optional[float] = None
    service_interval_dev: Optional[float] = None

    etl_count: Optional[int] = None
    etl_job_size_avg: Optional[float] = None
    etl_job_size_dev: Optional[float] = None
    etl_interval_avg: Optional[float] = None
    etl_interval_dev: Optional[float] = None

    adhoc_count: Optional[int] = None
    adhoc_job_size_avg: Optional[float] = None
    adhoc_job_size_dev: Optional[float] = None
    adhoc_interval_avg: Optional[float] = None
    adhoc_interval_dev: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        # Form inputs serialize empty fields as ""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    # ═══════════════════════════════════════════════════════════════
    # RESOLUTION (defaults applied)
    # ═══════════════════════════════════════════════════════════════

    @property
    def curve(self) -> DegradationCurve:
        return DegradationCurve.from_name(self.degradation_function or DegradationCurve.LINEAR.value)

    @property
    def resolved_core_capacity(self) -> float:
        return self.core_capacity or DEFAULT_CORE_CAPACITY

    def to_config(self) -> SimulationConfig:
        """Simulation parameters, with slice delay converted to milliseconds."""
        slice_dev = DEFAULT_SLICE_DEV if self.slice_dev is None else self.slice_dev
        slice_delay = DEFAULT_SLICE_DELAY if self.slice_delay is None else self.slice_delay
        return SimulationConfig(
            segments=self.num_segments or DEFAULT_SEGMENTS,
            cores=self.num_cores or DEFAULT_CORES,
            core_capacity=self.resolved_core_capacity,
            slice_spread=slice_dev,
            slice_delay=slice_delay * MILLIS_PER_SECOND,
            curve=self.curve,
        )

    def session_group(self, name: str) -> SessionGroup:
        """Resolve one session group; a zero size or interval means "use the default"."""
        default_count, size_multiple, default_interval, default_interval_dev = (
            SESSION_GROUP_DEFAULTS[name]
        )
        count = getattr(self, f"{name}_count")
        job_size = getattr(self, f"{name}_job_size_avg") or size_multiple * self.resolved_core_capacity
        job_size_dev = getattr(self, f"{name}_job_size_dev") or math.floor(job_size / 2)
        interval = getattr(self, f"{name}_interval_avg") or default_interval
        interval_dev = getattr(self, f"{name}_interval_dev") or default_interval_dev

        return SessionGroup(
            name=name,
            count=default_count if count is None else count,
            job_size_mean=job_size,
            job_size_spread=job_size_dev,
            interval_mean=interval,
            interval_spread=interval_dev,
        )

    def session_groups(self) -> list[SessionGroup]:
        return [self.session_group(name) for name in SESSION_GROUP_DEFAULTS]

    def resolved(self) -> "SimulationSettings":
        """A copy with every field populated by its effective value."""
        config = self.to_config()
        values = {
            "num_segments": config.segments,
            "num_cores": config.cores,
            "core_capacity": config.core_capacity,
            "slice_dev": config.slice_spread,
            "slice_delay": config.slice_delay / MILLIS_PER_SECOND,
            "degradation_function": config.curve.value,
        }
        for group in self.session_groups():
            values[f"{group.name}_count"] = group.count
            values[f"{group.name}_job_size_avg"] = group.job_size_mean
            values[f"{group.name}_job_size_dev"] = group.job_size_spread
            values[f"{group.name}_interval_avg"] = group.interval_mean
            values[f"{group.name}_interval_dev"] = group.interval_spread
        return SimulationSettings(**values)
