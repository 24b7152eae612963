"""
Analysis layer: derived quantities for display and export.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- SimulationStats / collect_stats: headline counts
- snapshot: JSON-serializable export of segments and sessions
- History / record_run: per-tick time series as numpy arrays
"""

from loadsim.analysis.stats import SimulationStats, collect_stats, snapshot
from loadsim.analysis.history import History, record_run

__all__ = [
    "SimulationStats",
    "collect_stats",
    "snapshot",
    "History",
    "record_run",
]
