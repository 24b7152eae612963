"""
Visualization utilities.

- Degradation curve plots
- Per-segment load bars
- History time series
"""

from loadsim.viz.plots import (
    plot_degradation_curves,
    plot_segment_load,
    plot_history,
    save_figure,
)

__all__ = [
    "plot_degradation_curves",
    "plot_segment_load",
    "plot_history",
    "save_figure",
]
