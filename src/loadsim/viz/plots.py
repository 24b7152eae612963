"""
Plots of simulation state.

- Degradation curves: capacity lost vs overload factor
- Segment load: remaining work and overload per segment
- History: activity, outstanding work and overload over time

All plots use matplotlib and return the Figure so callers can save or
embed them.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from loadsim.core.degradation import DegradationCurve

if TYPE_CHECKING:
    from loadsim.core.simulation import Simulation
    from loadsim.analysis.history import History


CURVE_COLORS = {
    DegradationCurve.ZERO: "#7f8c8d",
    DegradationCurve.LINEAR: "#9b59b6",
    DegradationCurve.EXPONENTIAL: "#2980b9",
    DegradationCurve.HARD_EXPONENTIAL: "#c0392b",
}

CMAP_OVERLOAD = "YlOrRd"


def plot_degradation_curves(
    curves: Iterable[DegradationCurve] | None = None,
    x_max: float = 10.0,
    samples: int = 101,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (6, 5),
) -> tuple[Figure, Axes]:
    """
    Plot degradation (fraction of capacity lost) against overload factor.

    Args:
        curves: Curves to overlay (default: all of them)
        x_max: Largest overload factor shown
        samples: Points sampled along the x axis
    """
    if curves is None:
        curves = list(DegradationCurve)

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    x = np.linspace(0.0, x_max, samples)
    for curve in curves:
        ax.plot(x, curve(x), color=CURVE_COLORS.get(curve), linewidth=2, label=curve.value)

    ax.set_xlabel("Overload Factor")
    ax.set_ylabel("Degradation")
    ax.set_xlim(0, x_max)
    ax.set_ylim(0, 1)
    ax.grid(True, alpha=0.3)
    ax.legend()

    return fig, ax


def plot_segment_load(
    simulation: "Simulation",
    title: str = "Segment load",
    figsize: tuple[float, float] = (10, 6),
) -> Figure:
    """
    Bar charts of remaining work and overload factor per segment.

    Bars are numbered from 1, matching the exported snapshot.
    """
    segments = simulation.segments
    numbers = np.arange(1, len(segments) + 1)
    work = np.array([s.total_remaining_work for s in segments], dtype=np.float64)
    overload = np.array([s.overload_factor for s in segments], dtype=np.float64)
    queued = np.array([s.queued_count for s in segments])

    fig, (ax_work, ax_load) = plt.subplots(2, 1, figsize=figsize, sharex=True)

    ax_work.bar(numbers, work, color="#3498db")
    ax_work.set_ylabel("Remaining work")
    ax_work.set_title(title)

    colors = plt.get_cmap(CMAP_OVERLOAD)(np.clip(overload / max(overload.max(), 1.0), 0, 1))
    ax_load.bar(numbers, overload, color=colors)
    ax_load.set_ylabel("Overload factor")
    ax_load.set_xlabel("Segment")

    # Queued slices are not running yet; mark them as a count above each bar
    for n, q, h in zip(numbers, queued, overload):
        if q:
            ax_load.annotate(str(q), (n, h), ha="center", va="bottom", fontsize=7, color="gray")

    for ax in (ax_work, ax_load):
        ax.grid(True, axis="y", alpha=0.3)

    fig.tight_layout()
    return fig


def plot_history(
    history: "History",
    title: str = "Simulation history",
    time_scale: float = 1.0,
    figsize: tuple[float, float] = (10, 9),
) -> Figure:
    """
    Three stacked panels over time:
    active sessions, outstanding work, and per-segment overload as a heatmap.

    Args:
        time_scale: Divide recorded times by this (e.g. 1000 for ms → s)
    """
    arrays = history.as_arrays()
    t = arrays["times"] / time_scale

    fig, (ax_sessions, ax_work, ax_overload) = plt.subplots(3, 1, figsize=figsize, sharex=True)

    ax_sessions.step(t, arrays["active_sessions"], where="post", color="#27ae60")
    ax_sessions.set_ylabel("Active sessions")
    ax_sessions.set_title(title)

    ax_work.plot(t, arrays["total_work"], color="#2c3e50")
    ax_work.set_ylabel("Outstanding work")

    overload = arrays["overload"]
    if overload.size:
        extent = (t[0], t[-1], overload.shape[1] + 0.5, 0.5)
        im = ax_overload.imshow(
            overload.T,
            aspect="auto",
            cmap=CMAP_OVERLOAD,
            extent=extent,
            interpolation="nearest",
        )
        fig.colorbar(im, ax=ax_overload, label="Overload factor")
    ax_overload.set_ylabel("Segment")
    ax_overload.set_xlabel("Time")

    for ax in (ax_sessions, ax_work):
        ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
