"""
Demo: Capacity collapse under contention.

Runs the default workload mix (service, ETL and ad-hoc sessions) against
the same topology under each degradation curve, and compares how much
work is left outstanding.

The demo:
1. Builds simulations from default settings, one per curve
2. Runs each for the same simulated time with the same seed
3. Prints headline stats
4. Plots the curves, the final segment load and the history
"""

import logging
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from loadsim.core import DegradationCurve
from loadsim.settings import SimulationSettings, MILLIS_PER_SECOND, build_simulation, write_settings
from loadsim.analysis import collect_stats, record_run
from loadsim.viz import plot_degradation_curves, plot_segment_load, plot_history, save_figure


def main():
    """Run the contention comparison demo."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Segment Contention Demo")
    print("Capacity = cores × per-core capacity × (1 − curve(overload))")
    print("=" * 60)

    n_ticks = 1800  # 30 simulated minutes, one tick per second
    output_dir = Path("output")
    output_dir.mkdir(exist_ok=True)

    print("\n1. Running each curve on the default workload...")
    histories = {}
    for curve in DegradationCurve:
        settings = SimulationSettings(degradation_function=curve.value)
        simulation = build_simulation(settings, rng=np.random.default_rng(seed=42))
        history = record_run(simulation, n_ticks, step=MILLIS_PER_SECOND)
        histories[curve] = (simulation, history)

        stats = collect_stats(simulation)
        print(f"\n   {curve.value}:")
        print(f"     Queries issued:       {simulation.ids.issued}")
        print(f"     Active sessions:      {stats.active_sessions}/{stats.total_sessions}")
        print(f"     Overloaded segments:  {stats.overloaded_segments}/{stats.total_segments}")
        print(f"     Outstanding work:     {stats.total_work:,.0f}")
        print(f"     Peak outstanding:     {max(history.total_work):,.0f}")

    write_settings(SimulationSettings(), output_dir / "default_settings.json")

    print("\n2. Creating visualization...")
    fig, _ = plot_degradation_curves()
    save_figure(fig, output_dir / "degradation_curves.png")

    simulation, history = histories[DegradationCurve.HARD_EXPONENTIAL]
    save_figure(plot_segment_load(simulation, title="Segment load (hardExponential)"),
                output_dir / "segment_load.png")
    save_figure(plot_history(history, title="History (hardExponential)", time_scale=MILLIS_PER_SECOND),
                output_dir / "history.png")
    print(f"   Saved to: {output_dir}/")

    plt.show()

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)

    return histories


if __name__ == "__main__":
    main()
