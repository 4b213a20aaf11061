#!/usr/bin/env python3
"""Quick race example with a generated field.

Runs one race tick by tick, prints the race card, the results and the
number of lead changes, then runs a small Monte Carlo batch.

Usage:
    python examples/quick_simulation.py
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from derbysim.analysis import MonteCarloRunner
from derbysim.config import RaceConfig
from derbysim.output import ConsoleOutput, Exporter, TelemetryRecorder, lead_changes
from derbysim.simulation import RaceSimulator


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Horse Race Simulation - Quick Example")
    print("=" * 50)

    config = RaceConfig(seed=42)
    track = config.track()
    rng = np.random.default_rng(config.seed)

    finishes: list[str] = []
    race_sim = RaceSimulator(
        rng=rng,
        finish_policy=config.finish_policy,
        on_finish=lambda lane, time, rank: finishes.append(f"P{rank}: lane {lane + 1}"),
    )
    state = race_sim.setup_race(track, num_entrants=config.num_entrants)
    ConsoleOutput.print_field(state.entrants)

    # Drive the clock ourselves, as a renderer would
    recorder = TelemetryRecorder(every=10)
    race_sim.start_race(state, current_time=0.0)
    current_time = 0.0
    for _ in range(config.max_ticks):
        if not state.race_in_progress:
            break
        current_time += config.tick_ms
        recorder.record(current_time, race_sim.tick(state, current_time, config.tick_ms))

    ConsoleOutput.print_race_results(race_sim.results(state))
    print(f"Lead changes: {lead_changes(recorder.to_frame())}")

    names = [e.name for e in state.entrants]

    print("\n" + "=" * 50)
    print("Running Monte Carlo simulation (100 races)...")
    print("=" * 50)

    logging.getLogger("derbysim").setLevel(logging.WARNING)
    runner = MonteCarloRunner(config=config, names=names, seed=123)
    results = runner.run_quick(num_simulations=100)
    ConsoleOutput.print_monte_carlo_summary(results)

    print("\nExporting results...")
    exporter = Exporter(output_dir="output")
    files = exporter.export_all(results, prefix="quick")
    files["telemetry_csv"] = exporter.export_telemetry_csv(recorder.to_frame(), "quick_telemetry.csv")
    for fmt, path in files.items():
        print(f"  {fmt}: {path}")

    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
