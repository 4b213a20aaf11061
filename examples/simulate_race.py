#!/usr/bin/env python3
"""Example: Run Monte Carlo simulations for a configured race.

Usage:
    python examples/simulate_race.py [--config FILE] [--simulations N]

Examples:
    python examples/simulate_race.py --laps 3 --entrants 8 --simulations 500
    python examples/simulate_race.py --config race.json --export
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from derbysim.analysis import MonteCarloRunner
from derbysim.config import FinishPolicy, RaceConfig, load_config
from derbysim.names import generate_names
from derbysim.output import ConsoleOutput, Exporter
from derbysim.rng import default_rng


def main():
    parser = argparse.ArgumentParser(description="Simulate horse races with Monte Carlo")
    parser.add_argument("--config", help="JSON file with race settings")
    parser.add_argument("--laps", type=int, help="Laps per race (overrides config)")
    parser.add_argument("--entrants", type=int, help="Field size (overrides config)")
    parser.add_argument(
        "--finish-policy",
        choices=[p.value for p in FinishPolicy],
        help="How finishes are detected (overrides config)",
    )
    parser.add_argument(
        "--simulations",
        "-n",
        type=int,
        default=100,
        help="Number of simulations (default: 100)",
    )
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument(
        "--no-parallel",
        action="store_false",
        dest="parallel",
        help="Disable parallel processing",
    )
    parser.add_argument("--export", action="store_true", help="Export results to CSV/JSON")
    parser.add_argument(
        "--output-dir",
        default="output",
        help="Output directory for exports (default: output)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config) if args.config else RaceConfig()
    overrides = {
        "total_laps": args.laps,
        "num_entrants": args.entrants,
        "finish_policy": args.finish_policy,
        "seed": args.seed,
    }
    config = RaceConfig.model_validate(
        {**config.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    )

    names = generate_names(config.num_entrants, default_rng(config.seed))

    print("Horse Race Monte Carlo Simulation")
    print("=" * 40)
    print(f"Laps: {config.total_laps} x {config.track_length:.0f}")
    print(f"Entrants: {config.num_entrants}")
    print(f"Simulations: {args.simulations}")

    runner = MonteCarloRunner(config=config, names=names)
    results = runner.run(num_simulations=args.simulations, parallel=args.parallel)
    ConsoleOutput.print_monte_carlo_summary(results)

    if args.export:
        exporter = Exporter(output_dir=args.output_dir)
        files = exporter.export_all(results, prefix="derby")
        print("\nExported:")
        for fmt, path in files.items():
            print(f"  {fmt}: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
