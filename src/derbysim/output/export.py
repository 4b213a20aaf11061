"""Export race and simulation results to CSV and JSON."""

import csv
import json
from pathlib import Path
from typing import Any

import pandas as pd

from derbysim.analysis.montecarlo import SimulationResults
from derbysim.simulation.race import RaceResult


class Exporter:
    """Exports results to various formats."""

    def __init__(self, output_dir: str | Path = "output"):
        """Initialize exporter.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_race_results_csv(
        self,
        results: SimulationResults,
        filename: str = "race_results.csv",
    ) -> Path:
        """Export all race results to CSV.

        Args:
            results: Simulation results
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "simulation", "position", "lane", "name",
                "finish_time_ms", "odds", "traits",
            ])

            for sim_idx, race_results in enumerate(results.race_results, 1):
                for result in race_results:
                    writer.writerow(_result_row(result, sim_idx))

        return filepath

    def export_single_race_csv(
        self,
        results: list[RaceResult],
        filename: str = "race.csv",
    ) -> Path:
        """Export one race's results to CSV.

        Args:
            results: Race results sorted by position
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["position", "lane", "name", "finish_time_ms", "odds", "traits"])
            for result in results:
                writer.writerow(_result_row(result))

        return filepath

    def export_statistics_json(
        self,
        results: SimulationResults,
        filename: str = "statistics.json",
    ) -> Path:
        """Export aggregated statistics to JSON.

        Args:
            results: Simulation results
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        stats_dict: dict[str, Any] = {
            "metadata": {
                "num_simulations": results.num_simulations,
                "avg_winning_time_ms": results.avg_winning_time,
                "favourite_win_rate": results.get_favourite_win_rate(),
            },
            "win_probabilities": {
                str(lane): prob for lane, prob in results.get_win_probabilities().items()
            },
            "lane_statistics": {},
            "trait_statistics": {
                trait: {"starts": stats.starts, "wins": stats.wins, "win_rate": stats.win_rate}
                for trait, stats in results.trait_stats.items()
            },
            "event_counts": results.event_stats.counts,
        }

        for lane, stats in results.lane_stats.items():
            stats_dict["lane_statistics"][str(lane)] = {
                "name": stats.name,
                "wins": stats.wins,
                "win_rate": stats.win_rate,
                "podiums": stats.podiums,
                "podium_rate": stats.podium_rate,
                "unfinished": stats.unfinished,
                "avg_position": stats.avg_position,
                "avg_implied_probability": stats.avg_implied_probability,
                "best_position": stats.best_position,
                "worst_position": stats.worst_position,
                "position_distribution": {
                    str(pos): pct for pos, pct in results.get_position_distribution(lane).items()
                },
            }

        with open(filepath, "w") as f:
            json.dump(stats_dict, f, indent=2)

        return filepath

    def export_telemetry_csv(
        self,
        frame: pd.DataFrame,
        filename: str = "telemetry.csv",
    ) -> Path:
        """Export a telemetry DataFrame to CSV.

        Args:
            frame: Telemetry from TelemetryRecorder.to_frame
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename
        frame.to_csv(filepath, index=False)
        return filepath

    def export_all(
        self,
        results: SimulationResults,
        prefix: str = "",
    ) -> dict[str, Path]:
        """Export all result formats.

        Args:
            results: Simulation results
            prefix: Optional prefix for filenames

        Returns:
            Dictionary of format -> filepath
        """
        prefix = f"{prefix}_" if prefix else ""

        return {
            "race_csv": self.export_race_results_csv(
                results, f"{prefix}race_results.csv"
            ),
            "statistics_json": self.export_statistics_json(
                results, f"{prefix}statistics.json"
            ),
        }


def _result_row(result: RaceResult, sim_idx: int | None = None) -> list:
    row = [
        result.position,
        result.lane,
        result.name,
        f"{result.finish_time:.0f}" if result.finish_time is not None else "",
        result.odds,
        ",".join(result.traits),
    ]
    return [sim_idx, *row] if sim_idx is not None else row
