"""Monte Carlo simulation runner and statistics."""

import logging
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from derbysim.config import RaceConfig, RaceSetupError
from derbysim.models import EventKind, implied_probability
from derbysim.names import generate_names
from derbysim.simulation.race import RaceResult, RaceSimulator

logger = logging.getLogger(__name__)


@dataclass
class LaneStatistics:
    """Aggregated statistics for a lane across simulations.

    Profiles are regenerated every race, so statistics follow the lane rather
    than a fixed set of skills.
    """

    lane: int
    name: str
    wins: int = 0
    podiums: int = 0
    unfinished: int = 0
    avg_position: float = 0.0
    avg_implied_probability: float = 0.0
    best_position: int = 0
    worst_position: int = 0
    positions: list[int] = field(default_factory=list)
    implied_probabilities: list[float] = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        """Win percentage."""
        return self.wins / len(self.positions) * 100 if self.positions else 0

    @property
    def podium_rate(self) -> float:
        """Podium percentage."""
        return self.podiums / len(self.positions) * 100 if self.positions else 0


@dataclass
class TraitStatistics:
    """How entrants carrying a trait performed."""

    trait: str
    starts: int = 0
    wins: int = 0

    @property
    def win_rate(self) -> float:
        """Win percentage."""
        return self.wins / self.starts * 100 if self.starts else 0


@dataclass
class EventStatistics:
    """Aggregated event counts across simulations."""

    counts: dict[str, int] = field(default_factory=dict)
    total_events: int = 0


@dataclass
class SimulationResults:
    """Results from Monte Carlo simulation."""

    num_simulations: int
    lane_stats: dict[int, LaneStatistics]
    trait_stats: dict[str, TraitStatistics]
    race_results: list[list[RaceResult]]
    event_stats: EventStatistics = field(default_factory=EventStatistics)
    avg_winning_time: float = 0.0

    def get_win_probabilities(self) -> dict[int, float]:
        """Get win probability for each lane."""
        return {
            lane: stats.win_rate
            for lane, stats in sorted(
                self.lane_stats.items(),
                key=lambda x: x[1].wins,
                reverse=True,
            )
        }

    def get_position_distribution(self, lane: int) -> dict[int, float]:
        """Get finishing position distribution for a lane."""
        if lane not in self.lane_stats:
            return {}

        positions = self.lane_stats[lane].positions
        counts: dict[int, int] = defaultdict(int)
        for pos in positions:
            counts[pos] += 1

        return {
            pos: count / len(positions) * 100
            for pos, count in sorted(counts.items())
        }

    def get_favourite_win_rate(self) -> float:
        """Percentage of races won by the entrant quoted the shortest odds."""
        if not self.race_results:
            return 0.0
        wins = 0
        for results in self.race_results:
            shortest = min(r.odds for r in results)
            if results[0].odds == shortest:
                wins += 1
        return wins / len(self.race_results) * 100


def _run_single_simulation(args: tuple) -> tuple[list[RaceResult], dict[str, int]]:
    """Run a single race (for multiprocessing).

    Args:
        args: Tuple of (config_data, names, seed)

    Returns:
        Tuple of (race_results, event_counts)
    """
    config_data, names, seed = args
    config = RaceConfig.model_validate(config_data)

    rng = np.random.default_rng(seed)
    simulator = RaceSimulator(rng=rng, finish_policy=config.finish_policy)
    state = simulator.setup_race(config.track(), names=names)
    results = simulator.run_race(state, tick_ms=config.tick_ms, max_ticks=config.max_ticks)

    event_counts: dict[str, int] = defaultdict(int)
    for event in simulator.event_engine.events:
        event_counts[event.kind.value] += 1

    return results, dict(event_counts)


class MonteCarloRunner:
    """Runs many seeded races with the same field."""

    def __init__(
        self,
        config: RaceConfig,
        names: list[str] | None = None,
        seed: int | None = None,
    ):
        """Initialize Monte Carlo runner.

        Args:
            config: Race configuration
            names: Entrant names, one per lane (generated from the seed if None)
            seed: Random seed for reproducibility

        Raises:
            RaceSetupError: If the names do not match config.num_entrants
        """
        if names is not None and len(names) != config.num_entrants:
            raise RaceSetupError(
                f"Got {len(names)} names for a field of {config.num_entrants}"
            )
        self.config = config
        if seed is None:
            seed = config.seed
        self.base_seed = seed if seed is not None else int(np.random.default_rng().integers(0, 2**31))
        if names is None:
            names = generate_names(config.num_entrants, np.random.default_rng(self.base_seed))
        self.names = names

    def run(
        self,
        num_simulations: int = 1000,
        parallel: bool = True,
        max_workers: int | None = None,
    ) -> SimulationResults:
        """Run Monte Carlo simulations.

        Args:
            num_simulations: Number of races to run
            parallel: Whether to use parallel processing
            max_workers: Maximum parallel workers (None = CPU count)

        Returns:
            SimulationResults with aggregated statistics
        """
        config_data = self.config.model_dump()
        args_list = [
            (config_data, self.names, self.base_seed + i)
            for i in range(num_simulations)
        ]

        logger.info("Running %d simulations (parallel=%s)", num_simulations, parallel)

        if parallel and num_simulations > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(_run_single_simulation, args_list))
        else:
            outcomes = [_run_single_simulation(args) for args in args_list]

        all_race_results = [race_results for race_results, _ in outcomes]
        all_event_counts = [event_counts for _, event_counts in outcomes]

        winning_times = [
            results[0].finish_time
            for results in all_race_results
            if results and results[0].finish_time is not None
        ]

        return SimulationResults(
            num_simulations=num_simulations,
            lane_stats=self._aggregate_lane_statistics(all_race_results),
            trait_stats=self._aggregate_trait_statistics(all_race_results),
            race_results=all_race_results,
            event_stats=self._aggregate_event_statistics(all_event_counts),
            avg_winning_time=float(np.mean(winning_times)) if winning_times else 0.0,
        )

    def _aggregate_lane_statistics(
        self,
        race_results: list[list[RaceResult]],
    ) -> dict[int, LaneStatistics]:
        """Aggregate per-lane statistics from all simulations."""
        stats = {
            lane: LaneStatistics(lane=lane, name=name)
            for lane, name in enumerate(self.names)
        }

        for sim_results in race_results:
            for result in sim_results:
                lane_stat = stats.get(result.lane)
                if lane_stat is None:
                    continue

                lane_stat.positions.append(result.position)
                lane_stat.implied_probabilities.append(implied_probability(result.odds))

                if result.position == 1:
                    lane_stat.wins += 1
                if result.position <= 3:
                    lane_stat.podiums += 1
                if not result.finished:
                    lane_stat.unfinished += 1

        for lane_stat in stats.values():
            if lane_stat.positions:
                lane_stat.avg_position = float(np.mean(lane_stat.positions))
                lane_stat.avg_implied_probability = float(np.mean(lane_stat.implied_probabilities))
                lane_stat.best_position = min(lane_stat.positions)
                lane_stat.worst_position = max(lane_stat.positions)

        return stats

    @staticmethod
    def _aggregate_trait_statistics(
        race_results: list[list[RaceResult]],
    ) -> dict[str, TraitStatistics]:
        """Aggregate starts and wins per trait."""
        stats: dict[str, TraitStatistics] = {}
        for sim_results in race_results:
            for result in sim_results:
                for trait in result.traits:
                    trait_stat = stats.setdefault(trait, TraitStatistics(trait=trait))
                    trait_stat.starts += 1
                    if result.position == 1:
                        trait_stat.wins += 1
        return stats

    @staticmethod
    def _aggregate_event_statistics(event_counts: list[dict[str, int]]) -> EventStatistics:
        """Aggregate event counts from all simulations."""
        stats = EventStatistics(counts={kind.value: 0 for kind in EventKind})
        for counts in event_counts:
            for kind, count in counts.items():
                stats.counts[kind] = stats.counts.get(kind, 0) + count
                stats.total_events += count
        return stats

    def run_quick(self, num_simulations: int = 100) -> SimulationResults:
        """Run simulations without parallelization.

        Useful for testing or when running in environments
        where multiprocessing is problematic.
        """
        return self.run(num_simulations=num_simulations, parallel=False)
