"""Console output formatting."""

from derbysim.analysis.montecarlo import SimulationResults
from derbysim.models import Entrant
from derbysim.simulation.race import RaceResult


def _format_time(ms: float | None) -> str:
    if ms is None:
        return "DNF"
    seconds = ms / 1000
    mins = int(seconds // 60)
    return f"{mins}:{seconds % 60:05.2f}"


class ConsoleOutput:
    """Formats race cards and results for console display."""

    @staticmethod
    def print_field(entrants: list[Entrant]) -> None:
        """Print the race card.

        Args:
            entrants: Field in lane order
        """
        print("\n" + "=" * 77)
        print("RACE CARD")
        print("=" * 77)
        print(f"{'#':<4} {'Name':<24} {'Odds':<6} {'Win%':<6} {'Speed':<6} {'Stam':<6} {'Accel':<6} Traits")
        print("-" * 77)

        for entrant in entrants:
            profile = entrant.profile
            print(
                f"{entrant.lane + 1:<4} "
                f"{entrant.name:<24} "
                f"{profile.odds_display:<6} "
                f"{profile.implied_probability * 100:<6.1f} "
                f"{profile.base_speed:<6.2f} "
                f"{profile.stamina:<6.2f} "
                f"{profile.acceleration:<6.2f} "
                f"{', '.join(profile.traits)}"
            )

        print("=" * 77)

    @staticmethod
    def print_race_results(results: list[RaceResult]) -> None:
        """Print race results to console.

        Args:
            results: Race results sorted by position
        """
        print("\n" + "=" * 60)
        print("RACE RESULTS")
        print("=" * 60)
        print(f"{'Pos':<4} {'#':<4} {'Name':<24} {'Time/Gap':<12} {'Odds':<6}")
        print("-" * 60)

        winner_time = None
        for result in sorted(results, key=lambda r: r.position):
            if result.finish_time is None:
                time_str = "DNF"
            elif winner_time is None:
                winner_time = result.finish_time
                time_str = _format_time(result.finish_time)
            else:
                time_str = f"+{(result.finish_time - winner_time) / 1000:.2f}s"

            print(
                f"{result.position:<4} "
                f"{result.lane + 1:<4} "
                f"{result.name:<24} "
                f"{time_str:<12} "
                f"{result.odds}-1"
            )

        print("=" * 60)

    @staticmethod
    def print_monte_carlo_summary(results: SimulationResults) -> None:
        """Print Monte Carlo simulation summary.

        Args:
            results: Aggregated simulation results
        """
        print("\n" + "=" * 70)
        print(f"MONTE CARLO SIMULATION RESULTS ({results.num_simulations} races)")
        print("=" * 70)

        print("\nWIN PROBABILITIES (simulated vs. implied by odds):")
        print("-" * 60)
        for lane, prob in results.get_win_probabilities().items():
            stats = results.lane_stats[lane]
            implied = stats.avg_implied_probability * 100
            bar = "#" * int(prob / 2)
            print(f"#{lane + 1:<3} {stats.name:<24} {prob:5.1f}% (odds {implied:5.1f}%) {bar}")

        print("\nAVERAGE FINISHING POSITION:")
        print("-" * 60)
        for lane, stats in sorted(results.lane_stats.items(), key=lambda x: x[1].avg_position):
            if stats.positions:
                print(
                    f"#{lane + 1:<3} {stats.name:<24} "
                    f"Avg: {stats.avg_position:5.2f}  "
                    f"Best: {stats.best_position:2d}  "
                    f"Worst: {stats.worst_position:2d}"
                )

        print("\nWIN RATE BY TRAIT:")
        print("-" * 60)
        for trait, stats in sorted(results.trait_stats.items()):
            print(f"  {trait:<16} {stats.win_rate:5.1f}% of {stats.starts} starts")

        print(f"\nFavourite won {results.get_favourite_win_rate():.1f}% of races")
        print(f"Average winning time: {_format_time(results.avg_winning_time)}")

        print("\nRACE EVENT STATISTICS:")
        print("-" * 60)
        runs = results.num_simulations or 1
        for kind, count in results.event_stats.counts.items():
            print(f"  {kind:<18} {count:5d} total ({count / runs:.2f}/race)")

        print("=" * 70)
