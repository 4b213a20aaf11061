"""Monte Carlo analysis and statistics."""

from .montecarlo import MonteCarloRunner, SimulationResults

__all__ = ["MonteCarloRunner", "SimulationResults"]
