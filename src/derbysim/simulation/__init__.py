"""Simulation engine components."""

from .balancing import LapBalancer
from .events import EventEngine, RaceEvent
from .positioning import PositioningEngine, Standings
from .race import EntrantSnapshot, RaceResult, RaceSimulator
from .state import RaceState
from .stats import StatGenerator

__all__ = [
    "EntrantSnapshot",
    "EventEngine",
    "LapBalancer",
    "PositioningEngine",
    "RaceEvent",
    "RaceResult",
    "RaceSimulator",
    "RaceState",
    "Standings",
    "StatGenerator",
]
