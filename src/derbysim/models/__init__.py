"""Data models for horse race simulation."""

from .entrant import ActiveEvent, Entrant, EventKind, LapModifier, Profile, implied_probability
from .track import Track

__all__ = [
    "ActiveEvent",
    "Entrant",
    "EventKind",
    "LapModifier",
    "Profile",
    "Track",
    "implied_probability",
]
