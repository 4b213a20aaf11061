import numpy as np
import pytest

from derbysim.models import Entrant, LapModifier, Profile, Track
from derbysim.simulation import RaceSimulator, RaceState


class MidpointRandom:
    """Random source that always returns the middle of the requested range."""

    def random(self) -> float:
        return 0.5

    def uniform(self, low: float, high: float) -> float:
        return (low + high) / 2

    def integers(self, low: int, high: int) -> int:
        return (low + high - 1) // 2


class ScriptedRandom(MidpointRandom):
    """Midpoint source whose random() draws come from a script first."""

    def __init__(self, draws):
        self.draws = list(draws)

    def random(self) -> float:
        if self.draws:
            return self.draws.pop(0)
        return 0.5


def make_profile(
    base_speed: float = 3.0,
    stamina: float = 1.0,
    acceleration: float = 0.4,
    luck_factor: float = 0.1,
    laps: int = 4,
) -> Profile:
    return Profile(
        base_speed=base_speed,
        stamina=stamina,
        acceleration=acceleration,
        luck_factor=luck_factor,
        traits=["Fast"],
        odds=4,
        lap_modifiers=[LapModifier() for _ in range(laps)],
    )


def make_entrant(lane: int = 0, name: str | None = None, **profile_kwargs) -> Entrant:
    return Entrant(
        lane=lane,
        name=name or f"Horse {lane + 1}",
        profile=make_profile(**profile_kwargs),
    )


@pytest.fixture
def midpoint_rng():
    return MidpointRandom()


@pytest.fixture
def track():
    return Track(track_length=1000, total_laps=4, speed_scale=1.0)


@pytest.fixture
def seeded_rng():
    return np.random.default_rng(1234)


@pytest.fixture
def started_state(track):
    """Two-entrant race already started at t=0."""
    state = RaceState(track=track, entrants=[make_entrant(0), make_entrant(1)])
    state.race_start_time = 0.0
    state.race_in_progress = True
    return state


@pytest.fixture
def simulator(seeded_rng):
    return RaceSimulator(rng=seeded_rng)
