import numpy as np
import pytest

from derbysim.simulation.stats import StatGenerator

from conftest import MidpointRandom


class LowRandom(MidpointRandom):
    def integers(self, low, high):
        return low


def test_generated_profiles_stay_within_formula_bounds():
    generator = StatGenerator(rng=np.random.default_rng(7))

    for _ in range(10_000):
        profile = generator.generate_profile(total_laps=4)
        assert 2.7 <= profile.base_speed <= 6.3
        assert 0.89 <= profile.stamina <= 2.1
        assert 0.44 <= profile.acceleration <= 1.05
        assert 0.05 <= profile.luck_factor <= 0.25
        assert 2 <= profile.odds <= 15
        assert profile.traits


def test_lap_modifiers_one_per_lap_within_range():
    generator = StatGenerator(rng=np.random.default_rng(3))
    profile = generator.generate_profile(total_laps=6)

    assert len(profile.lap_modifiers) == 6
    for modifier in profile.lap_modifiers:
        assert -0.1 <= modifier.speed_boost <= 0.1
        assert -0.08 <= modifier.stamina_boost <= 0.08


def test_midpoint_profile_matches_formula():
    profile = StatGenerator(rng=MidpointRandom()).generate_profile(total_laps=4)

    # Equal weights give each stat a third of the 3.75 budget
    assert profile.base_speed == pytest.approx(3.75 / 3 * 2.5 + 1.0)
    assert profile.stamina == pytest.approx(3.75 / 3 * 0.8 + 0.4)
    assert profile.acceleration == pytest.approx(3.75 / 3 * 0.4 + 0.2)
    assert profile.luck_factor == pytest.approx(0.15)
    assert profile.traits == ["Fast", "Endurance", "Quick Starter"]
    assert all(m.speed_boost == 0 and m.stamina_boost == 0 for m in profile.lap_modifiers)


@pytest.mark.parametrize(
    "stats, expected",
    [
        ((3.0, 1.2, 0.6), ["Fast", "Endurance", "Quick Starter"]),
        ((2.9, 0.9, 0.4), ["Fast"]),
        ((2.0, 1.1, 0.4), ["Endurance"]),
        ((2.0, 0.8, 0.55), ["Quick Starter"]),
        ((2.8, 1.0, 0.5), ["Balanced"]),
    ],
)
def test_traits_thresholds(stats, expected):
    assert StatGenerator.traits_for(*stats) == expected


@pytest.mark.parametrize(
    "traits, expected",
    [
        (["Fast", "Endurance"], 4),
        (["Endurance", "Quick Starter"], 5),
        (["Quick Starter"], 6),
        (["Balanced"], 8),
    ],
)
def test_odds_follow_primary_trait(traits, expected):
    assert StatGenerator(rng=MidpointRandom()).compute_odds(traits) == expected


def test_odds_clamped_to_minimum():
    # Lowest Fast odds (3) with the largest negative jitter (-3)
    assert StatGenerator(rng=LowRandom()).compute_odds(["Fast"]) == 2


def test_odds_display():
    profile = StatGenerator(rng=MidpointRandom()).generate_profile(total_laps=1)
    assert profile.odds_display == f"{profile.odds}-1"
    assert profile.implied_probability == pytest.approx(1 / (profile.odds + 1))
