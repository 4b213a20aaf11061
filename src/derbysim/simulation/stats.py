"""Skill profile and odds generation."""

import logging

from derbysim.models import LapModifier, Profile
from derbysim.rng import RandomSource, default_rng

logger = logging.getLogger(__name__)

# Total skill points shared between speed, stamina and acceleration
SKILL_BUDGET = 3.75
SKILL_VARIANCE = 0.3

# Base odds range (inclusive) by primary trait, in order of precedence
ODDS_RANGES = (
    ("Fast", 3, 5),
    ("Endurance", 4, 6),
    ("Quick Starter", 5, 8),
    ("Balanced", 6, 10),
)
ODDS_JITTER = 3
MIN_ODDS = 2
MAX_ODDS = 15


class StatGenerator:
    """Generates entrant skill profiles."""

    def __init__(self, rng: RandomSource | None = None):
        """Initialize the stat generator.

        Args:
            rng: Random source (creates new if None)
        """
        self.rng = rng if rng is not None else default_rng()

    def generate_profile(self, total_laps: int) -> Profile:
        """Generate a fresh skill profile.

        Args:
            total_laps: Laps in the race (one lap modifier per lap)

        Returns:
            New Profile
        """
        budget = SKILL_BUDGET + self.rng.uniform(-SKILL_VARIANCE, SKILL_VARIANCE)

        speed_weight = self.rng.uniform(0.7, 1.3)
        stamina_weight = self.rng.uniform(0.6, 1.4)
        acceleration_weight = self.rng.uniform(0.6, 1.4)
        total_weight = speed_weight + stamina_weight + acceleration_weight

        base_speed = speed_weight / total_weight * budget * 2.5 + 1.0
        stamina = stamina_weight / total_weight * budget * 0.8 + 0.4
        acceleration = acceleration_weight / total_weight * budget * 0.4 + 0.2

        traits = self.traits_for(base_speed, stamina, acceleration)
        luck_factor = self.rng.uniform(0.05, 0.25)
        odds = self.compute_odds(traits)

        lap_modifiers = [
            LapModifier(
                speed_boost=float(self.rng.uniform(-0.1, 0.1)),
                stamina_boost=float(self.rng.uniform(-0.08, 0.08)),
            )
            for _ in range(total_laps)
        ]

        logger.debug(
            "Generated profile: speed=%.2f stamina=%.2f accel=%.2f traits=%s odds=%d-1",
            base_speed, stamina, acceleration, traits, odds,
        )

        return Profile(
            base_speed=float(base_speed),
            stamina=float(stamina),
            acceleration=float(acceleration),
            luck_factor=float(luck_factor),
            traits=traits,
            odds=odds,
            lap_modifiers=lap_modifiers,
        )

    @staticmethod
    def traits_for(base_speed: float, stamina: float, acceleration: float) -> list[str]:
        """Derive descriptive traits from stats."""
        traits = []
        if base_speed > 2.8:
            traits.append("Fast")
        if stamina > 1.0:
            traits.append("Endurance")
        if acceleration > 0.5:
            traits.append("Quick Starter")
        if not traits:
            traits.append("Balanced")
        return traits

    def compute_odds(self, traits: list[str]) -> int:
        """Quote odds from the entrant's primary trait.

        Args:
            traits: Trait labels, as produced by traits_for

        Returns:
            Odds N (displayed as N-1), clamped to [2, 15]
        """
        low, high = 6, 10
        for trait, range_low, range_high in ODDS_RANGES:
            if trait in traits:
                low, high = range_low, range_high
                break

        base_odds = int(self.rng.integers(low, high + 1))
        jitter = int(self.rng.integers(-ODDS_JITTER, ODDS_JITTER + 1))
        return max(MIN_ODDS, min(MAX_ODDS, base_odds + jitter))
