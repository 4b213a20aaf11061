"""Race configuration."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from derbysim.models import Track


class RaceSetupError(ValueError):
    """Raised when a race cannot be set up with the given field."""


class FinishPolicy(str, Enum):
    """How a finish is detected."""

    # Distance reached the race total on this tick, however far it overshot
    CROSSING = "crossing"
    # Distance reached the race total and the lap distance is inside the finish window
    WINDOW = "window"


class RaceConfig(BaseModel):
    """Settings for setting up and running a race."""

    track_length: float = Field(default=1000.0, gt=0, description="Lap length")
    total_laps: int = Field(default=4, ge=1, description="Laps in the race")
    speed_scale: float = Field(default=1.0, ge=0.7, description="Track-speed scale")
    finish_window: float = Field(default=50.0, ge=0.0, description="Finish window length")
    num_entrants: int = Field(default=12, ge=2, description="Field size")
    tick_ms: float = Field(default=16.0, gt=0, description="Fixed tick length for run_race")
    max_ticks: int = Field(default=20000, gt=0, description="Tick limit for run_race")
    seed: int | None = Field(default=None, description="Random seed")
    finish_policy: FinishPolicy = Field(default=FinishPolicy.CROSSING)

    def track(self) -> Track:
        """Build the track described by this config."""
        return Track(
            track_length=self.track_length,
            total_laps=self.total_laps,
            speed_scale=self.speed_scale,
            finish_window=self.finish_window,
        )


def load_config(path: str | Path) -> RaceConfig:
    """Load and validate a race config from a JSON file.

    Args:
        path: Path to a JSON object with RaceConfig fields

    Returns:
        Validated RaceConfig
    """
    with open(path) as f:
        data = json.load(f)
    return RaceConfig.model_validate(data)
