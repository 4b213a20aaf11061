"""Entrant model with skill profile and race state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def implied_probability(odds: int) -> float:
    """Win probability implied by N-1 odds."""
    return 1.0 / (odds + 1)


class EventKind(str, Enum):
    """Kinds of per-entrant race events."""

    SPEED_BURST = "burst of speed"
    SLOWDOWN = "slight slowdown"
    MOMENTUM_SHIFT = "momentum shift"
    COMEBACK_EFFORT = "comeback effort"


class ActiveEvent(BaseModel):
    """An event currently affecting an entrant's speed."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    multiplier: float = Field(..., gt=0, description="Speed multiplier while active")
    remaining_ms: float = Field(..., description="Time left before the event ends")


class LapModifier(BaseModel):
    """Per-lap perturbation of speed and stamina."""

    speed_boost: float = Field(default=0.0, ge=-0.1, le=0.1)
    stamina_boost: float = Field(default=0.0, ge=-0.08, le=0.08)


class Profile(BaseModel):
    """Skill profile, regenerated at creation and on every reset."""

    base_speed: float = Field(..., gt=0, description="Cruising speed before modifiers")
    stamina: float = Field(..., gt=0, description="Resistance to fatigue over the race")
    acceleration: float = Field(..., gt=0, description="Speed gained per second")
    luck_factor: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Scale of per-tick random speed variation",
    )
    traits: list[str] = Field(default_factory=list, description="Qualitative labels")
    odds: int = Field(default=6, ge=2, le=15, description="Quoted odds (N-1)")
    lap_modifiers: list[LapModifier] = Field(
        default_factory=list,
        description="One modifier per lap of the race",
    )

    @property
    def odds_display(self) -> str:
        """Odds as shown on a race card."""
        return f"{self.odds}-1"

    @property
    def implied_probability(self) -> float:
        """Win probability implied by the odds."""
        return implied_probability(self.odds)

    def lap_modifier(self, lap: int) -> LapModifier:
        """Get the modifier for a 1-indexed lap (neutral if none was generated)."""
        index = lap - 1
        if 0 <= index < len(self.lap_modifiers):
            return self.lap_modifiers[index]
        return LapModifier()


class Entrant(BaseModel):
    """A competitor in the race."""

    lane: int = Field(..., ge=0, description="Lane index, also the entrant id")
    name: str = Field(..., description="Display name")
    color: int = Field(default=0xFFFFFF, ge=0, le=0xFFFFFF, description="RGB colour")
    profile: Profile

    # Race state (mutable during simulation)
    current_speed: float = Field(default=0.0)
    distance: float = Field(default=0.0)
    current_lap: int = Field(default=1)
    finished: bool = Field(default=False)
    finish_time: float | None = Field(default=None, description="Clock time of finish (ms)")
    rank: int | None = Field(default=None, description="1-indexed race position")
    momentum: float = Field(default=0.0)
    catch_up_factor: float = Field(default=0.0)
    lead_handicap: float = Field(default=0.0)
    active_event: ActiveEvent | None = Field(default=None)
    next_event_time: float = Field(
        default=0.0,
        description="Time after race start at which the next event is considered (ms)",
    )
    final_lap_balanced: bool = Field(default=False)

    @property
    def event_multiplier(self) -> float:
        """Speed multiplier from the active event (1.0 when idle)."""
        return self.active_event.multiplier if self.active_event else 1.0

    @property
    def event_label(self) -> str | None:
        """Label of the active event, if any."""
        return self.active_event.kind.value if self.active_event else None

    def reset_race_state(self, next_event_time: float = 0.0) -> None:
        """Reset mutable state for a new race."""
        self.current_speed = 0.0
        self.distance = 0.0
        self.current_lap = 1
        self.finished = False
        self.finish_time = None
        self.rank = None
        self.momentum = 0.0
        self.catch_up_factor = 0.0
        self.lead_handicap = 0.0
        self.active_event = None
        self.next_event_time = next_event_time
        self.final_lap_balanced = False
