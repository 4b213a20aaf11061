"""Per-entrant race events: bursts, slowdowns, momentum shifts, comebacks."""

import logging
from dataclasses import dataclass

from derbysim.models import ActiveEvent, Entrant, EventKind
from derbysim.rng import RandomSource, default_rng
from derbysim.simulation.state import RaceState

logger = logging.getLogger(__name__)

# Cumulative thresholds on a single uniform draw
SPEED_BURST_CHANCE = 0.12
SLOWDOWN_CHANCE = 0.16
MOMENTUM_SHIFT_CHANCE = 0.24
COMEBACK_CHANCE = 0.28

# Catch-up factor an entrant needs before a comeback effort is possible
COMEBACK_THRESHOLD = 0.2

# Gap between events (ms)
EVENT_GAP_MIN = 8000.0
EVENT_GAP_MAX = 18000.0

# First event window after the start (ms)
FIRST_EVENT_MIN = 3000.0
FIRST_EVENT_SPREAD = 4000.0


@dataclass
class RaceEvent:
    """Record of an event that started during the race."""

    kind: EventKind
    time: float
    lane: int
    description: str = ""


class EventEngine:
    """Drives each entrant's Idle/Active event state machine."""

    def __init__(self, rng: RandomSource | None = None):
        """Initialize the event engine.

        Args:
            rng: Random source
        """
        self.rng = rng if rng is not None else default_rng()
        self.events: list[RaceEvent] = []

    def reset(self) -> None:
        """Reset event history for a new race."""
        self.events = []

    def first_event_time(self) -> float:
        """Schedule the first event relative to the race start."""
        return FIRST_EVENT_MIN + self.rng.uniform(0, FIRST_EVENT_SPREAD)

    def step(
        self,
        entrant: Entrant,
        state: RaceState,
        current_time: float,
        elapsed_ms: float,
    ) -> RaceEvent | None:
        """Advance the entrant's event state by one tick.

        Args:
            entrant: Entrant to update
            state: Current race state
            current_time: Clock time of this tick (ms)
            elapsed_ms: Time since the previous tick

        Returns:
            Event that started this tick, if any
        """
        if state.race_start_time is None:
            return None

        race_time = current_time - state.race_start_time

        if entrant.active_event is not None:
            remaining = entrant.active_event.remaining_ms - elapsed_ms
            if remaining <= 0:
                logger.debug("%s's %s has ended", entrant.name, entrant.active_event.kind.value)
                entrant.active_event = None
                entrant.next_event_time = self._reschedule(race_time)
            else:
                entrant.active_event = entrant.active_event.model_copy(
                    update={"remaining_ms": remaining}
                )
            return None

        if race_time < entrant.next_event_time:
            return None

        return self._roll_event(entrant, current_time, race_time)

    def _roll_event(self, entrant: Entrant, current_time: float, race_time: float) -> RaceEvent | None:
        """Draw a new event for an idle entrant."""
        roll = self.rng.random()

        if roll < SPEED_BURST_CHANCE:
            entrant.active_event = ActiveEvent(
                kind=EventKind.SPEED_BURST,
                multiplier=1.15,
                remaining_ms=self.rng.uniform(800, 2000),
            )
            return self._record(entrant, current_time, f"{entrant.name} finds a burst of speed!")

        if roll < SLOWDOWN_CHANCE:
            entrant.active_event = ActiveEvent(
                kind=EventKind.SLOWDOWN,
                multiplier=0.9,
                remaining_ms=self.rng.uniform(800, 2000),
            )
            return self._record(entrant, current_time, f"{entrant.name} slows slightly")

        if roll < MOMENTUM_SHIFT_CHANCE:
            if self.rng.random() < 0.5:
                entrant.momentum += self.rng.uniform(0.1, 0.15)
                description = f"{entrant.name} makes a move!"
            else:
                entrant.momentum -= self.rng.uniform(0.05, 0.15)
                description = f"{entrant.name} loses a bit of momentum"
            entrant.next_event_time = self._reschedule(race_time)
            return self._record(
                entrant, current_time, description, kind=EventKind.MOMENTUM_SHIFT
            )

        if roll < COMEBACK_CHANCE and entrant.catch_up_factor >= COMEBACK_THRESHOLD:
            entrant.active_event = ActiveEvent(
                kind=EventKind.COMEBACK_EFFORT,
                multiplier=1.2,
                remaining_ms=self.rng.uniform(1000, 2000),
            )
            return self._record(
                entrant, current_time, f"{entrant.name} is making a comeback effort!"
            )

        # No event this time
        entrant.next_event_time = self._reschedule(race_time)
        return None

    def _reschedule(self, race_time: float) -> float:
        """Time (relative to race start) of the next event check."""
        return race_time + self.rng.uniform(EVENT_GAP_MIN, EVENT_GAP_MAX)

    def _record(
        self,
        entrant: Entrant,
        current_time: float,
        description: str,
        kind: EventKind | None = None,
    ) -> RaceEvent:
        """Log and keep a record of a started event."""
        event = RaceEvent(
            kind=kind if kind is not None else entrant.active_event.kind,
            time=current_time,
            lane=entrant.lane,
            description=description,
        )
        logger.debug(description)
        self.events.append(event)
        return event
