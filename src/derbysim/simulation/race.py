"""Race simulation engine."""

import logging
from dataclasses import dataclass, field
from typing import Callable

from derbysim.config import FinishPolicy, RaceSetupError
from derbysim.models import Entrant, Track
from derbysim.names import default_colors, generate_names
from derbysim.rng import RandomSource, default_rng
from derbysim.simulation.balancing import LapBalancer
from derbysim.simulation.events import EventEngine
from derbysim.simulation.positioning import PositioningEngine, Standings
from derbysim.simulation.state import RaceState
from derbysim.simulation.stats import StatGenerator

logger = logging.getLogger(__name__)

# Distance units covered per unit of speed per second, before track scaling
DISTANCE_PER_SPEED = 80.0

LAP_SURGE_CHANCE = 0.3
LAP_SURGE_MAX = 0.15

MOMENTUM_DECAY = 0.995
MOMENTUM_EPSILON = 0.01

MIN_STAMINA_FACTOR = 0.7
MIN_RACE_SPEED = 0.7


@dataclass(frozen=True)
class EntrantSnapshot:
    """Read-only view of an entrant after a tick, for the renderer."""

    lane: int
    name: str
    distance: float
    current_lap: int
    current_speed: float
    rank: int | None
    finished: bool
    finish_time: float | None
    event: str | None
    label_visible: bool


@dataclass
class RaceResult:
    """Final race result for an entrant."""

    position: int
    lane: int
    name: str
    finish_time: float | None  # ms after the start, None if not finished
    odds: int
    traits: list[str] = field(default_factory=list)
    distance: float = 0.0

    @property
    def finished(self) -> bool:
        """Whether the entrant crossed the line."""
        return self.finish_time is not None


FinishCallback = Callable[[int, float, int], None]
CompleteCallback = Callable[[list[RaceResult]], None]


class RaceSimulator:
    """Simulates a horse race tick by tick."""

    def __init__(
        self,
        rng: RandomSource | None = None,
        finish_policy: FinishPolicy = FinishPolicy.CROSSING,
        on_finish: FinishCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ):
        """Initialize race simulator.

        Args:
            rng: Random source shared by all engines
            finish_policy: How finishes are detected
            on_finish: Called with (lane, finish_time, rank) when an entrant finishes
            on_complete: Called once with the results when the whole field has finished
        """
        self.rng = rng if rng is not None else default_rng()
        self.finish_policy = FinishPolicy(finish_policy)
        self.on_finish = on_finish
        self.on_complete = on_complete
        self.stat_generator = StatGenerator(rng=self.rng)
        self.event_engine = EventEngine(rng=self.rng)
        self.positioning = PositioningEngine(rng=self.rng)
        self.lap_balancer = LapBalancer()

    def setup_race(
        self,
        track: Track,
        names: list[str] | None = None,
        colors: list[int] | None = None,
        num_entrants: int = 12,
    ) -> RaceState:
        """Create the field for a race.

        Args:
            track: Track to race on
            names: Entrant names, one per lane (generated if None)
            colors: Entrant colours, one per lane (palette if None)
            num_entrants: Field size when names are not given

        Returns:
            Fresh RaceState with all entrants at the start

        Raises:
            RaceSetupError: If the field has fewer than two entrants or
                names and colours do not line up
        """
        if names is not None:
            num_entrants = len(names)
        if num_entrants < 2:
            raise RaceSetupError(f"A race needs at least 2 entrants, got {num_entrants}")
        if colors is not None and len(colors) != num_entrants:
            raise RaceSetupError(
                f"Got {len(colors)} colours for {num_entrants} entrants"
            )

        names = names if names is not None else generate_names(num_entrants, self.rng)
        colors = colors if colors is not None else default_colors(num_entrants)

        entrants = []
        for lane, (name, color) in enumerate(zip(names, colors)):
            entrant = Entrant(
                lane=lane,
                name=name,
                color=color,
                profile=self.stat_generator.generate_profile(track.total_laps),
            )
            entrant.reset_race_state(next_event_time=self.event_engine.first_event_time())
            entrants.append(entrant)

        self.event_engine.reset()
        logger.info(
            "Race set up: %d entrants, %d laps of %.0f",
            len(entrants), track.total_laps, track.track_length,
        )
        return RaceState(track=track, entrants=entrants)

    def start_race(self, state: RaceState, current_time: float) -> None:
        """Start the race clock."""
        state.race_start_time = current_time
        state.current_time = current_time
        state.race_in_progress = True
        logger.info("Race started at %.0f ms", current_time)

    def reset_race(self, state: RaceState) -> None:
        """Reinitialize every entrant for a new race.

        Lane, name and colour persist; profiles are regenerated and all race
        state and pending events are cleared.
        """
        for entrant in state.entrants:
            entrant.profile = self.stat_generator.generate_profile(state.track.total_laps)
            entrant.reset_race_state(next_event_time=self.event_engine.first_event_time())

        state.race_start_time = None
        state.race_in_progress = False
        state.current_time = 0.0
        state.finish_order = []
        state.complete = False
        self.event_engine.reset()
        logger.info("Race reset")

    def tick(
        self,
        state: RaceState,
        current_time: float,
        elapsed_ms: float,
    ) -> list[EntrantSnapshot]:
        """Advance the whole field by one tick.

        Args:
            state: Current race state
            current_time: Clock time of this tick (ms)
            elapsed_ms: Time since the previous tick

        Returns:
            Snapshot of every entrant after the tick
        """
        state.current_time = current_time
        if state.race_in_progress:
            # Every entrant sees the field as it stood at the start of the tick
            standings = self.positioning.standings(state)
            crossings = []
            for entrant in state.entrants:
                crossing_time = self._move(entrant, state, elapsed_ms, current_time, standings)
                if crossing_time is not None:
                    crossings.append((crossing_time, entrant))
            self._record_finishes(state, crossings)
            self.positioning.assign_ranks(state, self.positioning.standings(state))
        return self.snapshot(state)

    def advance(
        self,
        entrant: Entrant,
        state: RaceState,
        elapsed_ms: float,
        current_time: float | None = None,
        standings: Standings | None = None,
    ) -> None:
        """Advance one entrant by one tick.

        Args:
            entrant: Entrant to move
            state: Current race state
            elapsed_ms: Time since the previous tick
            current_time: Clock time of this tick (defaults to state.current_time)
            standings: Ranking for this tick (read fresh if None)
        """
        crossing_time = self._move(entrant, state, elapsed_ms, current_time, standings)
        if crossing_time is not None:
            self._record_finishes(state, [(crossing_time, entrant)])

    def _move(
        self,
        entrant: Entrant,
        state: RaceState,
        elapsed_ms: float,
        current_time: float | None,
        standings: Standings | None,
    ) -> float | None:
        """Run one tick of physics for an entrant.

        Returns:
            Interpolated clock time at which the entrant crossed the line this
            tick, or None if it has not finished
        """
        if not state.race_in_progress or entrant.finished:
            return None

        track = state.track
        if current_time is None:
            current_time = state.current_time
        if standings is None:
            standings = self.positioning.standings(state)

        self._update_lap(entrant, track, standings)
        self.event_engine.step(entrant, state, current_time, elapsed_ms)
        self.positioning.apply(entrant, standings, track)

        if abs(entrant.momentum) > MOMENTUM_EPSILON:
            entrant.momentum *= MOMENTUM_DECAY
        else:
            entrant.momentum = 0.0

        profile = entrant.profile
        lap_modifier = profile.lap_modifier(entrant.current_lap)
        seconds = elapsed_ms / 1000

        race_progress = entrant.distance / track.total_race_distance
        stamina_factor = max(
            MIN_STAMINA_FACTOR,
            1 - race_progress / (profile.stamina + lap_modifier.stamina_boost),
        )
        random_factor = 1 + self.rng.uniform(-0.5, 0.5) * (profile.luck_factor * 0.5)
        event_factor = entrant.event_multiplier

        target_speed = (
            profile.base_speed * stamina_factor * random_factor * event_factor
            * (
                1
                + lap_modifier.speed_boost
                + entrant.catch_up_factor * 0.7
                - entrant.lead_handicap * 0.7
                + entrant.momentum * 0.8
            )
        )

        if entrant.current_speed < target_speed:
            acceleration_boost = 1 + entrant.catch_up_factor * 0.6
            entrant.current_speed += profile.acceleration * acceleration_boost * seconds * 0.8
        elif entrant.current_speed > target_speed * 1.05:
            entrant.current_speed -= profile.acceleration * 0.5 * seconds * 0.8

        min_speed = MIN_RACE_SPEED + entrant.catch_up_factor * 0.8
        entrant.current_speed = max(min_speed, entrant.current_speed)

        actual_speed = entrant.current_speed * stamina_factor * random_factor * event_factor
        previous_distance = entrant.distance
        entrant.distance += actual_speed * seconds * DISTANCE_PER_SPEED * track.speed_scale

        if not self._has_finished(entrant, track):
            return None
        fraction = self._crossing_fraction(previous_distance, entrant.distance, track)
        return current_time - elapsed_ms * (1 - fraction)

    def _update_lap(self, entrant: Entrant, track: Track, standings: Standings) -> None:
        """Recompute the lap and fire lap-change effects."""
        previous_lap = entrant.current_lap
        entrant.current_lap = track.lap_for_distance(entrant.distance)
        if entrant.current_lap <= previous_lap:
            return

        logger.debug("%s starting lap %d of %d", entrant.name, entrant.current_lap, track.total_laps)
        if self.rng.random() < LAP_SURGE_CHANCE:
            entrant.momentum += self.rng.uniform(0, LAP_SURGE_MAX)
            logger.debug("%s gets a surge of energy at the start of lap %d!", entrant.name, entrant.current_lap)

        if entrant.current_lap == track.total_laps and not entrant.final_lap_balanced:
            entrant.final_lap_balanced = True
            self.lap_balancer.apply(entrant, standings, track)

    def _has_finished(self, entrant: Entrant, track: Track) -> bool:
        """Check the finish condition for the active policy."""
        if entrant.finished or entrant.distance < track.total_race_distance:
            return False
        if self.finish_policy == FinishPolicy.WINDOW:
            lap_distance = track.lap_distance(entrant.distance)
            return 0 <= lap_distance <= track.finish_window
        return True

    def _crossing_fraction(self, previous: float, distance: float, track: Track) -> float:
        """Fraction of this tick's movement covered before reaching the line."""
        if self.finish_policy == FinishPolicy.WINDOW:
            line = distance - track.lap_distance(distance)
        else:
            line = track.total_race_distance
        if distance <= previous:
            return 1.0
        return min(1.0, max(0.0, (line - previous) / (distance - previous)))

    def _record_finishes(
        self,
        state: RaceState,
        crossings: list[tuple[float, Entrant]],
    ) -> None:
        """Record finishes in the order the line was crossed."""
        # sorted() is stable, so exact ties keep lane order
        for crossing_time, entrant in sorted(crossings, key=lambda c: c[0]):
            self._finish(entrant, state, crossing_time)

    def _finish(self, entrant: Entrant, state: RaceState, current_time: float) -> None:
        """Record a finish and complete the race once everyone is home."""
        entrant.finished = True
        entrant.finish_time = current_time
        state.finish_order.append(entrant.lane)
        entrant.rank = len(state.finish_order)

        logger.info(
            "%s finished the race in position %d (%d laps)",
            entrant.name, entrant.rank, state.track.total_laps,
        )
        if self.on_finish is not None:
            self.on_finish(entrant.lane, current_time, entrant.rank)

        if all(e.finished for e in state.entrants):
            state.race_in_progress = False
            state.complete = True
            results = self.results(state)
            logger.info("Race complete, winner: %s", results[0].name)
            if self.on_complete is not None:
                self.on_complete(results)

    def snapshot(self, state: RaceState) -> list[EntrantSnapshot]:
        """Build read-only snapshots of the field."""
        return [
            EntrantSnapshot(
                lane=e.lane,
                name=e.name,
                distance=e.distance,
                current_lap=e.current_lap,
                current_speed=e.current_speed,
                rank=e.rank,
                finished=e.finished,
                finish_time=e.finish_time,
                event=e.event_label,
                label_visible=self.positioning.label_visible(e, state.track),
            )
            for e in state.entrants
        ]

    def results(self, state: RaceState) -> list[RaceResult]:
        """Results ordered by finish, then by distance for entrants still out."""
        start = state.race_start_time or 0.0
        finished = [state.entrant(lane) for lane in state.finish_order]
        unfinished = sorted(state.racing, key=lambda e: -e.distance)

        results = []
        for position, entrant in enumerate(finished + unfinished, 1):
            results.append(RaceResult(
                position=position,
                lane=entrant.lane,
                name=entrant.name,
                finish_time=(
                    entrant.finish_time - start if entrant.finish_time is not None else None
                ),
                odds=entrant.profile.odds,
                traits=list(entrant.profile.traits),
                distance=entrant.distance,
            ))
        return results

    def run_race(
        self,
        state: RaceState,
        tick_ms: float = 16.0,
        max_ticks: int = 20000,
        start_time: float = 0.0,
    ) -> list[RaceResult]:
        """Run a race to completion on a fixed-step clock.

        Args:
            state: Race state (started here if not already running)
            tick_ms: Clock step per tick
            max_ticks: Give up after this many ticks
            start_time: Clock time of the start

        Returns:
            List of RaceResult sorted by finishing position
        """
        if not state.race_in_progress and not state.complete:
            self.start_race(state, start_time)

        current_time = state.current_time
        ticks = 0
        while state.race_in_progress and ticks < max_ticks:
            current_time += tick_ms
            self.tick(state, current_time, tick_ms)
            ticks += 1

        if not state.complete:
            logger.warning(
                "Race stopped after %d ticks with %d entrants still racing",
                ticks, len(state.racing),
            )
        return self.results(state)
