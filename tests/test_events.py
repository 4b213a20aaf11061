import pytest

from derbysim.models import ActiveEvent, EventKind
from derbysim.simulation.events import EventEngine

from conftest import ScriptedRandom


def _ready(state, catch_up=0.0):
    entrant = state.entrants[0]
    entrant.next_event_time = 0.0
    entrant.catch_up_factor = catch_up
    return entrant


def test_comeback_effort_when_behind(started_state):
    entrant = _ready(started_state, catch_up=0.2)
    engine = EventEngine(rng=ScriptedRandom([0.26]))

    event = engine.step(entrant, started_state, current_time=100.0, elapsed_ms=16)

    assert event is not None
    assert event.kind == EventKind.COMEBACK_EFFORT
    assert entrant.active_event.kind == EventKind.COMEBACK_EFFORT
    assert entrant.event_multiplier == pytest.approx(1.2)
    assert entrant.active_event.remaining_ms == pytest.approx(1500)


def test_comeback_falls_through_to_no_event_when_not_behind(started_state):
    entrant = _ready(started_state, catch_up=0.0)
    engine = EventEngine(rng=ScriptedRandom([0.26]))

    event = engine.step(entrant, started_state, current_time=100.0, elapsed_ms=16)

    assert event is None
    assert entrant.active_event is None
    assert entrant.event_multiplier == 1.0
    assert entrant.next_event_time == pytest.approx(100.0 + 13000.0)


@pytest.mark.parametrize(
    "roll, kind, multiplier, duration",
    [
        (0.05, EventKind.SPEED_BURST, 1.15, 1400),
        (0.14, EventKind.SLOWDOWN, 0.9, 1400),
    ],
)
def test_timed_events(started_state, roll, kind, multiplier, duration):
    entrant = _ready(started_state)
    engine = EventEngine(rng=ScriptedRandom([roll]))

    engine.step(entrant, started_state, current_time=50.0, elapsed_ms=16)

    assert entrant.active_event.kind == kind
    assert entrant.event_multiplier == pytest.approx(multiplier)
    assert entrant.active_event.remaining_ms == pytest.approx(duration)
    assert entrant.event_label == kind.value


def test_momentum_shift_up(started_state):
    entrant = _ready(started_state)
    engine = EventEngine(rng=ScriptedRandom([0.2, 0.3]))

    event = engine.step(entrant, started_state, current_time=200.0, elapsed_ms=16)

    assert event.kind == EventKind.MOMENTUM_SHIFT
    assert entrant.active_event is None
    assert entrant.momentum == pytest.approx(0.125)
    assert entrant.next_event_time == pytest.approx(200.0 + 13000.0)


def test_momentum_shift_down(started_state):
    entrant = _ready(started_state)
    engine = EventEngine(rng=ScriptedRandom([0.2, 0.7]))

    engine.step(entrant, started_state, current_time=200.0, elapsed_ms=16)

    assert entrant.momentum == pytest.approx(-0.1)


def test_no_event_before_scheduled_time(started_state):
    entrant = started_state.entrants[0]
    entrant.next_event_time = 5000.0
    engine = EventEngine(rng=ScriptedRandom([0.01]))

    assert engine.step(entrant, started_state, current_time=4999.0, elapsed_ms=16) is None
    assert entrant.active_event is None
    # The scripted draw was not consumed
    assert engine.rng.draws == [0.01]


def test_schedule_is_relative_to_race_start(started_state):
    started_state.race_start_time = 10_000.0
    entrant = _ready(started_state)
    entrant.next_event_time = 3000.0
    engine = EventEngine(rng=ScriptedRandom([0.9]))

    engine.step(entrant, started_state, current_time=12_000.0, elapsed_ms=16)
    assert entrant.next_event_time == 3000.0

    engine.step(entrant, started_state, current_time=13_000.0, elapsed_ms=16)
    assert entrant.next_event_time == pytest.approx(3000.0 + 13000.0)


def test_active_event_counts_down_and_expires(started_state):
    entrant = started_state.entrants[0]
    entrant.active_event = ActiveEvent(kind=EventKind.SPEED_BURST, multiplier=1.15, remaining_ms=100)
    engine = EventEngine(rng=ScriptedRandom([0.01]))

    engine.step(entrant, started_state, current_time=1000.0, elapsed_ms=16)
    assert entrant.active_event.remaining_ms == pytest.approx(84)

    engine.step(entrant, started_state, current_time=1100.0, elapsed_ms=100)
    assert entrant.active_event is None
    assert entrant.event_multiplier == 1.0
    assert entrant.next_event_time == pytest.approx(1100.0 + 13000.0)
    # Expiry never rolls a new event in the same tick
    assert engine.rng.draws == [0.01]


def test_no_events_before_start(started_state):
    started_state.race_start_time = None
    entrant = _ready(started_state)
    engine = EventEngine(rng=ScriptedRandom([0.01]))

    assert engine.step(entrant, started_state, current_time=100.0, elapsed_ms=16) is None
    assert entrant.active_event is None


def test_history_recorded_and_reset(started_state):
    entrant = _ready(started_state)
    engine = EventEngine(rng=ScriptedRandom([0.05]))

    engine.step(entrant, started_state, current_time=100.0, elapsed_ms=16)
    assert len(engine.events) == 1
    assert engine.events[0].lane == entrant.lane

    engine.reset()
    assert engine.events == []


def test_first_event_window():
    engine = EventEngine(rng=ScriptedRandom([]))
    assert engine.first_event_time() == pytest.approx(5000.0)
