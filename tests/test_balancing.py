import pytest

from derbysim.simulation import LapBalancer, PositioningEngine, RaceState

from conftest import make_entrant


def _standings(track, distances, finished=()):
    entrants = [make_entrant(lane) for lane in range(len(distances))]
    for entrant, distance in zip(entrants, distances):
        entrant.distance = distance
    for lane in finished:
        entrants[lane].finished = True
    state = RaceState(track=track, entrants=entrants)
    return entrants, PositioningEngine.standings(state)


def test_leader_with_big_lead_is_held_back(track):
    entrants, standings = _standings(track, [3100.0, 3000.0])

    change = LapBalancer().apply(entrants[0], standings, track)

    assert change == pytest.approx(-0.08)
    assert entrants[0].momentum == pytest.approx(-0.08)


def test_leader_with_small_lead_untouched(track):
    entrants, standings = _standings(track, [3050.0, 3000.0])

    assert LapBalancer().apply(entrants[0], standings, track) == 0.0
    assert entrants[0].momentum == 0.0


@pytest.mark.parametrize("lane, expected", [(1, 0.08 + 0.25 * 0.12), (3, 0.08 + 0.75 * 0.12)])
def test_trailers_boosted_by_position(track, lane, expected):
    entrants, standings = _standings(track, [3000.0, 2900.0, 2800.0, 2700.0])

    LapBalancer().apply(entrants[lane], standings, track)

    assert entrants[lane].momentum == pytest.approx(expected)
    assert entrants[lane].momentum <= 0.2


def test_finished_entrants_excluded(track):
    # Lane 0 is home; lane 1 leads those still racing
    entrants, standings = _standings(track, [4010.0, 3100.0, 3000.0], finished=[0])

    LapBalancer().apply(entrants[1], standings, track)

    assert entrants[1].momentum == pytest.approx(-0.08)


def test_no_balancing_for_lone_runner(track):
    entrants, standings = _standings(track, [4010.0, 3000.0], finished=[0])

    assert LapBalancer().apply(entrants[1], standings, track) == 0.0
    assert entrants[1].momentum == 0.0
