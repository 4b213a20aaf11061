"""Race positions and pack-balancing factors."""

import logging
from dataclasses import dataclass, field

from derbysim.models import Entrant, Track
from derbysim.rng import RandomSource, default_rng
from derbysim.simulation.state import RaceState

logger = logging.getLogger(__name__)

# Fraction of the race after which the leader's label is hidden
FINAL_STRETCH = 0.9


@dataclass
class Standings:
    """Ranking of the field read from distances at one instant.

    Finished entrants rank first, in finishing order. Entrants still racing
    follow by descending distance; ties keep field order.
    """

    order: list[int] = field(default_factory=list)
    racing: list[int] = field(default_factory=list)
    distances: dict[int, float] = field(default_factory=dict)

    def rank_of(self, lane: int) -> int:
        """1-indexed overall rank."""
        return self.order.index(lane) + 1

    def racing_index(self, lane: int) -> int:
        """0-based position among entrants still racing."""
        return self.racing.index(lane)

    @property
    def leader(self) -> int | None:
        """Lane leading the entrants still racing."""
        return self.racing[0] if self.racing else None


class PositioningEngine:
    """Ranks the field and computes catch-up and lead-handicap factors."""

    def __init__(self, rng: RandomSource | None = None):
        """Initialize the positioning engine.

        Args:
            rng: Random source
        """
        self.rng = rng if rng is not None else default_rng()

    @staticmethod
    def standings(state: RaceState) -> Standings:
        """Rank the field from current distances."""
        finished_lanes = list(state.finish_order)
        for entrant in state.entrants:
            # Entrants marked finished outside the controller still rank ahead
            if entrant.finished and entrant.lane not in finished_lanes:
                finished_lanes.append(entrant.lane)

        racing = sorted(
            (e for e in state.entrants if not e.finished),
            key=lambda e: -e.distance,
        )
        racing_lanes = [e.lane for e in racing]

        return Standings(
            order=finished_lanes + racing_lanes,
            racing=racing_lanes,
            distances={e.lane: e.distance for e in state.entrants},
        )

    @staticmethod
    def assign_ranks(state: RaceState, standings: Standings) -> None:
        """Write overall ranks for the whole field."""
        for entrant in state.entrants:
            entrant.rank = standings.rank_of(entrant.lane)

    def apply(self, entrant: Entrant, standings: Standings, track: Track) -> None:
        """Update an entrant's rank and pack-balancing factors.

        Args:
            entrant: Entrant to update
            standings: Ranking for the current tick
            track: Current track
        """
        entrant.rank = standings.rank_of(entrant.lane)
        if entrant.finished:
            return

        position = standings.racing_index(entrant.lane)
        field_size = len(standings.racing)
        distance = standings.distances[entrant.lane]

        if position > 0:
            leader_distance = standings.distances[standings.leader]
            percent_behind = (leader_distance - distance) / track.track_length

            position_factor = min(0.15, 0.02 * position)
            distance_factor = min(0.15, percent_behind)
            entrant.catch_up_factor = (
                position_factor + distance_factor + self.rng.uniform(0, 0.05)
            )

            if position == field_size - 1:
                entrant.catch_up_factor += 0.1

            # Occasional rubber-band kick for the back half of the field
            if self.rng.random() < 0.01 and position > field_size / 2:
                entrant.momentum += 0.15
                logger.debug("%s makes a move to catch up!", entrant.name)
        else:
            if field_size > 1:
                second_distance = standings.distances[standings.racing[1]]
                percent_ahead = (distance - second_distance) / track.track_length
            else:
                percent_ahead = 0.0

            entrant.lead_handicap = min(0.2, percent_ahead * 1.5)

            if self.rng.random() < 0.03 and percent_ahead > 0.04:
                entrant.momentum -= 0.08
                logger.debug("%s eases the pace slightly!", entrant.name)

            entrant.catch_up_factor = 0.0

    @staticmethod
    def label_visible(entrant: Entrant, track: Track) -> bool:
        """Whether the renderer should show this entrant's name label.

        Only the leader is labelled, and all labels are hidden in the
        final stretch.
        """
        if entrant.rank != 1 or entrant.finished:
            return False
        return entrant.distance / track.total_race_distance <= FINAL_STRETCH
