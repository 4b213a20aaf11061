"""Final lap balancing."""

import logging

from derbysim.models import Entrant, Track
from derbysim.simulation.positioning import Standings

logger = logging.getLogger(__name__)

# Lead (fraction of a lap) beyond which the leader is held back
LEADER_MARGIN = 0.06
LEADER_PENALTY = 0.08

TRAILER_BASE_BOOST = 0.08
TRAILER_SCALED_BOOST = 0.12
TRAILER_MAX_BOOST = 0.2


class LapBalancer:
    """One-shot momentum adjustment as an entrant enters the final lap."""

    def apply(self, entrant: Entrant, standings: Standings, track: Track) -> float:
        """Apply final lap balancing to an entrant.

        Args:
            entrant: Entrant entering the final lap
            standings: Ranking of the entrants still racing
            track: Current track

        Returns:
            Momentum change applied
        """
        active = standings.racing
        if len(active) <= 1 or entrant.lane not in active:
            return 0.0

        if entrant.lane == standings.leader:
            lead = standings.distances[entrant.lane] - standings.distances[active[1]]
            if lead > track.track_length * LEADER_MARGIN:
                entrant.momentum -= LEADER_PENALTY
                logger.debug("%s feels the pressure of the final lap", entrant.name)
                return -LEADER_PENALTY
            return 0.0

        position = standings.racing_index(entrant.lane)
        boost = min(
            TRAILER_BASE_BOOST + (position / len(active)) * TRAILER_SCALED_BOOST,
            TRAILER_MAX_BOOST,
        )
        entrant.momentum += boost
        logger.debug("%s gets motivated for the final lap (boost: %.2f)", entrant.name, boost)
        return boost
