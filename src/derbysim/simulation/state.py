"""Race-level state shared by the engines."""

from dataclasses import dataclass, field

from derbysim.models import Entrant, Track


@dataclass
class RaceState:
    """Complete race state, owned by the race controller."""

    track: Track
    entrants: list[Entrant]
    race_start_time: float | None = None
    race_in_progress: bool = False
    current_time: float = 0.0
    finish_order: list[int] = field(default_factory=list)
    complete: bool = False

    @property
    def racing(self) -> list[Entrant]:
        """Entrants still on course."""
        return [e for e in self.entrants if not e.finished]

    def entrant(self, lane: int) -> Entrant:
        """Look up an entrant by lane."""
        for entrant in self.entrants:
            if entrant.lane == lane:
                return entrant
        raise KeyError(f"No entrant in lane {lane}")
