"""Track model consumed from the rendering collaborator."""

from pydantic import BaseModel, Field


class Track(BaseModel):
    """Represents a looped race track."""

    track_length: float = Field(
        default=1000.0,
        gt=0,
        description="Length of one lap in track units",
    )
    total_laps: int = Field(default=4, ge=1, description="Number of laps in race")
    speed_scale: float = Field(
        default=1.0,
        ge=0.7,
        description="Track-speed scale supplied by the renderer",
    )
    finish_window: float = Field(
        default=50.0,
        ge=0.0,
        description="Lap distance past the line within which a finish is detected",
    )

    @property
    def total_race_distance(self) -> float:
        """Distance an entrant must cover to finish."""
        return self.track_length * self.total_laps

    def lap_for_distance(self, distance: float) -> int:
        """Get the 1-indexed lap an entrant is on at a given distance."""
        return min(self.total_laps, int(distance // self.track_length) + 1)

    def lap_distance(self, distance: float) -> float:
        """Distance covered within the current lap."""
        return distance % self.track_length
