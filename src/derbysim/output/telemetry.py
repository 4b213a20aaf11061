"""Tick-by-tick telemetry collection."""

from dataclasses import asdict

import pandas as pd

from derbysim.simulation.race import EntrantSnapshot


class TelemetryRecorder:
    """Collects per-tick snapshots so a race can be replayed or analysed."""

    def __init__(self, every: int = 1):
        """Initialize the recorder.

        Args:
            every: Keep one tick in this many
        """
        self.every = max(1, every)
        self.rows: list[dict] = []
        self._ticks = 0

    def record(self, time: float, snapshots: list[EntrantSnapshot]) -> None:
        """Record the field after a tick."""
        self._ticks += 1
        if (self._ticks - 1) % self.every:
            return
        for snap in snapshots:
            row = asdict(snap)
            row["time"] = time
            self.rows.append(row)

    def to_frame(self) -> pd.DataFrame:
        """Telemetry as a long-format DataFrame (one row per entrant per tick)."""
        return telemetry_frame(self.rows)


def telemetry_frame(rows: list[dict]) -> pd.DataFrame:
    """Build a telemetry DataFrame from recorded rows."""
    columns = [
        "time", "lane", "name", "distance", "current_lap", "current_speed",
        "rank", "finished", "finish_time", "event", "label_visible",
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def lead_changes(frame: pd.DataFrame) -> int:
    """Count how often the leader changed over a recorded race."""
    if frame.empty:
        return 0
    leaders = frame[frame["rank"] == 1].sort_values("time")["lane"]
    return int((leaders != leaders.shift()).sum() - 1) if len(leaders) else 0
