"""Sector-boundary data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from trackmap.track.models import LocationSample, Point

__all__ = ["LapTiming", "LocationSample", "SectorBoundaries"]


@dataclass(frozen=True)
class LapTiming:
    """Timing data for one completed lap of one driver.

    Sector durations are in seconds; any of them may be missing while the lap
    is still in progress.
    """

    driver_number: int
    date_start: datetime | None
    duration_sector_1: float | None
    duration_sector_2: float | None
    duration_sector_3: float | None
    is_pit_out_lap: bool = False

    def is_complete(self) -> bool:
        """Return True if the start time and all three sector times are known."""
        return bool(
            self.date_start
            and self.duration_sector_1
            and self.duration_sector_2
            and self.duration_sector_3
        )


@dataclass(frozen=True)
class SectorBoundaries:
    """Start/finish and sector boundaries as progress on a path.

    The ``*_position`` fields keep the median raw coordinates of the crossings
    in the reference coordinate system, when known.
    """

    start_finish: float
    sector1_2: float
    sector2_3: float
    start_finish_position: Point | None = None
    sector1_2_position: Point | None = None
    sector2_3_position: Point | None = None
