"""Sector boundary estimation."""

from trackmap.sectors.boundaries import (
    compute_sector_boundaries,
    convert_sector_boundaries,
    interpolate_position,
)
from trackmap.sectors.models import LapTiming, LocationSample, SectorBoundaries

__all__ = [
    "LapTiming",
    "LocationSample",
    "SectorBoundaries",
    "compute_sector_boundaries",
    "convert_sector_boundaries",
    "interpolate_position",
]
