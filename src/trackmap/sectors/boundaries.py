"""Sector boundary estimation from lap timings and location samples.

For every complete lap the S1→S2 and S2→S3 crossing times are derived from the
sector durations, the car's position at each crossing is interpolated from its
location samples, and the positions are projected onto the reference path.
Per-boundary results are combined with a circular median across laps.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta

from trackmap.sectors.models import LapTiming, LocationSample, SectorBoundaries
from trackmap.track.arc_length import resolve_arc_lengths
from trackmap.track.circular import circular_median, median
from trackmap.track.conversion import convert_progress
from trackmap.track.models import ArcLengthTable, Path, Point
from trackmap.track.projection import compute_track_progress

_logger = logging.getLogger(__name__)

MIN_REFERENCE_POINTS = 10
"""Reference paths shorter than this are too coarse for sector estimation."""

MIN_LOCATION_SAMPLES = 10
"""Drivers with fewer location samples are skipped."""

MIN_CROSSINGS = 3
"""Minimum crossings per boundary before the median is trusted."""


def interpolate_position(
    target: datetime, samples: Sequence[LocationSample]
) -> Point | None:
    """Linearly interpolate the position at *target* from chronologically sorted samples.

    Returns None if *target* lies outside the sampled time range.
    """
    if not samples:
        return None
    if target < samples[0].date or target > samples[-1].date:
        return None

    dates = [s.date for s in samples]
    idx = bisect.bisect_left(dates, target)
    if idx == 0:
        return Point(samples[0].x, samples[0].y)

    before = samples[idx - 1]
    after = samples[idx]
    span = (after.date - before.date).total_seconds()
    if span == 0:
        return Point(before.x, before.y)

    t = (target - before.date).total_seconds() / span
    return Point(
        before.x + (after.x - before.x) * t,
        before.y + (after.y - before.y) * t,
    )


class _Crossings:
    """Progress values and raw coordinates collected for one boundary."""

    def __init__(self) -> None:
        self.progresses: list[float] = []
        self.xs: list[float] = []
        self.ys: list[float] = []

    def add(self, point: Point, progress: float) -> None:
        self.progresses.append(progress)
        self.xs.append(point.x)
        self.ys.append(point.y)

    def __len__(self) -> int:
        return len(self.progresses)

    def median_position(self) -> Point:
        return Point(median(self.xs), median(self.ys))


def compute_sector_boundaries(
    laps: Sequence[LapTiming],
    positions_by_driver: Mapping[int, Sequence[LocationSample]],
    reference_path: Path,
    arc_lengths: ArcLengthTable | None = None,
) -> SectorBoundaries | None:
    """Estimate sector boundaries as progress on *reference_path*.

    Args:
        laps: Lap timings for any number of drivers.
        positions_by_driver: Chronologically sorted location samples per driver.
        reference_path: Path the boundaries are expressed on.
        arc_lengths: Precomputed table for *reference_path*.

    Returns:
        :class:`SectorBoundaries`, or None when there is not enough data for a
        reliable estimate.
    """
    if len(reference_path) < MIN_REFERENCE_POINTS:
        _logger.info(
            "Reference path too short: %d points (need %d)",
            len(reference_path),
            MIN_REFERENCE_POINTS,
        )
        return None

    arcs = resolve_arc_lengths(reference_path, arc_lengths)
    start_finish = _Crossings()
    sector1_2 = _Crossings()
    sector2_3 = _Crossings()

    skipped_incomplete = 0
    skipped_pit_out = 0
    skipped_no_gps = 0
    skipped_few_gps = 0
    interpolation_misses = 0

    for lap in laps:
        if not lap.is_complete():
            skipped_incomplete += 1
            continue
        if lap.is_pit_out_lap:
            skipped_pit_out += 1
            continue

        samples = positions_by_driver.get(lap.driver_number)
        if not samples:
            skipped_no_gps += 1
            continue
        if len(samples) < MIN_LOCATION_SAMPLES:
            skipped_few_gps += 1
            continue

        lap_start = lap.date_start
        s1_end = lap_start + timedelta(seconds=lap.duration_sector_1)
        s2_end = s1_end + timedelta(seconds=lap.duration_sector_2)

        missed = False
        for when, crossings in (
            (lap_start, start_finish),
            (s1_end, sector1_2),
            (s2_end, sector2_3),
        ):
            point = interpolate_position(when, samples)
            if point is None:
                missed = True
                continue
            progress = compute_track_progress(point.x, point.y, reference_path, arcs)
            crossings.add(point, progress)
        if missed:
            interpolation_misses += 1

    _logger.info(
        "Sector analysis: %d laps — %d incomplete, %d pit-out, %d no GPS, "
        "%d few GPS, %d interpolation miss",
        len(laps),
        skipped_incomplete,
        skipped_pit_out,
        skipped_no_gps,
        skipped_few_gps,
        interpolation_misses,
    )
    _logger.info(
        "Crossings: S/F=%d, S1/S2=%d, S2/S3=%d (need %d each)",
        len(start_finish),
        len(sector1_2),
        len(sector2_3),
        MIN_CROSSINGS,
    )

    if min(len(start_finish), len(sector1_2), len(sector2_3)) < MIN_CROSSINGS:
        _logger.info("Insufficient crossings — cannot compute sectors")
        return None

    return SectorBoundaries(
        start_finish=circular_median(start_finish.progresses),
        sector1_2=circular_median(sector1_2.progresses),
        sector2_3=circular_median(sector2_3.progresses),
        start_finish_position=start_finish.median_position(),
        sector1_2_position=sector1_2.median_position(),
        sector2_3_position=sector2_3.median_position(),
    )


def convert_sector_boundaries(
    boundaries: SectorBoundaries,
    source_path: Path,
    source_arc: ArcLengthTable | None,
    target_path: Path,
    target_arc: ArcLengthTable | None,
) -> SectorBoundaries:
    """Re-express *boundaries* as progress on *target_path*.

    Each boundary is hinted with its own source progress, since the same
    physical place sits at roughly the same fraction of the lap on both paths.
    Raw crossing coordinates are carried over unchanged.
    """

    def convert(progress: float) -> float:
        return convert_progress(
            progress, source_path, source_arc, target_path, target_arc, progress
        )

    return SectorBoundaries(
        start_finish=convert(boundaries.start_finish),
        sector1_2=convert(boundaries.sector1_2),
        sector2_3=convert(boundaries.sector2_3),
        start_finish_position=boundaries.start_finish_position,
        sector1_2_position=boundaries.sector1_2_position,
        sector2_3_position=boundaries.sector2_3_position,
    )
