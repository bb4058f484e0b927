"""Reference path construction from recorded laps of location samples.

Given the location samples of several completed laps, produce a clean,
closed polyline of the circuit in the telemetry coordinate system.  That
polyline is the reference path every live position is projected onto.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from trackmap.track.circular import median
from trackmap.track.models import LocationSample, Path, Point

_logger = logging.getLogger(__name__)

FAST_LAP_THRESHOLD = 1.07
"""Laps slower than this multiple of the best lap are not used."""

TRACK_CHANGE_THRESHOLD = 500.0
"""Mean nearest-neighbour distance above which two paths are different layouts."""

COMPARE_SAMPLES = 50


@dataclass(frozen=True)
class LapTrace:
    """Location samples recorded over one completed lap of one driver."""

    driver_number: int
    lap_number: int
    lap_duration: float | None
    """Lap time in seconds; None or <= 0 if unknown."""
    positions: tuple[LocationSample, ...] = field(default_factory=tuple)
    is_pit_out_lap: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.positions, tuple):
            object.__setattr__(self, "positions", tuple(self.positions))


class TrackPathBuilder:
    """Build a reference path from one or more laps of location samples.

    Algorithm:
    1. Keep fast laps only: no pit-out laps, a known lap time, and within
       *fast_lap_threshold* of the best lap.
    2. Bin every sample by its index fraction within its lap into *n_bins*
       buckets and drop samples more than *outlier_std_devs* standard
       deviations (around the bin median) away in x or y.
    3. Take the lap with the most surviving samples, in time order.
    4. Keep every *downsample_factor*-th point (plus the last one).
    5. Apply a circular moving-average with *smooth_window*.

    Args:
        n_bins: Number of progress bins used for outlier detection.
        outlier_std_devs: Deviation beyond which a sample is an outlier.
        downsample_factor: Keep one point in this many.  1 keeps them all.
        smooth_window: Half-width of the moving-average kernel (total kernel
            size = ``2 * smooth_window + 1``).  Use 0 to skip smoothing.
        fast_lap_threshold: Slowest accepted lap as a multiple of the best.
    """

    def __init__(
        self,
        n_bins: int = 100,
        outlier_std_devs: float = 2.0,
        downsample_factor: int = 3,
        smooth_window: int = 2,
        fast_lap_threshold: float = FAST_LAP_THRESHOLD,
    ) -> None:
        if n_bins < 1:
            raise ValueError("n_bins must be >= 1")
        if outlier_std_devs <= 0:
            raise ValueError("outlier_std_devs must be > 0")
        if downsample_factor < 1:
            raise ValueError("downsample_factor must be >= 1")
        if smooth_window < 0:
            raise ValueError("smooth_window must be >= 0")
        if fast_lap_threshold < 1.0:
            raise ValueError("fast_lap_threshold must be >= 1.0")
        self.n_bins = n_bins
        self.outlier_std_devs = outlier_std_devs
        self.downsample_factor = downsample_factor
        self.smooth_window = smooth_window
        self.fast_lap_threshold = fast_lap_threshold

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, laps: Sequence[LapTrace]) -> Path:
        """Build the reference path.

        Returns:
            The smoothed path, or an empty :class:`Path` if no fast lap with
            any samples is available.
        """
        fast = self.select_fast_laps(laps)
        if not fast:
            return Path()

        cleaned = self._remove_outliers(fast)
        best = max(cleaned, key=len)
        if not best:
            return Path()

        _logger.debug(
            "Building track path from %d of %d laps, %d points on the densest lap",
            len(fast),
            len(laps),
            len(best),
        )
        points = self._downsample(best)
        if self.smooth_window > 0 and len(points) > 2 * self.smooth_window + 1:
            points = self._smooth(points)
        return Path(points)

    def select_fast_laps(
        self, laps: Iterable[LapTrace], best_lap_time: float | None = None
    ) -> list[LapTrace]:
        """Return the laps usable for path construction, in input order.

        *best_lap_time* defaults to the fastest valid lap among *laps*.  A best
        time of 0 or less disables the pace check.
        """
        timed = [
            lap
            for lap in laps
            if not lap.is_pit_out_lap and lap.lap_duration and lap.lap_duration > 0
        ]
        if best_lap_time is None:
            best_lap_time = min((lap.lap_duration for lap in timed), default=0.0)
        if best_lap_time <= 0:
            return timed
        limit = best_lap_time * self.fast_lap_threshold
        return [lap for lap in timed if lap.lap_duration <= limit]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _remove_outliers(self, laps: list[LapTrace]) -> list[list[Point]]:
        """Time-ordered points of each lap with per-bin outliers removed."""
        ordered = [
            [Point(s.x, s.y) for s in sorted(lap.positions, key=lambda s: s.date)]
            for lap in laps
        ]

        bins: dict[int, list[tuple[int, int]]] = defaultdict(list)
        for lap_idx, points in enumerate(ordered):
            last = len(points) - 1
            for pos_idx in range(len(points)):
                fraction = pos_idx / last if last > 0 else 0.0
                idx = int(fraction * self.n_bins)
                # The final sample (fraction 1.0) falls outside every bin.
                if idx < self.n_bins:
                    bins[idx].append((lap_idx, pos_idx))

        outliers: set[tuple[int, int]] = set()
        for members in bins.values():
            if len(members) < 3:
                continue
            xs = [ordered[li][pi].x for li, pi in members]
            ys = [ordered[li][pi].y for li, pi in members]
            med_x = median(xs)
            med_y = median(ys)
            std_x = _spread(xs, med_x)
            std_y = _spread(ys, med_y)
            for key, x, y in zip(members, xs, ys):
                x_dev = abs(x - med_x) / std_x if std_x > 0 else 0.0
                y_dev = abs(y - med_y) / std_y if std_y > 0 else 0.0
                if x_dev > self.outlier_std_devs or y_dev > self.outlier_std_devs:
                    outliers.add(key)

        if outliers:
            _logger.debug("Dropped %d outlier samples", len(outliers))
        return [
            [pt for pos_idx, pt in enumerate(points) if (lap_idx, pos_idx) not in outliers]
            for lap_idx, points in enumerate(ordered)
        ]

    def _downsample(self, points: list[Point]) -> list[Point]:
        """Every *downsample_factor*-th point, always ending on the last one."""
        if len(points) <= self.downsample_factor:
            return points
        kept = points[:: self.downsample_factor]
        if (len(points) - 1) % self.downsample_factor:
            kept.append(points[-1])
        return kept

    def _smooth(self, points: list[Point]) -> list[Point]:
        """Circular moving-average over x and y."""
        n = len(points)
        w = self.smooth_window
        kernel_size = 2 * w + 1
        smoothed: list[Point] = []

        for i in range(n):
            x_sum = 0.0
            y_sum = 0.0
            for j in range(-w, w + 1):
                pt = points[(i + j) % n]
                x_sum += pt.x
                y_sum += pt.y
            smoothed.append(Point(x_sum / kernel_size, y_sum / kernel_size))

        return smoothed


def _spread(values: list[float], centre: float) -> float:
    """Root-mean-square deviation of *values* around *centre*."""
    return math.sqrt(sum((v - centre) ** 2 for v in values) / len(values))


def build_track_path(laps: Sequence[LapTrace]) -> Path:
    """Build a reference path with the default :class:`TrackPathBuilder`."""
    return TrackPathBuilder().build(laps)


# ---------------------------------------------------------------------------
# Layout comparison
# ---------------------------------------------------------------------------


def _sample_equally(path: Path, count: int) -> list[Point]:
    if len(path) <= count:
        return list(path)
    if count == 1:
        return [path[0]]
    step = (len(path) - 1) / (count - 1)
    return [path[int(i * step + 0.5)] for i in range(count)]


def compare_track_maps(path_a: Path, path_b: Path) -> float:
    """Mean distance from points of *path_a* to their nearest point on *path_b*.

    Both paths are first reduced to at most 50 equally spaced points.  Small
    values mean the same layout; an empty path gives ``math.inf``.
    """
    if not path_a or not path_b:
        return math.inf

    count = min(COMPARE_SAMPLES, len(path_a), len(path_b))
    sample_a = _sample_equally(path_a, count)
    sample_b = _sample_equally(path_b, count)

    total = 0.0
    for a in sample_a:
        total += min(a.distance_to(b) for b in sample_b)
    return total / count


def has_track_layout_changed(
    path_a: Path, path_b: Path, threshold: float = TRACK_CHANGE_THRESHOLD
) -> bool:
    """Return True if the two paths are too far apart to be the same layout."""
    return compare_track_maps(path_a, path_b) > threshold


def should_update(total_laps_processed: int, last_update_lap: int) -> bool:
    """Return True if the reference path is due to be rebuilt.

    Rebuilds get rarer as more laps confirm the layout: every lap below 5
    laps, every 2 below 10, every 5 below 20, then every 10.
    """
    since = total_laps_processed - last_update_lap
    if total_laps_processed < 5:
        return since >= 1
    if total_laps_processed < 10:
        return since >= 2
    if total_laps_processed < 20:
        return since >= 5
    return since >= 10
