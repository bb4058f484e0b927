"""Nearest-segment projection of a 2D position onto a track path.

Turns a raw vehicle position into progress (0–1 by arc length) along the
reference path.  An optional hint (usually the vehicle's progress on the
previous tick) restricts the search to a window of segments around it, which
keeps the projection on the right section of tracks that fold back on
themselves (hairpins, chicanes, pit complexes).
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from trackmap.track.arc_length import resolve_arc_lengths, segment_at_distance
from trackmap.track.models import ArcLengthTable, Path


@dataclass(frozen=True)
class WindowConfig:
    """Size of the hinted search window.

    Args:
        min_window: Lower bound on the number of segments searched.
        window_fraction: Fraction of the path's segments searched, rounded up.
    """

    min_window: int = 10
    window_fraction: float = 0.15

    def __post_init__(self) -> None:
        if self.min_window < 1:
            raise ValueError("min_window must be >= 1")
        if not 0.0 < self.window_fraction <= 1.0:
            raise ValueError("window_fraction must be in (0, 1]")

    def size_for(self, segment_count: int) -> int:
        return max(self.min_window, math.ceil(self.window_fraction * segment_count))


DEFAULT_WINDOW = WindowConfig()


def windowed_segment_indices(
    hint_index: int, window_size: int, segment_count: int
) -> Iterator[int]:
    """Yield *window_size* segment indices centred on *hint_index*.

    Indices wrap modulo *segment_count*, so a window around the start/finish
    line covers the last segments followed by the first ones.  A window at
    least as large as the path yields every segment once, in order.
    """
    if segment_count <= 0 or window_size <= 0:
        return
    if window_size >= segment_count:
        yield from range(segment_count)
        return
    start = hint_index - window_size // 2
    for offset in range(window_size):
        yield (start + offset) % segment_count


def compute_track_progress(
    x: float,
    y: float,
    reference_path: Path,
    arc_lengths: ArcLengthTable | None = None,
    hint_progress: float | None = None,
    *,
    window: WindowConfig | None = None,
) -> float:
    """Return the progress (0–1) of the point on *reference_path* nearest ``(x, y)``.

    The point is projected onto every candidate segment (clamped to the
    segment's end points) and the closest projection wins; on equal distance
    the segment scanned first wins.  With *hint_progress* only the segments in
    the window around the hint are scanned.

    Paths with fewer than two points, or with zero total length, give ``0.0``.
    """
    n = len(reference_path)
    if n < 2:
        return 0.0

    arcs = resolve_arc_lengths(reference_path, arc_lengths)
    total = arcs.total_length
    if total <= 0.0:
        return 0.0

    segment_count = reference_path.segment_count
    if hint_progress is None:
        candidates: Iterator[int] | range = range(segment_count)
    else:
        cfg = window or DEFAULT_WINDOW
        hint_target = _clamp(hint_progress) * total
        hint_index, _ = segment_at_distance(arcs, hint_target)
        candidates = windowed_segment_indices(
            hint_index, cfg.size_for(segment_count), segment_count
        )

    points = reference_path.points
    best_dist_sq = math.inf
    best_index = 0
    best_t = 0.0

    for i in candidates:
        a = points[i]
        b = points[i + 1]
        seg_x = b.x - a.x
        seg_y = b.y - a.y
        seg_len_sq = seg_x * seg_x + seg_y * seg_y
        if seg_len_sq > 0.0:
            t = ((x - a.x) * seg_x + (y - a.y) * seg_y) / seg_len_sq
            t = _clamp(t)
        else:
            t = 0.0
        dx = x - (a.x + t * seg_x)
        dy = y - (a.y + t * seg_y)
        dist_sq = dx * dx + dy * dy
        if dist_sq < best_dist_sq:
            best_dist_sq = dist_sq
            best_index = i
            best_t = t

    distance = arcs[best_index] + best_t * arcs.segment_length(best_index)
    return _clamp(distance / total)


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))
