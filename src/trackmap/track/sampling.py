"""Progress → point (and heading) sampling on a track path."""

from __future__ import annotations

import math

from trackmap.track.arc_length import resolve_arc_lengths, segment_at_distance
from trackmap.track.models import ArcLengthTable, Path, Point, PointAndTangent, Tangent

_ORIGIN = Point(0.0, 0.0)


def _interpolate(
    path: Path, arc_lengths: ArcLengthTable, progress: float
) -> tuple[Point, Point, float]:
    """Return the bracketing points of *progress* and the fraction between them."""
    clamped = max(0.0, min(1.0, progress))
    target = clamped * arc_lengths.total_length
    lo, hi = segment_at_distance(arc_lengths, target)
    seg_length = arc_lengths[hi] - arc_lengths[lo]
    t = (target - arc_lengths[lo]) / seg_length if seg_length > 0.0 else 0.0
    return path[lo], path[hi], t


def map_progress_to_point(
    progress: float,
    display_path: Path,
    arc_lengths: ArcLengthTable | None = None,
) -> Point:
    """Return the point at *progress* (clamped to 0–1) along *display_path*.

    An empty path maps everything to the origin; a single-point path maps
    everything to that point.
    """
    n = len(display_path)
    if n == 0:
        return _ORIGIN
    if n == 1:
        return display_path[0]

    arcs = resolve_arc_lengths(display_path, arc_lengths)
    a, b, t = _interpolate(display_path, arcs, progress)
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def get_point_and_tangent_at_progress(
    path: Path,
    arc_lengths: ArcLengthTable,
    progress: float,
) -> PointAndTangent | None:
    """Return the point and unit tangent at *progress*, or None for paths under two points.

    The tangent is the direction of the segment containing the point; a
    zero-length segment gives the default ``Tangent(1.0, 0.0)``.
    """
    if len(path) < 2:
        return None

    arcs = resolve_arc_lengths(path, arc_lengths)
    a, b, t = _interpolate(path, arcs, progress)
    dx = b.x - a.x
    dy = b.y - a.y
    point = Point(a.x + dx * t, a.y + dy * t)

    length = math.hypot(dx, dy)
    tangent = Tangent(dx / length, dy / length) if length > 0.0 else Tangent()
    return PointAndTangent(point=point, tangent=tangent)
