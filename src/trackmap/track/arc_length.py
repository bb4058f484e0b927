"""Arc-length parameterization of track paths."""

from __future__ import annotations

import logging
import math

from trackmap.track.models import ArcLengthTable, Path

_logger = logging.getLogger(__name__)


def build_arc_lengths(path: Path) -> ArcLengthTable:
    """Return the cumulative-distance table for *path*.

    Entry *i* is the summed Euclidean length of segments ``0 .. i-1``.  Paths
    with fewer than two points yield ``(0.0,)``.

    Build this once per path and pass it to every query; the query functions
    only rebuild it themselves as a slow fallback.
    """
    if len(path) < 2:
        return ArcLengthTable((0.0,))

    lengths = [0.0]
    prev = path[0]
    for pt in path.points[1:]:
        lengths.append(lengths[-1] + math.hypot(pt.x - prev.x, pt.y - prev.y))
        prev = pt
    return ArcLengthTable(tuple(lengths))


def resolve_arc_lengths(path: Path, arc_lengths: ArcLengthTable | None) -> ArcLengthTable:
    """Return *arc_lengths* if it fits *path*, otherwise rebuild it (slow path)."""
    if arc_lengths is not None and arc_lengths.matches(path):
        return arc_lengths
    if arc_lengths is None:
        _logger.debug("No arc-length table supplied; rebuilding for %d points", len(path))
    else:
        _logger.debug(
            "Arc-length table has %d entries for a %d-point path; rebuilding",
            len(arc_lengths),
            len(path),
        )
    return build_arc_lengths(path)


def segment_at_distance(arc_lengths: ArcLengthTable, target: float) -> tuple[int, int]:
    """Binary search for the bracketing pair ``(lo, hi)`` with ``hi == lo + 1``.

    ``arc_lengths[lo] <= target <= arc_lengths[hi]`` holds for any *target*
    inside ``[0, total_length]``.  Requires a table with at least two entries.
    """
    lo = 0
    hi = len(arc_lengths) - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if arc_lengths[mid] <= target:
            lo = mid
        else:
            hi = mid
    return lo, hi
