"""Arithmetic on progress values treated as a circle (1.0 ≡ 0.0)."""

from __future__ import annotations

from collections.abc import Sequence


def forward_distance(base: float, target: float) -> float:
    """Distance from *base* to *target* moving forward, wrapping past 1.0."""
    d = target - base
    return d if d >= 0 else d + 1.0


def shortest_progress_delta(from_progress: float, to_progress: float) -> float:
    """Signed delta in ``[-0.5, 0.5]`` taking the shorter way round."""
    delta = to_progress - from_progress
    if delta > 0.5:
        delta -= 1.0
    if delta < -0.5:
        delta += 1.0
    return delta


def normalize_progress(progress: float) -> float:
    """Wrap any real into ``[0, 1)``."""
    return progress % 1.0


def lerp_progress(from_progress: float, to_progress: float, t: float) -> float:
    """Interpolate along the shorter arc between two progress values."""
    delta = shortest_progress_delta(from_progress, to_progress)
    return normalize_progress(from_progress + delta * t)


def median(values: Sequence[float]) -> float:
    """Plain median; 0.0 for empty input."""
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def circular_median(values: Sequence[float]) -> float:
    """Median of progress values that may straddle the start/finish line.

    If the values span more than half a lap, those below 0.5 are moved up by
    one lap before taking the median and the result is wrapped back.
    """
    if not values:
        return 0.0
    if max(values) - min(values) <= 0.5:
        return median(values)

    unwrapped = [v + 1.0 if v < 0.5 else v for v in values]
    med = median(unwrapped)
    return med - 1.0 if med >= 1.0 else med
