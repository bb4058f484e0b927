"""Per-track live position mapping.

A :class:`TrackSession` owns the reference and display paths of one circuit
together with their arc-length tables, built once when the session starts.
Every telemetry tick maps raw car positions to progress on the reference path
and to a point and heading on the display path.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from trackmap.track.arc_length import build_arc_lengths
from trackmap.track.circular import shortest_progress_delta
from trackmap.track.models import Path, Point, Tangent
from trackmap.track.projection import WindowConfig, compute_track_progress
from trackmap.track.sampling import get_point_and_tangent_at_progress, map_progress_to_point

_logger = logging.getLogger(__name__)

MAX_BACKWARD = 0.04
"""Largest backward progress jump accepted between two ticks of one car."""


@dataclass(frozen=True)
class CarPosition:
    """A car position ready for display."""

    driver_number: int
    x: float
    """Display-space x coordinate."""
    y: float
    """Display-space y coordinate."""
    progress: float
    """Progress along the reference path [0.0, 1.0]."""
    heading: Tangent | None = None
    """Unit direction on the display path, if one is loaded."""
    rejected: bool = False
    """True if the raw projection was discarded as a backward jump."""


class TrackSession:
    """Maps live car positions from the reference path onto the display path.

    Args:
        reference_path: Path live positions are measured against.
        display_path: Path used for rendering.  None (or the reference path
            itself) means raw coordinates are passed through unchanged.
        window: Hint window used for every projection after a car's first.
        max_backward: Backward jumps larger than this (as a fraction of a lap)
            are treated as projections onto the wrong section of track and
            rejected.
    """

    def __init__(
        self,
        reference_path: Path,
        display_path: Path | None = None,
        *,
        window: WindowConfig | None = None,
        max_backward: float = MAX_BACKWARD,
    ) -> None:
        if max_backward < 0:
            raise ValueError("max_backward must be >= 0")
        self.reference_path = reference_path
        self.reference_arc = build_arc_lengths(reference_path)
        if display_path is not None and display_path != reference_path:
            self.display_path: Path | None = display_path
            self.display_arc = build_arc_lengths(display_path)
        else:
            self.display_path = None
            self.display_arc = None
        self.window = window
        self.max_backward = max_backward

        self._lock = threading.Lock()
        self._last_progress: dict[int, float] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def map_position(self, driver_number: int, x: float, y: float) -> CarPosition:
        """Map one raw ``(x, y)`` sample of *driver_number*."""
        # Hint read, projection and hint write form one critical section.
        with self._lock:
            last = self._last_progress.get(driver_number)
            progress = compute_track_progress(
                x, y, self.reference_path, self.reference_arc, last, window=self.window
            )
            rejected = (
                last is not None
                and shortest_progress_delta(last, progress) < -self.max_backward
            )
            if rejected:
                _logger.debug(
                    "Driver %d: rejected backward jump %.4f → %.4f",
                    driver_number,
                    last,
                    progress,
                )
                progress = last
            else:
                self._last_progress[driver_number] = progress

        if self.display_path is None:
            return CarPosition(driver_number, x, y, progress, rejected=rejected)

        sample = get_point_and_tangent_at_progress(
            self.display_path, self.display_arc, progress
        )
        if sample is None:
            point = map_progress_to_point(progress, self.display_path, self.display_arc)
            return CarPosition(driver_number, point.x, point.y, progress, rejected=rejected)
        return CarPosition(
            driver_number,
            sample.point.x,
            sample.point.y,
            progress,
            heading=sample.tangent,
            rejected=rejected,
        )

    def map_positions(self, samples: Iterable[tuple[int, float, float]]) -> list[CarPosition]:
        """Map a batch of ``(driver_number, x, y)`` samples."""
        return [self.map_position(dn, x, y) for dn, x, y in samples]

    def display_point(self, progress: float) -> Point:
        """Point at *progress* on the display path (reference path if none)."""
        if self.display_path is None:
            return map_progress_to_point(progress, self.reference_path, self.reference_arc)
        return map_progress_to_point(progress, self.display_path, self.display_arc)

    def last_progress(self, driver_number: int) -> float | None:
        with self._lock:
            return self._last_progress.get(driver_number)

    def forget(self, driver_number: int) -> None:
        """Drop the hint state of one driver."""
        with self._lock:
            self._last_progress.pop(driver_number, None)

    def retain(self, driver_numbers: Iterable[int]) -> None:
        """Drop the hint state of every driver not in *driver_numbers*."""
        keep = set(driver_numbers)
        with self._lock:
            for dn in [dn for dn in self._last_progress if dn not in keep]:
                del self._last_progress[dn]
