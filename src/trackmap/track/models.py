"""Track geometry value types.

All types are frozen and store their data in tuples, so a :class:`Path` and
its :class:`ArcLengthTable` can be built once per session and shared between
threads handling different vehicles without copying or locking.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Point:
    """A position in a planar coordinate system.

    Reference and display paths use different coordinate systems; a point from
    one is only meaningful on the other after going through progress.
    """

    x: float
    """Horizontal coordinate."""
    y: float
    """Vertical coordinate."""

    def distance_to(self, other: Point) -> float:
        """Euclidean distance to *other*."""
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True)
class Tangent:
    """Unit direction vector along a path."""

    dx: float = 1.0
    """x component of the direction."""
    dy: float = 0.0
    """y component of the direction."""

    @property
    def heading(self) -> float:
        """Direction in radians, counterclockwise from +x."""
        return math.atan2(self.dy, self.dx)


@dataclass(frozen=True)
class PointAndTangent:
    """A point on a path together with the path direction there."""

    point: Point
    """Position on the path."""
    tangent: Tangent
    """Unit direction of the segment containing :attr:`point`."""


@dataclass(frozen=True)
class LocationSample:
    """A timestamped vehicle position in reference-path coordinates."""

    x: float
    y: float
    date: datetime
    """Time the position was recorded."""


@dataclass(frozen=True)
class Path:
    """Ordered polyline approximating a (conceptually closed) circuit.

    Paths with zero or one point are valid; every query treats them as
    degenerate and returns a sentinel instead of raising.
    """

    points: tuple[Point, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable but always store an owned tuple.
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))

    @classmethod
    def from_xy(cls, pairs: Iterable[tuple[float, float]]) -> Path:
        """Build a path from ``(x, y)`` pairs."""
        return cls(tuple(Point(float(x), float(y)) for x, y in pairs))

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> Point:
        return self.points[index]

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    @property
    def segment_count(self) -> int:
        return max(len(self.points) - 1, 0)


@dataclass(frozen=True)
class ArcLengthTable:
    """Cumulative distance from the first point of a path to each point.

    Invariants: entry 0 is ``0.0``, entries are non-decreasing, the last entry
    is the total path length.  A path with fewer than two points has the
    single-entry table ``(0.0,)``.
    """

    lengths: tuple[float, ...] = (0.0,)

    def __post_init__(self) -> None:
        if not isinstance(self.lengths, tuple):
            object.__setattr__(self, "lengths", tuple(self.lengths))

    def __len__(self) -> int:
        return len(self.lengths)

    def __getitem__(self, index: int) -> float:
        return self.lengths[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self.lengths)

    @property
    def total_length(self) -> float:
        return self.lengths[-1] if self.lengths else 0.0

    def segment_length(self, index: int) -> float:
        """Length of segment *index* → *index + 1*."""
        return self.lengths[index + 1] - self.lengths[index]

    def matches(self, path: Path) -> bool:
        """Return True if this table could have been built from *path*."""
        if len(path) < 2:
            return len(self.lengths) == 1
        return len(self.lengths) == len(path)
