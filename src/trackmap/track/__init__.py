"""Track-progress mapping kernel.

Public API
----------
Point, Tangent, Path, ArcLengthTable, PointAndTangent - immutable value types
LocationSample                    - timestamped raw position
build_track_path                  - reference path from recorded laps
has_track_layout_changed          - do two paths describe different layouts
build_arc_lengths                 - cumulative-distance table for a path
compute_track_progress            - 2D position → progress on a reference path
windowed_segment_indices          - circular segment window around a hint
map_progress_to_point             - progress → point on a display path
get_point_and_tangent_at_progress - progress → point + unit heading
convert_progress                  - progress on one path → progress on another
forward_distance                  - forward circular distance between progresses
"""

from trackmap.track.arc_length import build_arc_lengths
from trackmap.track.builder import (
    LapTrace,
    TrackPathBuilder,
    build_track_path,
    compare_track_maps,
    has_track_layout_changed,
    should_update,
)
from trackmap.track.circular import (
    circular_median,
    forward_distance,
    lerp_progress,
    normalize_progress,
    shortest_progress_delta,
)
from trackmap.track.conversion import convert_progress
from trackmap.track.models import (
    ArcLengthTable,
    LocationSample,
    Path,
    Point,
    PointAndTangent,
    Tangent,
)
from trackmap.track.projection import (
    DEFAULT_WINDOW,
    WindowConfig,
    compute_track_progress,
    windowed_segment_indices,
)
from trackmap.track.sampling import get_point_and_tangent_at_progress, map_progress_to_point

__all__ = [
    "DEFAULT_WINDOW",
    "ArcLengthTable",
    "LapTrace",
    "LocationSample",
    "Path",
    "Point",
    "PointAndTangent",
    "Tangent",
    "TrackPathBuilder",
    "WindowConfig",
    "build_arc_lengths",
    "build_track_path",
    "circular_median",
    "compare_track_maps",
    "compute_track_progress",
    "convert_progress",
    "forward_distance",
    "get_point_and_tangent_at_progress",
    "has_track_layout_changed",
    "lerp_progress",
    "map_progress_to_point",
    "normalize_progress",
    "shortest_progress_delta",
    "should_update",
    "windowed_segment_indices",
]
