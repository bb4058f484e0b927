"""Progress conversion between two paths of the same circuit."""

from __future__ import annotations

from trackmap.track.models import ArcLengthTable, Path
from trackmap.track.projection import WindowConfig, compute_track_progress
from trackmap.track.sampling import map_progress_to_point


def convert_progress(
    source_progress: float,
    source_path: Path,
    source_arc: ArcLengthTable | None,
    target_path: Path,
    target_arc: ArcLengthTable | None,
    hint_progress: float | None = None,
    *,
    window: WindowConfig | None = None,
) -> float:
    """Express *source_progress* on *source_path* as progress on *target_path*.

    The physical point at *source_progress* is sampled from the source path and
    then projected onto the target path.  *hint_progress* is forwarded to the
    target-side projection.
    """
    point = map_progress_to_point(source_progress, source_path, source_arc)
    return compute_track_progress(
        point.x,
        point.y,
        target_path,
        target_arc,
        hint_progress,
        window=window,
    )
