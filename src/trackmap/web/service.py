"""TrackmapService — adapts Web API schemas to the track kernel."""

from __future__ import annotations

from trackmap.config import Settings
from trackmap.session.mapper import TrackSession
from trackmap.track import (
    Path,
    WindowConfig,
    build_arc_lengths,
    compute_track_progress,
    convert_progress,
    forward_distance,
    get_point_and_tangent_at_progress,
    map_progress_to_point,
)
from trackmap.web.schemas import (
    ArcLengthsRequest,
    ArcLengthsResponse,
    CarPositionModel,
    ConvertRequest,
    ForwardDistanceRequest,
    ForwardDistanceResponse,
    PointModel,
    PointRequest,
    PointResponse,
    PositionsRequest,
    PositionsResponse,
    ProgressRequest,
    ProgressResponse,
    TangentModel,
    WindowModel,
)


def _path(points: list[PointModel]) -> Path:
    return Path.from_xy((p.x, p.y) for p in points)


class TrackmapService:
    """Stateless request handlers; every request carries its own paths.

    Parameters
    ----------
    settings:
        Supplies the default hint window and backward-jump threshold.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def _window(self, model: WindowModel | None) -> WindowConfig:
        """Raises ``ValueError`` for an out-of-range window."""
        if model is None:
            return self._settings.window_config()
        return WindowConfig(min_window=model.min_window, window_fraction=model.window_fraction)

    def arc_lengths(self, req: ArcLengthsRequest) -> ArcLengthsResponse:
        table = build_arc_lengths(_path(req.path))
        return ArcLengthsResponse(arc_lengths=list(table), total_length=table.total_length)

    def progress(self, req: ProgressRequest) -> ProgressResponse:
        progress = compute_track_progress(
            req.x,
            req.y,
            _path(req.reference_path),
            None,
            req.hint_progress,
            window=self._window(req.window),
        )
        return ProgressResponse(progress=progress)

    def point(self, req: PointRequest) -> PointResponse:
        path = _path(req.path)
        if not req.with_tangent:
            pt = map_progress_to_point(req.progress, path)
            return PointResponse(point=PointModel(x=pt.x, y=pt.y))

        sample = get_point_and_tangent_at_progress(path, build_arc_lengths(path), req.progress)
        if sample is None:
            return PointResponse(point=None, tangent=None)
        return PointResponse(
            point=PointModel(x=sample.point.x, y=sample.point.y),
            tangent=TangentModel(dx=sample.tangent.dx, dy=sample.tangent.dy),
        )

    def convert(self, req: ConvertRequest) -> ProgressResponse:
        source = _path(req.source_path)
        target = _path(req.target_path)
        progress = convert_progress(
            req.source_progress,
            source,
            build_arc_lengths(source),
            target,
            build_arc_lengths(target),
            req.hint_progress,
            window=self._window(req.window),
        )
        return ProgressResponse(progress=progress)

    def forward_distance(self, req: ForwardDistanceRequest) -> ForwardDistanceResponse:
        return ForwardDistanceResponse(distance=forward_distance(req.base, req.target))

    def positions(self, req: PositionsRequest) -> PositionsResponse:
        session = TrackSession(
            _path(req.reference_path),
            _path(req.display_path) if req.display_path is not None else None,
            window=self._settings.window_config(),
            max_backward=self._settings.max_backward,
        )
        mapped = session.map_positions((s.driver_number, s.x, s.y) for s in req.positions)
        return PositionsResponse(
            positions=[
                CarPositionModel(
                    driver_number=cp.driver_number,
                    x=cp.x,
                    y=cp.y,
                    progress=cp.progress,
                    heading=(
                        TangentModel(dx=cp.heading.dx, dy=cp.heading.dy)
                        if cp.heading is not None
                        else None
                    ),
                    rejected=cp.rejected,
                )
                for cp in mapped
            ]
        )
