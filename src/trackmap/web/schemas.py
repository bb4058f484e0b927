"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Finite(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)


class PointModel(_Finite):
    x: float
    y: float


class TangentModel(_Finite):
    dx: float
    dy: float


class WindowModel(_Finite):
    min_window: int = 10
    window_fraction: float = 0.15


class HealthResponse(BaseModel):
    status: str
    version: str


class ArcLengthsRequest(_Finite):
    path: list[PointModel]


class ArcLengthsResponse(BaseModel):
    arc_lengths: list[float]
    total_length: float


class ProgressRequest(_Finite):
    x: float
    y: float
    reference_path: list[PointModel]
    hint_progress: float | None = None
    window: WindowModel | None = None


class ProgressResponse(BaseModel):
    progress: float


class PointRequest(_Finite):
    progress: float
    path: list[PointModel]
    with_tangent: bool = False


class PointResponse(BaseModel):
    point: PointModel | None
    tangent: TangentModel | None = None


class ConvertRequest(_Finite):
    source_progress: float
    source_path: list[PointModel]
    target_path: list[PointModel]
    hint_progress: float | None = None
    window: WindowModel | None = None


class ForwardDistanceRequest(_Finite):
    base: float
    target: float


class ForwardDistanceResponse(BaseModel):
    distance: float


class PositionSampleModel(_Finite):
    driver_number: int
    x: float
    y: float


class PositionsRequest(_Finite):
    reference_path: list[PointModel]
    display_path: list[PointModel] | None = None
    positions: list[PositionSampleModel]


class CarPositionModel(BaseModel):
    driver_number: int
    x: float
    y: float
    progress: float
    heading: TangentModel | None = None
    rejected: bool = False


class PositionsResponse(BaseModel):
    positions: list[CarPositionModel]
