"""FastAPI Web application exposing the track-progress kernel."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from trackmap.config import configure_logging, load_settings
from trackmap.web.schemas import (
    ArcLengthsRequest,
    ArcLengthsResponse,
    ConvertRequest,
    ForwardDistanceRequest,
    ForwardDistanceResponse,
    HealthResponse,
    PointRequest,
    PointResponse,
    PositionsRequest,
    PositionsResponse,
    ProgressRequest,
    ProgressResponse,
)
from trackmap.web.service import TrackmapService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

VERSION = "0.1.0"

_settings = load_settings()
configure_logging(_settings)

app = FastAPI(title="Trackmap", version=VERSION)

_T = TypeVar("_T")


def _service() -> TrackmapService:
    return TrackmapService(_settings)


def _run(handler: Callable[[], _T]) -> _T:
    try:
        return handler()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@app.post("/api/arc-lengths", response_model=ArcLengthsResponse)
def arc_lengths(req: ArcLengthsRequest) -> ArcLengthsResponse:
    return _run(lambda: _service().arc_lengths(req))


@app.post("/api/progress", response_model=ProgressResponse)
def progress(req: ProgressRequest) -> ProgressResponse:
    """Project a position onto the reference path."""
    return _run(lambda: _service().progress(req))


@app.post("/api/point", response_model=PointResponse)
def point(req: PointRequest) -> PointResponse:
    """Sample the point (and optionally the heading) at a progress value."""
    return _run(lambda: _service().point(req))


@app.post("/api/convert", response_model=ProgressResponse)
def convert(req: ConvertRequest) -> ProgressResponse:
    """Re-express a progress value on a different path of the same circuit."""
    return _run(lambda: _service().convert(req))


@app.post("/api/forward-distance", response_model=ForwardDistanceResponse)
def forward_distance(req: ForwardDistanceRequest) -> ForwardDistanceResponse:
    return _run(lambda: _service().forward_distance(req))


@app.post("/api/positions", response_model=PositionsResponse)
def positions(req: PositionsRequest) -> PositionsResponse:
    """Map a batch of car positions from the reference path to the display path."""
    return _run(lambda: _service().positions(req))
