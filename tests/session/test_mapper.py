"""Tests for live position mapping through a TrackSession."""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest

from trackmap.session.mapper import CarPosition, TrackSession
from trackmap.track.models import Path, Tangent
from trackmap.track.projection import WindowConfig, compute_track_progress

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

L_PATH = Path.from_xy([(0, 0), (10, 0), (10, 10)])
L_PATH_X2 = Path.from_xy([(0, 0), (20, 0), (20, 20)])
SQUARE = Path.from_xy([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)])


def make_hairpin() -> Path:
    out = [(5.0 * k, 0.0) for k in range(21)]
    back = [(100.0 - 5.0 * k, 2.0) for k in range(21)]
    return Path.from_xy(out + back + [(0.0, 0.0)])


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

class TestMapPosition:
    def test_pass_through_without_display_path(self):
        session = TrackSession(L_PATH)
        cp = session.map_position(44, 5.0, 0.0)
        assert isinstance(cp, CarPosition)
        assert (cp.driver_number, cp.x, cp.y) == (44, 5.0, 0.0)
        assert cp.progress == pytest.approx(0.25)
        assert cp.heading is None
        assert not cp.rejected

    def test_display_path_equal_to_reference_is_pass_through(self):
        session = TrackSession(L_PATH, L_PATH)
        assert session.display_path is None
        assert session.map_position(1, 5.0, 0.3).y == 0.3

    def test_maps_onto_display_path(self):
        session = TrackSession(L_PATH, L_PATH_X2)
        cp = session.map_position(44, 5.0, 0.0)
        assert cp.progress == pytest.approx(0.25)
        assert cp.x == pytest.approx(10.0)
        assert cp.y == pytest.approx(0.0)
        assert cp.heading == Tangent(1.0, 0.0)

    def test_single_point_display_path(self):
        session = TrackSession(L_PATH, Path.from_xy([(7.0, 7.0)]))
        cp = session.map_position(44, 5.0, 0.0)
        assert (cp.x, cp.y) == (7.0, 7.0)
        assert cp.heading is None

    def test_batch(self):
        session = TrackSession(L_PATH, L_PATH_X2)
        result = session.map_positions([(1, 5.0, 0.0), (2, 10.0, 5.0)])
        assert [cp.driver_number for cp in result] == [1, 2]
        assert result[1].progress == pytest.approx(0.75)
        assert (result[1].x, result[1].y) == (pytest.approx(20.0), pytest.approx(10.0))

    def test_display_point(self):
        session = TrackSession(L_PATH, L_PATH_X2)
        pt = session.display_point(0.75)
        assert (pt.x, pt.y) == (pytest.approx(20.0), pytest.approx(10.0))

    def test_display_point_falls_back_to_reference(self):
        pt = TrackSession(L_PATH).display_point(0.25)
        assert (pt.x, pt.y) == (pytest.approx(5.0), pytest.approx(0.0))


# ---------------------------------------------------------------------------
# Per-driver hints
# ---------------------------------------------------------------------------

class TestHints:
    def test_last_progress_is_remembered(self):
        session = TrackSession(L_PATH)
        session.map_position(44, 5.0, 0.0)
        assert session.last_progress(44) == pytest.approx(0.25)
        assert session.last_progress(1) is None

    def test_previous_tick_keeps_car_on_its_section(self):
        """Driving along section A of a hairpin, the car never snaps to B."""
        session = TrackSession(make_hairpin())
        session.map_position(44, 40.0, 0.1)
        cp = session.map_position(44, 50.0, 1.2)
        assert cp.progress == pytest.approx(50 / 204)

    def test_first_tick_has_no_hint(self):
        session = TrackSession(make_hairpin())
        assert session.map_position(44, 50.0, 1.2).progress == pytest.approx(152 / 204)

    def test_large_backward_jump_is_rejected(self):
        session = TrackSession(SQUARE, window=WindowConfig())
        session.map_position(7, 10.0, 5.0)
        cp = session.map_position(7, 5.0, 0.0)
        assert cp.rejected
        assert cp.progress == pytest.approx(0.375)
        assert session.last_progress(7) == pytest.approx(0.375)

    def test_small_backward_jitter_is_accepted(self):
        session = TrackSession(SQUARE)
        session.map_position(7, 10.0, 5.0)
        cp = session.map_position(7, 10.0, 4.5)
        assert not cp.rejected
        assert cp.progress == pytest.approx(14.5 / 40)

    def test_crossing_the_line_is_forward(self):
        session = TrackSession(SQUARE)
        session.map_position(7, 0.0, 1.0)
        cp = session.map_position(7, 1.0, 0.0)
        assert not cp.rejected
        assert cp.progress == pytest.approx(1 / 40)

    def test_forget_and_retain(self):
        session = TrackSession(L_PATH)
        for dn in (1, 2, 3):
            session.map_position(dn, 5.0, 0.0)
        session.forget(1)
        session.retain([2])
        assert session.last_progress(1) is None
        assert session.last_progress(2) is not None
        assert session.last_progress(3) is None

    def test_projection_and_hint_update_share_one_lock_span(self):
        """No other tick of the driver can slip in between reading and writing its hint."""
        session = TrackSession(SQUARE)
        held: list[bool] = []

        def spy(*args, **kwargs):
            held.append(session._lock.locked())
            return compute_track_progress(*args, **kwargs)

        with patch("trackmap.session.mapper.compute_track_progress", side_effect=spy):
            session.map_position(7, 10.0, 5.0)
            session.map_position(7, 5.0, 0.0)
            session.map_position(7, 10.0, 6.0)

        assert held == [True, True, True]
        assert session.last_progress(7) == pytest.approx(16 / 40)

    def test_negative_max_backward_raises(self):
        with pytest.raises(ValueError):
            TrackSession(L_PATH, max_backward=-0.1)

    def test_concurrent_drivers_share_one_session(self):
        session = TrackSession(SQUARE)
        errors: list[Exception] = []

        def drive(dn: int) -> None:
            try:
                for i in range(40):
                    session.map_position(dn, float(i) / 4, 0.0)
            except Exception as exc:  # pragma: no cover - surfaced by the assert below
                errors.append(exc)

        threads = [threading.Thread(target=drive, args=(dn,)) for dn in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        for dn in range(8):
            assert session.last_progress(dn) == pytest.approx(9.75 / 40)
