"""Tests for progress conversion between two path representations."""

from __future__ import annotations

import pytest

from trackmap.track.arc_length import build_arc_lengths
from trackmap.track.conversion import convert_progress
from trackmap.track.models import Path

SQUARE = Path.from_xy([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)])
# Same circuit digitised from a different start point.
SQUARE_SHIFTED = Path.from_xy([(10, 0), (10, 10), (0, 10), (0, 0), (10, 0)])
# Same circuit with twice the point density.
SQUARE_DENSE = Path.from_xy(
    [(0, 0), (5, 0), (10, 0), (10, 5), (10, 10), (5, 10), (0, 10), (0, 5), (0, 0)]
)


def _hairpin() -> Path:
    out = [(5.0 * k, 0.0) for k in range(21)]
    back = [(100.0 - 5.0 * k, 2.0) for k in range(21)]
    return Path.from_xy(out + back + [(0.0, 0.0)])


class TestConvertProgress:
    def test_identity_on_same_path(self):
        arc = build_arc_lengths(SQUARE)
        assert convert_progress(0.3, SQUARE, arc, SQUARE, arc) == pytest.approx(0.3)

    def test_different_point_density(self):
        result = convert_progress(
            0.4, SQUARE, build_arc_lengths(SQUARE), SQUARE_DENSE, build_arc_lengths(SQUARE_DENSE)
        )
        assert result == pytest.approx(0.4)

    def test_different_start_point(self):
        """(5, 0) is 1/8 round the source but 7/8 round the shifted copy."""
        result = convert_progress(
            0.125,
            SQUARE,
            build_arc_lengths(SQUARE),
            SQUARE_SHIFTED,
            build_arc_lengths(SQUARE_SHIFTED),
        )
        assert result == pytest.approx(0.875)

    def test_tables_are_optional(self):
        assert convert_progress(0.125, SQUARE, None, SQUARE_SHIFTED, None) == pytest.approx(0.875)

    def test_hint_is_forwarded_to_target_projection(self):
        source = Path.from_xy([(0, 1.2), (100, 1.2)])
        target = _hairpin()
        source_arc = build_arc_lengths(source)
        target_arc = build_arc_lengths(target)

        unhinted = convert_progress(0.5, source, source_arc, target, target_arc)
        hinted = convert_progress(0.5, source, source_arc, target, target_arc, 48 / 204)

        assert unhinted == pytest.approx(152 / 204)
        assert hinted == pytest.approx(50 / 204)

    def test_degenerate_target_returns_zero(self):
        assert convert_progress(0.5, SQUARE, None, Path.from_xy([(1, 1)]), None) == 0.0
