"""Tests for nearest-segment projection and the hint window."""

from __future__ import annotations

import math

import pytest

from trackmap.track.arc_length import build_arc_lengths
from trackmap.track.models import ArcLengthTable, Path
from trackmap.track.projection import (
    WindowConfig,
    compute_track_progress,
    windowed_segment_indices,
)
from trackmap.track.sampling import map_progress_to_point

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

L_PATH = Path.from_xy([(0, 0), (10, 0), (10, 10)])


def make_hairpin() -> Path:
    """Closed hairpin: out along y=0, back along y=2, total length 204.

    Section A (y=0) covers arc 0..100, section B (y=2) covers arc 102..202.
    The two straights are only 2 units apart.
    """
    out = [(5.0 * k, 0.0) for k in range(21)]
    back = [(100.0 - 5.0 * k, 2.0) for k in range(21)]
    return Path.from_xy(out + back + [(0.0, 0.0)])


def make_semicircle(n: int = 40, radius: float = 50.0) -> Path:
    return Path.from_xy(
        (radius * math.cos(math.pi * i / (n - 1)), radius * math.sin(math.pi * i / (n - 1)))
        for i in range(n)
    )


# ---------------------------------------------------------------------------
# compute_track_progress
# ---------------------------------------------------------------------------

class TestComputeTrackProgress:
    def test_point_on_first_segment(self):
        assert compute_track_progress(5, 0, L_PATH) == pytest.approx(0.25)

    def test_point_off_path_projects_orthogonally(self):
        """(12, 5) is nearest to (10, 5) on the second segment."""
        assert compute_track_progress(12, 5, L_PATH) == pytest.approx(0.75)

    def test_projection_is_clamped_to_segment_ends(self):
        assert compute_track_progress(-5, -5, L_PATH) == 0.0
        assert compute_track_progress(10, 30, L_PATH) == 1.0

    def test_precomputed_table_gives_same_result(self):
        table = build_arc_lengths(L_PATH)
        assert compute_track_progress(7, 1, L_PATH, table) == compute_track_progress(7, 1, L_PATH)

    def test_mismatched_table_falls_back_to_rebuild(self):
        wrong = ArcLengthTable((0.0, 1.0))
        assert compute_track_progress(5, 0, L_PATH, wrong) == pytest.approx(0.25)

    @pytest.mark.parametrize("points", [[], [(4.0, 4.0)]])
    def test_degenerate_paths_return_zero(self, points):
        assert compute_track_progress(1.0, 2.0, Path.from_xy(points)) == 0.0

    def test_zero_length_path_returns_zero(self):
        path = Path.from_xy([(3, 3), (3, 3), (3, 3)])
        assert compute_track_progress(9, 9, path) == 0.0

    def test_zero_length_segment_is_skipped_safely(self):
        path = Path.from_xy([(0, 0), (10, 0), (10, 0), (10, 10)])
        assert compute_track_progress(10, 5, path) == pytest.approx(0.75)

    def test_tie_goes_to_first_segment(self):
        """(5, 1) is equidistant from the outbound and return legs."""
        path = Path.from_xy([(0, 0), (10, 0), (10, 2), (0, 2)])
        assert compute_track_progress(5, 1, path) == pytest.approx(5 / 22)

    def test_round_trip_on_simple_path(self):
        path = make_semicircle()
        table = build_arc_lengths(path)
        for i in range(11):
            g = i / 10
            pt = map_progress_to_point(g, path, table)
            assert compute_track_progress(pt.x, pt.y, path, table) == pytest.approx(g, abs=1e-9)

    def test_result_always_in_unit_interval(self):
        path = make_hairpin()
        for x, y in [(-50, -50), (500, 3), (50, 1), (0, 1)]:
            assert 0.0 <= compute_track_progress(x, y, path) <= 1.0


# ---------------------------------------------------------------------------
# Hint window
# ---------------------------------------------------------------------------

class TestWindowedDisambiguation:
    def test_unhinted_snaps_to_geometrically_nearest_section(self):
        """(50, 1.2) is nearer section B (y=2) than section A (y=0)."""
        path = make_hairpin()
        assert compute_track_progress(50, 1.2, path) == pytest.approx(152 / 204)

    def test_hint_on_section_a_keeps_result_on_section_a(self):
        path = make_hairpin()
        table = build_arc_lengths(path)
        progress = compute_track_progress(50, 1.2, path, table, hint_progress=48 / 204)
        assert progress == pytest.approx(50 / 204)

    def test_hint_on_section_b_stays_on_section_b(self):
        path = make_hairpin()
        progress = compute_track_progress(50, 1.2, path, hint_progress=150 / 204)
        assert progress == pytest.approx(152 / 204)

    def test_window_wraps_across_start_finish(self):
        """A hint just before the line still reaches the closing segment."""
        path = make_hairpin()
        progress = compute_track_progress(0.2, 1.0, path, hint_progress=0.99)
        assert progress == pytest.approx(203 / 204)

    def test_out_of_range_hint_is_clamped(self):
        path = make_hairpin()
        assert compute_track_progress(0.2, 1.0, path, hint_progress=1.7) == pytest.approx(203 / 204)

    def test_window_covering_whole_path_behaves_like_no_hint(self):
        path = make_hairpin()
        window = WindowConfig(min_window=path.segment_count)
        progress = compute_track_progress(50, 1.2, path, hint_progress=48 / 204, window=window)
        assert progress == pytest.approx(152 / 204)


class TestWindowedSegmentIndices:
    def test_centred_on_hint(self):
        assert list(windowed_segment_indices(5, 4, 20)) == [3, 4, 5, 6]

    def test_wraps_past_start(self):
        assert list(windowed_segment_indices(1, 6, 10)) == [8, 9, 0, 1, 2, 3]

    def test_wraps_past_end(self):
        assert list(windowed_segment_indices(9, 4, 10)) == [7, 8, 9, 0]

    def test_window_at_least_path_size_yields_all_in_order(self):
        assert list(windowed_segment_indices(3, 12, 5)) == [0, 1, 2, 3, 4]

    def test_no_segments_yields_nothing(self):
        assert list(windowed_segment_indices(0, 10, 0)) == []


class TestWindowConfig:
    def test_minimum_applies_to_small_paths(self):
        assert WindowConfig().size_for(42) == 10

    def test_fraction_applies_to_large_paths(self):
        assert WindowConfig().size_for(200) == 30
        assert WindowConfig().size_for(201) == 31

    def test_invalid_min_window_raises(self):
        with pytest.raises(ValueError):
            WindowConfig(min_window=0)

    @pytest.mark.parametrize("fraction", [0.0, -0.1, 1.5])
    def test_invalid_fraction_raises(self, fraction):
        with pytest.raises(ValueError):
            WindowConfig(window_fraction=fraction)
