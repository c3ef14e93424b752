"""
Tests for contour geometry helpers.

Tests cover:
- Contour normalization and polygon measures
- Segment intersection including collinear edge cases
- Rectangle overlap and frame-edge checks
- Ray construction and clipping
"""

import numpy as np
import pytest

from slither.utils.geometry import (
    as_contour_array,
    bounding_rect,
    clip_segment_to_frame,
    direction,
    distance,
    extend_ray,
    midpoint,
    point_in_polygon,
    polygon_area,
    polygon_perimeter,
    rectangle_intersection,
    rectangles_intersect,
    segment_midpoint_distance,
    segments_intersect,
    touches_frame_edge,
    unit_normal,
)
from tests.helpers.synthetic import rect_contour, shoelace_area


class TestContourMeasures:
    """Test suite for contour normalization and measures."""

    def test_opencv_layout_is_flattened(self):
        """Test that (N, 1, 2) contours become (N, 2) int32 copies."""
        raw = np.array([[[0, 0]], [[10, 0]], [[10, 10]]], dtype=np.int32)
        points = as_contour_array(raw)
        assert points.shape == (3, 2)
        assert points.dtype == np.int32
        points[0, 0] = 99
        assert raw[0, 0, 0] == 0

    def test_list_of_tuples(self):
        """Test that plain point lists are accepted."""
        points = as_contour_array([(1, 2), (3, 4), (5, 6)])
        assert points.tolist() == [[1, 2], [3, 4], [5, 6]]

    def test_empty_contour(self):
        """Test that an empty contour gives an empty (0, 2) array."""
        assert as_contour_array([]).shape == (0, 2)

    def test_rectangle_area_and_perimeter(self):
        """Test area and perimeter of a 20x10 rectangle outline."""
        contour = rect_contour(0, 0, 20, 10)
        assert polygon_area(contour) == pytest.approx(200.0)
        assert polygon_perimeter(contour) == pytest.approx(60.0)

    def test_area_is_unsigned(self):
        """Test that winding order does not change the area sign."""
        contour = rect_contour(0, 0, 20, 10)
        assert polygon_area(contour[::-1]) == pytest.approx(200.0)

    def test_area_matches_shoelace(self):
        """Test OpenCV area against an independent shoelace computation."""
        contour = np.array([(0, 0), (7, 2), (12, 9), (5, 14), (-3, 6)], dtype=np.int32)
        assert polygon_area(contour) == pytest.approx(shoelace_area(contour))

    def test_degenerate_measures(self):
        """Test that too-short contours measure as zero."""
        assert polygon_area([(0, 0), (5, 5)]) == 0.0
        assert polygon_perimeter([(0, 0)]) == 0.0

    def test_bounding_rect_counts_pixels_inclusively(self):
        """Test the OpenCV convention of inclusive pixel extents."""
        assert bounding_rect(rect_contour(5, 7, 20, 10)) == (5, 7, 21, 11)
        assert bounding_rect([]) == (0, 0, 0, 0)


class TestSegments:
    """Test suite for segment helpers."""

    def test_distance_and_midpoint(self):
        assert distance((0, 0), (3, 4)) == pytest.approx(5.0)
        assert midpoint(((0, 0), (4, 2))) == (2.0, 1.0)

    def test_segment_midpoint_distance(self):
        """Test distance between the middles of two parallel segments."""
        first = ((0, 0), (10, 0))
        second = ((0, 6), (10, 6))
        assert segment_midpoint_distance(first, second) == pytest.approx(6.0)

    def test_direction_sign(self):
        """Test orientation sign for left, right and collinear turns."""
        assert direction((0, 0), (1, 0), (0, 1)) > 0
        assert direction((0, 0), (0, 1), (1, 0)) < 0
        assert direction((0, 0), (1, 1), (2, 2)) == 0

    def test_crossing_segments(self):
        assert segments_intersect(((0, 0), (10, 10)), ((0, 10), (10, 0)))

    def test_disjoint_segments(self):
        assert not segments_intersect(((0, 0), (10, 0)), ((0, 5), (10, 5)))

    def test_touching_at_endpoint(self):
        """Test that sharing an endpoint counts as intersecting."""
        assert segments_intersect(((0, 0), (5, 5)), ((5, 5), (10, 0)))

    def test_t_junction(self):
        """Test a segment ending exactly on another."""
        assert segments_intersect(((5, 0), (5, 5)), ((0, 5), (10, 5)))

    def test_collinear_overlapping(self):
        assert segments_intersect(((0, 0), (10, 0)), ((5, 0), (15, 0)))

    def test_collinear_separate(self):
        assert not segments_intersect(((0, 0), (4, 0)), ((5, 0), (15, 0)))

    def test_float_ray_against_integer_edge(self):
        """Test a floating point ray piercing an integer edge."""
        ray = ((10.5, -3.0), (10.5, 40.0))
        assert segments_intersect(ray, ((0, 7), (20, 7)))
        assert not segments_intersect(ray, ((11, 7), (20, 7)))

    def test_unit_normal(self):
        """Test that the normal is orthogonal and of unit length."""
        nx, ny = unit_normal(((0, 0), (3, 4)))
        assert nx * 3 + ny * 4 == pytest.approx(0.0)
        assert np.hypot(nx, ny) == pytest.approx(1.0)

    def test_unit_normal_zero_length(self):
        assert unit_normal(((2, 2), (2, 2))) is None

    def test_extend_ray(self):
        assert extend_ray((1, 1), (0.0, 1.0), 5.0) == ((1.0, 1.0), (1.0, 6.0))


class TestClipping:
    """Test suite for clipping rays to the frame."""

    def test_clip_long_ray(self):
        """Test that a ray leaving the frame is cut at the border."""
        clipped = clip_segment_to_frame(((10.0, 10.0), (10.0, 5000.0)), (100, 50))
        assert clipped is not None
        (x1, y1), (x2, y2) = clipped
        assert (x1, y1) == (10, 10)
        assert x2 == 10
        assert 0 <= y2 < 50

    def test_clip_outside(self):
        """Test that a segment entirely outside the frame gives None."""
        assert clip_segment_to_frame(((-50.0, -50.0), (-10.0, -10.0)), (100, 50)) is None


class TestPolygonTests:
    """Test suite for point-in-polygon."""

    def test_inside_outside_boundary(self):
        contour = rect_contour(0, 0, 20, 10)
        assert point_in_polygon(contour, (5.0, 5.0)) > 0
        assert point_in_polygon(contour, (25.0, 5.0)) < 0
        assert point_in_polygon(contour, (0.0, 5.0)) == 0


class TestRectangles:
    """Test suite for rectangle helpers."""

    def test_overlap(self):
        assert rectangle_intersection((0, 0, 10, 10), (5, 5, 10, 10)) == (5, 5, 5, 5)
        assert rectangles_intersect((0, 0, 10, 10), (5, 5, 10, 10))

    def test_edge_contact_is_not_intersection(self):
        """Test that rectangles sharing only an edge have zero overlap area."""
        assert rectangle_intersection((0, 0, 10, 10), (10, 0, 10, 10)) is None
        assert not rectangles_intersect((0, 0, 10, 10), (0, 10, 10, 10))

    def test_containment(self):
        assert rectangle_intersection((0, 0, 100, 100), (20, 30, 5, 5)) == (20, 30, 5, 5)

    def test_touches_frame_edge(self):
        assert touches_frame_edge((0, 10, 5, 5), (100, 100))
        assert touches_frame_edge((90, 10, 10, 5), (100, 100))
        assert not touches_frame_edge((10, 10, 5, 5), (100, 100))
