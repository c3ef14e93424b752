"""
Utility functions for geometry operations on worm contours.

Points are (x, y) pairs; segments are pairs of points; rectangles follow the
OpenCV (x, y, w, h) convention.
"""

import math

import cv2
import numpy as np


def as_contour_array(contour) -> np.ndarray:
    """
    Normalize a contour to an (N, 2) integer array.

    Accepts OpenCV's (N, 1, 2) layout, plain (N, 2) arrays and lists of
    point tuples. Always returns a fresh copy.

    Args:
        contour: Contour vertices in any of the accepted layouts

    Returns:
        np.ndarray: (N, 2) int32 array of vertices
    """
    points = np.asarray(contour)
    if points.size == 0:
        return np.zeros((0, 2), dtype=np.int32)
    return np.array(points.reshape(-1, 2), dtype=np.int32)


def polygon_area(contour) -> float:
    """Unsigned area of a closed polygon."""
    points = as_contour_array(contour)
    if len(points) < 3:
        return 0.0
    return float(abs(cv2.contourArea(points)))


def polygon_perimeter(contour) -> float:
    """Closed perimeter of a polygon."""
    points = as_contour_array(contour)
    if len(points) < 2:
        return 0.0
    return float(cv2.arcLength(points, True))


def bounding_rect(contour) -> tuple:
    """Axis-aligned bounding rectangle (x, y, w, h) of a contour."""
    points = as_contour_array(contour)
    if len(points) == 0:
        return (0, 0, 0, 0)
    return tuple(int(v) for v in cv2.boundingRect(points))


def distance(first, second) -> float:
    """Euclidean distance between two points."""
    return math.hypot(float(second[0]) - float(first[0]), float(second[1]) - float(first[1]))


def midpoint(segment) -> tuple:
    """Midpoint of a segment as a float pair."""
    (x1, y1), (x2, y2) = segment
    return ((float(x1) + float(x2)) / 2.0, (float(y1) + float(y2)) / 2.0)


def segment_midpoint_distance(first, second) -> float:
    """Distance between the midpoints of two segments."""
    return distance(midpoint(first), midpoint(second))


def direction(start, first, second) -> float:
    """
    Orientation of start->second relative to start->first.

    Cross product of the two vectors translated to the origin: positive when
    clockwise in image coordinates, negative when counterclockwise, zero when
    collinear.
    """
    return ((float(first[0]) - float(start[0])) * (float(second[1]) - float(start[1]))
            - (float(second[0]) - float(start[0])) * (float(first[1]) - float(start[1])))


def is_collinear_point_on_segment(segment, point) -> bool:
    """Check whether a point already known to be collinear lies within the segment's extent."""
    (x1, y1), (x2, y2) = segment
    return (min(x1, x2) <= point[0] <= max(x1, x2)
            and min(y1, y2) <= point[1] <= max(y1, y2))


def segments_intersect(first, second) -> bool:
    """
    Check whether two closed line segments intersect.

    Uses the straddle test (Cormen et al., "Introduction to Algorithms",
    section 33.1) with the collinear endpoint special cases.

    Args:
        first (tuple): ((x1, y1), (x2, y2))
        second (tuple): ((x3, y3), (x4, y4))

    Returns:
        bool: True if the segments share at least one point
    """
    a1, a2 = first
    b1, b2 = second

    d1 = direction(b1, b2, a1)
    d2 = direction(b1, b2, a2)
    d3 = direction(a1, a2, b1)
    d4 = direction(a1, a2, b2)

    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True
    if d1 == 0 and is_collinear_point_on_segment(second, a1):
        return True
    if d2 == 0 and is_collinear_point_on_segment(second, a2):
        return True
    if d3 == 0 and is_collinear_point_on_segment(first, b1):
        return True
    if d4 == 0 and is_collinear_point_on_segment(first, b2):
        return True
    return False


def unit_normal(segment):
    """
    Unit vector orthogonal to a segment.

    Returns:
        tuple or None: (nx, ny), or None for a zero-length segment
    """
    (x1, y1), (x2, y2) = segment
    dx, dy = float(x2) - float(x1), float(y2) - float(y1)
    norm = math.hypot(dx, dy)
    if norm == 0.0:
        return None
    return (-dy / norm, dx / norm)


def extend_ray(origin, unit_vector, length) -> tuple:
    """Segment starting at origin running length along unit_vector."""
    return (
        (float(origin[0]), float(origin[1])),
        (float(origin[0]) + unit_vector[0] * length, float(origin[1]) + unit_vector[1] * length),
    )


def clip_segment_to_frame(segment, frame_size):
    """
    Clip a segment to the frame rectangle.

    Args:
        segment (tuple): Segment endpoints
        frame_size (tuple): (width, height) of the frame

    Returns:
        tuple or None: Clipped integer segment, or None if it lies entirely outside
    """
    width, height = frame_size
    pt1 = (int(round(segment[0][0])), int(round(segment[0][1])))
    pt2 = (int(round(segment[1][0])), int(round(segment[1][1])))
    inside, pt1, pt2 = cv2.clipLine((0, 0, int(width), int(height)), pt1, pt2)
    if not inside:
        return None
    return (tuple(pt1), tuple(pt2))


def point_in_polygon(contour, point) -> float:
    """
    Locate a point relative to a polygon.

    Returns:
        float: +1 inside, 0 on the boundary, -1 outside (cv2.pointPolygonTest)
    """
    points = as_contour_array(contour)
    return float(cv2.pointPolygonTest(points, (float(point[0]), float(point[1])), False))


def rectangles_intersect(first, second) -> bool:
    """Check whether two (x, y, w, h) rectangles have a non-zero intersection area."""
    return rectangle_intersection(first, second) is not None


def rectangle_intersection(first, second):
    """
    Shared region of two rectangles.

    Returns:
        tuple or None: (x, y, w, h) of the overlap, None when the overlap area is zero
    """
    x1, y1, w1, h1 = first
    x2, y2, w2, h2 = second
    left = max(x1, x2)
    top = max(y1, y2)
    right = min(x1 + w1, x2 + w2)
    bottom = min(y1 + h1, y2 + h2)
    if right <= left or bottom <= top:
        return None
    return (left, top, right - left, bottom - top)


def touches_frame_edge(rect, frame_size) -> bool:
    """Check whether a rectangle touches or crosses the outer edge of the frame."""
    x, y, w, h = rect
    width, height = frame_size
    return x <= 0 or y <= 0 or x + w >= width or y + h >= height
