"""
Worm model for contour-based nematode tracking.

A Worm owns the most recent contour acknowledged for one organism and keeps
running estimates of its area, length and width. The geometric routines in
this module locate the two tips of a thin, elongated closed contour without
any prior frame to anchor on, which is what the width and head/tail
estimates are built on.
"""

import logging
import math

import numpy as np

from ..utils.geometry import (
    as_contour_array,
    bounding_rect,
    clip_segment_to_frame,
    distance,
    extend_ray,
    midpoint,
    point_in_polygon,
    polygon_area,
    polygon_perimeter,
    segment_midpoint_distance,
    segments_intersect,
    unit_normal,
)

logger = logging.getLogger(__name__)

# Distance used to probe which side of the reference edge is inside the worm.
# Small enough not to cross a thin body to the other side.
PROBE_LENGTH = 0.1


class EndFindingError(ValueError):
    """Raised when a contour defeats the end-finding walk."""


def running_mean(mean: float, count: int, value: float) -> float:
    """
    Fold one sample into an arithmetic mean in constant space.

    Args:
        mean (float): Mean of the previous samples
        count (int): Number of previous samples
        value (float): New sample

    Returns:
        float: Mean including the new sample
    """
    return (mean * count + value) / (count + 1)


class Worm:
    """
    One tracked organism.

    Holds an exclusively owned, read-only copy of the latest contour together
    with equal-weight running means of the per-frame area, length and width.

    Head and tail are continuity labels only: the first tip found on the
    first measurable frame is called the head, and on every later frame the
    labelling that keeps each tip closest to where it was is kept. No image
    evidence is used to decide which end is anatomically the head, so
    ``ends_classified`` is always False.

    Constructing a Worm without a contour gives the null worm returned by
    out-of-range tracker lookups (see ``is_null``).
    """

    ends_classified = False

    def __init__(self, contour=None, frame=None, frame_index: int = 0):
        """
        Initialize a worm.

        Args:
            contour: First contour of the organism, or None for the null worm
            frame (np.ndarray, optional): Grayscale frame the contour came from
            frame_index (int): Index of that frame within the analysis run
        """
        self._contour = _freeze(np.zeros((0, 2), dtype=np.int32))
        self._rect = (0, 0, 0, 0)

        self.update_count = 0
        self.area = 0.0
        self.length = 0.0
        self.width = 0.0
        self.width_samples = 0

        self.head_index = None
        self.tail_index = None
        self.head = None
        self.tail = None

        self.last_seen_frame = frame_index
        self.missed_frames = 0

        if contour is not None:
            self.discover(contour, frame)

    @property
    def contour(self) -> np.ndarray:
        """Current contour as a non-writeable (N, 2) array."""
        return self._contour

    @property
    def rect(self) -> tuple:
        """Bounding rectangle (x, y, w, h) of the current contour."""
        return self._rect

    @property
    def total(self) -> int:
        """Number of vertices in the current contour."""
        return len(self._contour)

    @property
    def is_null(self) -> bool:
        """True for the sentinel that stands in for a missing worm."""
        return self.update_count == 0

    def discover(self, contour, frame=None):
        """
        Replace the contour and fold this frame's measurements into the means.

        Area and length are always updated. Head, tail and width depend on
        end finding; when the contour defeats it those estimates keep their
        previous values for this frame.

        Args:
            contour: New contour for this organism
            frame (np.ndarray, optional): Grayscale frame the contour came from

        Raises:
            ValueError: If the contour has fewer than three vertices
        """
        points = as_contour_array(contour)
        if len(points) < 3:
            raise ValueError(f"A worm contour needs at least 3 vertices, got {len(points)}")

        self._contour = _freeze(points)
        self._rect = bounding_rect(points)

        previous_updates = self.update_count
        area_now = polygon_area(points)
        # Walking the whole outline of a thin body covers both sides of it
        length_now = polygon_perimeter(points) / 2.0

        self.area = running_mean(self.area, previous_updates, area_now)
        self.length = running_mean(self.length, previous_updates, length_now)
        self.update_count = previous_updates + 1

        frame_size = None
        if frame is not None:
            frame_size = (frame.shape[1], frame.shape[0])

        try:
            end = self.pinch_shift_for_an_end(frame_size)
        except EndFindingError as e:
            logger.debug(f"End finding failed, keeping previous head/tail/width: {e}")
            return

        other_end = self.find_nearest_vertex_index_by_perimeter_length(end, length_now)
        self._update_head_and_tail(end, other_end)

        side_a = self.find_nearest_vertex_index_by_perimeter_length(end, length_now / 2.0)
        side_b = self.find_nearest_vertex_index_by_perimeter_length(end, -length_now / 2.0)
        width_now = distance(self.get_vertex(side_a), self.get_vertex(side_b))

        self.width = running_mean(self.width, self.width_samples, width_now)
        self.width_samples += 1

    def _update_head_and_tail(self, first_end: int, second_end: int):
        """Label the two tips so that each stays close to its previous position."""
        first_point = self.get_vertex(first_end)
        second_point = self.get_vertex(second_end)

        if self.head is not None and self.tail is not None:
            keep = distance(first_point, self.head) + distance(second_point, self.tail)
            swap = distance(second_point, self.head) + distance(first_point, self.tail)
            if swap < keep:
                first_end, second_end = second_end, first_end
                first_point, second_point = second_point, first_point

        self.head_index, self.tail_index = first_end, second_end
        self.head, self.tail = first_point, second_point

    def next_vertex_index(self, index: int) -> int:
        return (index + 1) % self.total

    def previous_vertex_index(self, index: int) -> int:
        return (index - 1) % self.total

    def get_vertex(self, index: int) -> tuple:
        """Vertex at a (wrapped) index as an (x, y) tuple of ints."""
        x, y = self._contour[index % self.total]
        return (int(x), int(y))

    def find_nearest_vertex_index_by_perimeter_length(self, start: int, perimeter_length: float) -> int:
        """
        Walk the perimeter from a vertex by a target arclength.

        Positive lengths walk in increasing index order, negative lengths in
        decreasing order. The walk stops at the last vertex whose accumulated
        arclength does not exceed the target, so it may fall short but never
        overshoots. O(n) in the number of vertices.

        Args:
            start (int): Starting vertex index
            perimeter_length (float): Signed arclength to walk

        Returns:
            int: Index of the vertex reached

        Raises:
            ValueError: If the length is infinite or NaN
        """
        if not math.isfinite(perimeter_length):
            raise ValueError(f"Perimeter length must be finite, got {perimeter_length}")
        start = start % self.total
        if perimeter_length == 0:
            return start
        if polygon_perimeter(self._contour) == 0.0:
            return start

        step = self.next_vertex_index if perimeter_length > 0 else self.previous_vertex_index
        target = abs(perimeter_length)

        walked = 0.0
        current = start
        while True:
            following = step(current)
            edge = distance(self.get_vertex(current), self.get_vertex(following))
            if walked + edge > target:
                return current
            walked += edge
            current = following

    def pinch_shift_for_an_end(self, frame_size=None) -> int:
        """
        Find the index of the vertex at either tip of the worm.

        A ray is cast from the middle of the first contour edge into the
        body. The pierced edge nearest to that first edge lies on the other
        side of the body. Starting from the first edge's start vertex and the
        pierced edge's start vertex, the two sides are pinched together one
        vertex at a time, always moving the side that leaves the pair closest
        together, until both indices coincide at a tip.

        O(n) for the ray scan plus at most n pinch steps.

        Args:
            frame_size (tuple, optional): (width, height) to clip the ray to

        Returns:
            int: Vertex index of one tip

        Raises:
            EndFindingError: If the contour is too degenerate for the walk
        """
        total = self.total
        if total < 3:
            raise EndFindingError(f"Contour has only {total} vertices")

        start = 0
        reference = (self.get_vertex(start), self.get_vertex(self.next_vertex_index(start)))

        normal = unit_normal(reference)
        if normal is None:
            raise EndFindingError("Reference edge has zero length")

        origin = midpoint(reference)

        # Point the normal into the body
        probe = extend_ray(origin, normal, PROBE_LENGTH)[1]
        if point_in_polygon(self._contour, probe) <= 0:
            normal = (-normal[0], -normal[1])
            probe = extend_ray(origin, normal, PROBE_LENGTH)[1]
            if point_in_polygon(self._contour, probe) <= 0:
                raise EndFindingError("Neither side of the reference edge is inside the contour")

        if frame_size is not None:
            reach = 2.0 * float(np.hypot(frame_size[0], frame_size[1]))
        else:
            _, _, w, h = self._rect
            reach = 2.0 * float(np.hypot(w, h)) + 1.0
        ray = extend_ray(origin, normal, reach)
        if frame_size is not None:
            clipped = clip_segment_to_frame(ray, frame_size)
            if clipped is not None:
                ray = (ray[0], clipped[1])

        opposite = None
        closest = float("inf")
        for index in range(1, total):
            candidate = (self.get_vertex(index), self.get_vertex(self.next_vertex_index(index)))
            if not segments_intersect(ray, candidate):
                continue
            gap = segment_midpoint_distance(reference, candidate)
            if gap < closest:
                closest = gap
                opposite = index

        if opposite is None:
            raise EndFindingError("Ray into the body pierced no opposite edge")

        side_a, side_b = start, opposite
        while side_a != side_b:
            # Vertex density can differ between the two sides, so move
            # whichever side keeps the pair closest together
            if_a = distance(self.get_vertex(self.next_vertex_index(side_a)), self.get_vertex(side_b))
            if_b = distance(self.get_vertex(side_a), self.get_vertex(self.previous_vertex_index(side_b)))
            if if_a <= if_b:
                side_a = self.next_vertex_index(side_a)
            else:
                side_b = self.previous_vertex_index(side_b)

        return side_a

    def __repr__(self):
        if self.is_null:
            return "Worm(null)"
        return f"Worm({format_worm(self)})"


def _freeze(points: np.ndarray) -> np.ndarray:
    points.setflags(write=False)
    return points


def format_worm(worm: Worm) -> str:
    """
    One-line summary of what is known about a worm.

    Args:
        worm (Worm): Worm to describe

    Returns:
        str: Human readable summary
    """
    return (
        f"area: {worm.area:.1f}, length: {worm.length:.1f}, width: {worm.width:.1f}, "
        f"updates: {worm.update_count}, vertices: {worm.total}, "
        f"head: {worm.head}, tail: {worm.tail}"
    )


class NullWorm(Worm):
    """Stand-in for a missing worm; it can never be updated."""

    def discover(self, contour, frame=None):
        raise ValueError("The null worm cannot be updated")

    @property
    def is_null(self) -> bool:
        return True

    def __setattr__(self, name, value):
        if "_sealed" in self.__dict__:
            raise AttributeError(f"The null worm is read-only, cannot set {name}")
        super().__setattr__(name, value)


NULL_WORM = NullWorm()
NULL_WORM._sealed = True
