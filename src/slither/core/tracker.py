"""
Frame-by-frame worm tracker.

The tracker owns the table of worms seen so far. Each frame it asks the
contour extractor for candidates, drops the ones that cannot plausibly be a
worm, and folds every survivor either into the worm whose bounding
rectangle it overlaps or into a newly created worm.

Matching by bounding-rectangle overlap is cheap and works for slow,
well-separated animals between consecutive frames. It becomes ambiguous when
two worms' rectangles overlap, and an animal that moves further than its own
rectangle in one frame is picked up as a new worm.
"""

import logging

from ..config import make_parameters
from ..utils.geometry import (
    as_contour_array,
    bounding_rect,
    polygon_area,
    rectangle_intersection,
    rectangles_intersect,
    touches_frame_edge,
)
from ..utils.image_processing import to_grayscale
from .detection import ContourExtractor
from .worm import NULL_WORM, Worm, format_worm

logger = logging.getLogger(__name__)


class Tracker:
    """
    Associates per-frame contours with tracked worms.

    A worm's identity is its position in the tracking table. Worms are never
    removed while ``MAX_MISSED_FRAMES`` is None, so indices stay stable for
    the whole run; setting it evicts worms unmatched for longer than that
    many consecutive frames.

    Not thread-safe: callers must serialize ``advance_next_frame``.
    """

    def __init__(self, params=None, extractor=None):
        """
        Initialize tracker.

        Args:
            params (dict, optional): Tracking parameters, merged over the defaults
            extractor (optional): Object with an ``extract(gray, frame_count)``
                method returning candidates; defaults to ContourExtractor
        """
        self.params = make_parameters(params)
        self.extractor = extractor if extractor is not None else ContourExtractor(self.params)

        self.tracking_table = []
        self.frame_count = 0

        # Only set while a frame is being processed
        self._gray = None

    def tracking(self) -> int:
        """Number of worms currently tracked."""
        return len(self.tracking_table)

    def __len__(self):
        return len(self.tracking_table)

    def __iter__(self):
        return iter(self.tracking_table)

    def get_worm(self, index: int) -> Worm:
        """
        Get the nth tracked worm.

        Out-of-range indices, negative ones included, return the shared
        ``NULL_WORM`` sentinel instead of raising; check ``worm.is_null``.
        """
        if 0 <= index < len(self.tracking_table):
            return self.tracking_table[index]
        return NULL_WORM

    def is_possible_worm(self, contour) -> bool:
        """
        Could this contour be a worm, independent of what we know?

        True when it has at least MIN_VERTICES vertices and an unsigned area
        within [MIN_WORM_AREA, MAX_WORM_AREA], bounds included.
        """
        points = as_contour_array(contour)
        if len(points) < self.params["MIN_VERTICES"]:
            return False
        area = polygon_area(points)
        return self.params["MIN_WORM_AREA"] <= area <= self.params["MAX_WORM_AREA"]

    def count_rectangles_intersected(self, rect, exclude=None, entries=None) -> int:
        """
        Count tracked worms whose bounding rectangle overlaps the given one.

        Args:
            rect (tuple): (x, y, w, h) rectangle
            exclude (Worm, optional): Worm left out of the count
            entries (list, optional): (worm, rect) pairs to count over;
                defaults to the current tracking table

        Returns:
            int: Number of overlapping rectangles
        """
        if entries is None:
            entries = self._entries()
        return sum(
            1 for worm, worm_rect in entries
            if worm is not exclude and rectangles_intersect(worm_rect, rect)
        )

    def find_best_match(self, contour, rect=None):
        """
        Find the tracked worm this contour most likely belongs to.

        Every worm whose rectangle overlaps the candidate's rectangle is
        scored by how many other worms' rectangles cover the region the two
        share. The highest score wins and ties go to the worm earliest in
        the table.

        Args:
            contour: Candidate contour
            rect (tuple, optional): Its bounding rectangle, computed if omitted

        Returns:
            Worm or None: None when no tracked rectangle overlaps at all
        """
        if rect is None:
            rect = bounding_rect(contour)
        return self._best_match(rect, self._entries())

    def _entries(self):
        return [(worm, worm.rect) for worm in self.tracking_table]

    def _best_match(self, rect, entries):
        best_worm = None
        best_score = -1
        for worm, worm_rect in entries:
            shared = rectangle_intersection(worm_rect, rect)
            if shared is None:
                continue
            score = self.count_rectangles_intersected(shared, exclude=worm, entries=entries)
            if score > best_score:
                best_worm = worm
                best_score = score
        return best_worm

    def acknowledge(self, worm: Worm, contour):
        """Fold a matched contour into a worm's estimates."""
        worm.discover(contour, self._gray)
        worm.last_seen_frame = self.frame_count
        worm.missed_frames = 0

    def add(self, contour):
        """
        Start tracking a new worm from a contour.

        Returns:
            Worm or None: The new worm, or None if it could not be built
        """
        try:
            worm = Worm(contour, self._gray, frame_index=self.frame_count)
        except MemoryError:
            logger.error(f"Frame {self.frame_count}: Out of memory building a worm, contour dropped")
            return None

        self.tracking_table.append(worm)
        logger.info(f"Frame {self.frame_count}: New worm #{len(self.tracking_table) - 1} ({format_worm(worm)})")
        return worm

    def advance_next_frame(self, frame):
        """
        Process one grayscale frame.

        Candidates are matched against the table as it stood before this
        frame, so a worm created earlier in the same frame cannot absorb a
        second contour. No reference to the frame is kept after returning.

        Args:
            frame (np.ndarray): 2-D uint8 grayscale frame
        """
        gray = to_grayscale(frame)
        frame_size = (gray.shape[1], gray.shape[0])
        self._gray = gray
        try:
            candidates = self.extractor.extract(gray, self.frame_count)
            entries = self._entries()
            matched = set()

            for contour, rect in candidates:
                if not self.is_possible_worm(contour):
                    continue
                if self.params["REJECT_EDGE_CONTOURS"] and touches_frame_edge(rect, frame_size):
                    logger.debug(f"Frame {self.frame_count}: Rejecting contour on the frame edge at {rect}")
                    continue

                worm = self._best_match(rect, entries)
                if worm is None:
                    self.add(contour)
                    continue

                try:
                    self.acknowledge(worm, contour)
                except (ValueError, MemoryError) as e:
                    logger.warning(f"Frame {self.frame_count}: Failed to update worm: {e}")
                    continue
                matched.add(id(worm))

            self._age_unmatched(entries, matched)
        finally:
            self._gray = None

        self.frame_count += 1

    def _age_unmatched(self, entries, matched):
        """Count missed frames and evict stale worms if an eviction limit is set."""
        for worm, _ in entries:
            if id(worm) not in matched:
                worm.missed_frames += 1

        limit = self.params["MAX_MISSED_FRAMES"]
        if limit is None:
            return

        kept = [worm for worm in self.tracking_table if worm.missed_frames <= limit]
        evicted = len(self.tracking_table) - len(kept)
        if evicted:
            logger.info(f"Frame {self.frame_count}: Evicted {evicted} worm(s) unseen for more than {limit} frames")
            self.tracking_table = kept

    def reset(self):
        """Forget every worm and restart the frame count."""
        self.tracking_table = []
        self.frame_count = 0
        self._gray = None


def format_tracker(tracker: Tracker) -> str:
    """
    Multi-line summary of the tracker state.

    Args:
        tracker (Tracker): Tracker to describe

    Returns:
        str: One header line plus one line per worm
    """
    lines = [f"Tracking {tracker.tracking()} worm(s) after {tracker.frame_count} frame(s)"]
    for index, worm in enumerate(tracker):
        lines.append(f"  #{index}: {format_worm(worm)}")
    return "\n".join(lines)
