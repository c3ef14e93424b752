"""
Contour extraction for worm tracking.

This module turns a grayscale frame into candidate worm contours: the frame
is thresholded into a binary silhouette mask, outer contours are traced with
OpenCV and each one is paired with its bounding rectangle.
"""

import logging
from collections import namedtuple

import cv2
import numpy as np

from ..utils.image_processing import threshold_frame

logger = logging.getLogger(__name__)

Candidate = namedtuple("Candidate", ["contour", "rect"])
Candidate.__doc__ = "A traced contour, as an (N, 2) int32 array, with its (x, y, w, h) bounding rectangle."


class ContourExtractor:
    """
    Extracts closed contours and bounding rectangles from grayscale frames.

    Worms on an agar plate image darker than the background, so by default
    pixels below ``THRESHOLD`` form the foreground. Set ``INVERT_THRESHOLD``
    to False for bright objects on a dark background.
    """

    def __init__(self, params):
        """
        Initialize contour extractor.

        Args:
            params (dict): Extraction parameters (THRESHOLD, INVERT_THRESHOLD,
                MAX_CONTOURS)
        """
        self.params = params

    def extract(self, gray, frame_count=0):
        """
        Trace candidate contours in a grayscale frame.

        Args:
            gray (np.ndarray): 2-D uint8 grayscale frame
            frame_count (int): Current frame number for logging

        Returns:
            list[Candidate]: Contours with fewer than 3 vertices are dropped
        """
        mask = threshold_frame(
            gray,
            self.params.get("THRESHOLD", 100),
            invert=self.params.get("INVERT_THRESHOLD", True),
        )
        return self.extract_from_mask(mask, frame_count)

    def extract_from_mask(self, mask, frame_count=0):
        """
        Trace candidate contours in an already segmented binary mask.

        Args:
            mask (np.ndarray): Binary uint8 mask, foreground non-zero
            frame_count (int): Current frame number for logging

        Returns:
            list[Candidate]: Traced contours in OpenCV order
        """
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        # Frame quality check - a flood of contours means segmentation failed
        max_contours = self.params.get("MAX_CONTOURS", 500)
        if len(contours) > max_contours:
            logger.debug(f"Frame {frame_count}: Too many contours ({len(contours)} > {max_contours}), treating as no candidates")
            return []

        candidates = []
        for contour in contours:
            points = np.array(contour.reshape(-1, 2), dtype=np.int32)
            if len(points) < 3:
                continue
            rect = tuple(int(v) for v in cv2.boundingRect(points))
            candidates.append(Candidate(points, rect))

        logger.debug(f"Frame {frame_count}: {len(candidates)} candidate contours")
        return candidates
