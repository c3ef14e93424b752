"""
Utility modules for Slither.

Geometry helpers for contours, segments and rectangles, and frame
preparation for thresholding.
"""

from .image_processing import apply_image_adjustments, threshold_frame, to_grayscale

__all__ = ["apply_image_adjustments", "threshold_frame", "to_grayscale"]
