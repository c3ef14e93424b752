"""
Utility functions for preparing video frames for worm tracking.
"""

import cv2
import numpy as np


def to_grayscale(frame):
    """
    Convert a decoded video frame to a single-channel 8-bit image.

    The tracker prefers 8-bit unsigned grayscale; colour frames are converted
    from OpenCV's BGR order and other depths are rescaled.

    Args:
        frame (np.ndarray): 2-D grayscale or 3-D BGR/BGRA frame

    Returns:
        np.ndarray: 2-D uint8 image
    """
    if frame.ndim == 3:
        if frame.shape[2] == 4:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
        elif frame.shape[2] == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            frame = frame[:, :, 0]
    if frame.dtype != np.uint8:
        frame = cv2.normalize(frame, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return frame


def apply_image_adjustments(gray, brightness, contrast, gamma):
    """
    Apply brightness, contrast, and gamma corrections to grayscale image.

    Evens out illumination differences between recordings before the
    silhouette threshold is applied.

    Args:
        gray (np.ndarray): Input grayscale image
        brightness (float): Brightness adjustment (-255 to +255)
        contrast (float): Contrast multiplier (0.0 to 3.0+)
        gamma (float): Gamma correction factor (0.1 to 3.0+)

    Returns:
        np.ndarray: Adjusted grayscale image
    """
    if brightness == 0 and contrast == 1.0 and abs(gamma - 1.0) <= 1e-3:
        return gray

    adj = cv2.convertScaleAbs(gray, alpha=contrast, beta=brightness)

    if abs(gamma - 1.0) > 1e-3:
        lut = np.array([
            np.clip(((i / 255.0) ** (1.0 / gamma)) * 255.0, 0, 255)
            for i in range(256)
        ], np.uint8)
        adj = cv2.LUT(adj, lut)
    return adj


def threshold_frame(gray, threshold, invert=True):
    """
    Segment a grayscale frame into a binary silhouette mask.

    Args:
        gray (np.ndarray): 2-D uint8 image
        threshold (int): Intensity cut-off (0-255)
        invert (bool): If True, pixels at or below the threshold are foreground

    Returns:
        np.ndarray: uint8 mask with foreground 255 and background 0
    """
    mode = cv2.THRESH_BINARY_INV if invert else cv2.THRESH_BINARY
    _, mask = cv2.threshold(gray, threshold, 255, mode)
    return mask
