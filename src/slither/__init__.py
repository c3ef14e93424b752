"""
Slither Worm Tracker Package

Tracks elongated, worm-shaped silhouettes across the frames of microscope
video. Each frame is thresholded into contours, plausible worm-sized contours
are matched to previously seen worms by bounding-rectangle overlap, and every
worm keeps running estimates of its area, length and width.

Key Features:
- Configurable worm size band for different zoom levels and cameras
- Tip (end) finding on thin closed contours without a prior frame
- Running-mean area, length and width per worm
- Headless video analysis with throttling and cooperative cancellation
- CSV and pandas export of per-worm statistics
"""

__version__ = "0.3.0"
