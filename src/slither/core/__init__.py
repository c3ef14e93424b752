"""
Core tracking components for Slither.

This package contains the worm model, the frame-by-frame tracker, contour
extraction and the background analysis loop.
"""
from .worm import NULL_WORM, EndFindingError, NullWorm, Worm, format_worm
from .tracker import Tracker, format_tracker
from .detection import Candidate, ContourExtractor
from .analysis import AnalysisWorker


__all__ = [
    "AnalysisWorker",
    "Candidate",
    "ContourExtractor",
    "EndFindingError",
    "NULL_WORM",
    "NullWorm",
    "Tracker",
    "Worm",
    "format_tracker",
    "format_worm",
]
