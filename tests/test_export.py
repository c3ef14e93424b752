"""
Tests for the per-worm summary table.
"""

import math

import pandas as pd

from slither.core.tracker import Tracker
from slither.data.export import SUMMARY_COLUMNS, save_summary, worms_to_dataframe
from tests.helpers.synthetic import ScriptedExtractor, blank_frame, ellipse_contour


def _tracked(frames):
    tracker = Tracker(extractor=ScriptedExtractor(frames))
    for _ in frames:
        tracker.advance_next_frame(blank_frame())
    return tracker


class TestWormsToDataFrame:
    """Test suite for worms_to_dataframe."""

    def test_empty_tracker(self):
        df = worms_to_dataframe(Tracker())
        assert list(df.columns) == SUMMARY_COLUMNS
        assert len(df) == 0

    def test_one_row_per_worm(self):
        frames = [[ellipse_contour(80 + t, 60), ellipse_contour(220, 170 - t)] for t in range(3)]
        tracker = _tracked(frames)
        df = worms_to_dataframe(tracker)

        assert list(df["WormID"]) == [0, 1]
        assert list(df["Updates"]) == [3, 3]
        assert list(df["LastSeenFrame"]) == [2, 2]
        assert list(df["MissedFrames"]) == [0, 0]
        for worm_id, worm in enumerate(tracker):
            assert df.loc[worm_id, "Area"] == worm.area
            assert df.loc[worm_id, "Length"] == worm.length
            assert df.loc[worm_id, "HeadX"] == worm.head[0]

    def test_missing_tips_are_nan(self):
        tracker = _tracked([[ellipse_contour(100, 100)]])
        tracker.get_worm(0).head = None
        tracker.get_worm(0).tail = None
        df = worms_to_dataframe(tracker)
        assert math.isnan(df.loc[0, "HeadX"])
        assert math.isnan(df.loc[0, "TailY"])


class TestSaveSummary:
    """Test suite for save_summary."""

    def test_written_csv_matches_dataframe(self, tmp_path):
        tracker = _tracked([[ellipse_contour(80, 60), ellipse_contour(220, 170)]] * 2)
        path = tmp_path / "summary.csv"

        df = save_summary(tracker, str(path))

        loaded = pd.read_csv(path)
        assert list(loaded.columns) == SUMMARY_COLUMNS
        assert len(loaded) == 2
        pd.testing.assert_series_equal(loaded["Updates"], df["Updates"])
