"""
Tabular summaries of the tracking table.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "WormID",
    "Area",
    "Length",
    "Width",
    "Updates",
    "WidthSamples",
    "LastSeenFrame",
    "MissedFrames",
    "HeadX",
    "HeadY",
    "TailX",
    "TailY",
]


def worms_to_dataframe(tracker):
    """
    Summarize every tracked worm as one DataFrame row.

    Head and tail coordinates are NaN for worms whose tips were never found.

    Args:
        tracker (Tracker): Tracker to read back from

    Returns:
        pd.DataFrame: One row per worm, columns as in SUMMARY_COLUMNS
    """
    records = []
    for worm_id, worm in enumerate(tracker):
        head = worm.head if worm.head is not None else (float("nan"), float("nan"))
        tail = worm.tail if worm.tail is not None else (float("nan"), float("nan"))
        records.append({
            "WormID": worm_id,
            "Area": worm.area,
            "Length": worm.length,
            "Width": worm.width,
            "Updates": worm.update_count,
            "WidthSamples": worm.width_samples,
            "LastSeenFrame": worm.last_seen_frame,
            "MissedFrames": worm.missed_frames,
            "HeadX": head[0],
            "HeadY": head[1],
            "TailX": tail[0],
            "TailY": tail[1],
        })
    return pd.DataFrame(records, columns=SUMMARY_COLUMNS)


def save_summary(tracker, path):
    """
    Write the worm summary table to CSV.

    Args:
        tracker (Tracker): Tracker to read back from
        path (str): Output CSV path

    Returns:
        pd.DataFrame: The table that was written
    """
    df = worms_to_dataframe(tracker)
    df.to_csv(path, index=False)
    logger.info(f"Saved summary of {len(df)} worm(s) to {path}")
    return df
