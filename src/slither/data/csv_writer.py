"""
Asynchronous CSV export of per-frame worm statistics.
"""

import csv
import logging
import queue
import threading

logger = logging.getLogger(__name__)


class CSVWriterThread(threading.Thread):
    """
    Background CSV writer for worm statistics.

    The analysis loop hands over one frame's rows at a time and keeps going;
    this thread drains them to disk so file I/O never stalls frame
    processing. Each frame is flushed as a unit, so a run that dies midway
    leaves only whole frames in the file. Rows written by the analysis worker
    follow ``slither.core.analysis.CSV_HEADER``:

    - FrameID: 0-based frame number
    - WormID: Index of the worm in the tracking table
    - Area, Length, Width: Running means in pixel units
    - HeadX, HeadY, TailX, TailY: Best-effort tip positions, empty if unknown
    - Updates: Frames the worm has been matched in
    - MissedFrames: Consecutive frames without a match
    """

    def __init__(self, path: str, header=None):
        """
        Initialize CSV writer thread.

        Args:
            path (str): Output CSV file path
            header (list, optional): Column names for CSV header
        """
        super().__init__(daemon=True)
        self.csv_path = path
        self.header = header or []
        self.queue = queue.Queue()
        self._stop_requested = False
        self.rows_written = 0
        self.frames_written = 0

        self.f = open(self.csv_path, "w", newline="")
        self.writer = csv.writer(self.f)
        if self.header:
            self.writer.writerow(self.header)

    def run(self):
        """Drain queued batches until stopped and the queue is empty."""
        try:
            while not self._stop_requested or not self.queue.empty():
                try:
                    # Timeout so stop requests are noticed while idle
                    rows = self.queue.get(timeout=0.3)
                except queue.Empty:
                    continue
                self.writer.writerows(rows)
                self.f.flush()
                self.rows_written += len(rows)
                self.frames_written += 1
                self.queue.task_done()
        finally:
            self.f.close()
            logger.debug(f"Wrote {self.rows_written} rows for {self.frames_written} frame(s) to {self.csv_path}")

    def enqueue_frame(self, rows):
        """
        Queue every row of one frame to be written together.

        Args:
            rows (list[list]): Rows for a single frame, possibly empty
        """
        rows = list(rows)
        if rows:
            self.queue.put(rows)

    def enqueue(self, row):
        """Queue a single row."""
        self.queue.put([row])

    def stop(self):
        """Finish writing whatever is queued, then close the file."""
        self._stop_requested = True
