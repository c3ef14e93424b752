"""
Background analysis loop feeding video frames into the tracker.

The worker decodes a video with OpenCV (or takes frames from any iterable),
prepares each frame as 8-bit grayscale, hands it to the tracker and
optionally streams per-worm statistics to a CSV writer. Tracking itself stays
synchronous: the worker is the only caller of ``advance_next_frame`` on its
tracker.
"""

import logging
import os
import threading
import time

import cv2

from ..utils.image_processing import apply_image_adjustments, to_grayscale
from .tracker import Tracker, format_tracker

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "FrameID",
    "WormID",
    "Area",
    "Length",
    "Width",
    "HeadX",
    "HeadY",
    "TailX",
    "TailY",
    "Updates",
    "MissedFrames",
]


def worm_rows(tracker, frame_id):
    """
    Build one CSV row per tracked worm for the given frame.

    Args:
        tracker (Tracker): Tracker to read back from
        frame_id (int): Frame number written in the FrameID column

    Returns:
        list[list]: Rows matching CSV_HEADER
    """
    rows = []
    for worm_id, worm in enumerate(tracker):
        head = worm.head if worm.head is not None else ("", "")
        tail = worm.tail if worm.tail is not None else ("", "")
        rows.append([
            frame_id,
            worm_id,
            round(worm.area, 3),
            round(worm.length, 3),
            round(worm.width, 3),
            head[0],
            head[1],
            tail[0],
            tail[1],
            worm.update_count,
            worm.missed_frames,
        ])
    return rows


class AnalysisWorker(threading.Thread):
    """
    Runs a tracker over a whole video in a separate thread.

    Cancellation is cooperative: ``stop()`` is honoured between frames,
    never in the middle of one. The throttle slows the loop down for
    machines that also need to stay responsive; at 0 the loop idles without
    decoding frames until the throttle is raised or the worker is stopped.
    """

    def __init__(self, source, tracker=None, params=None, csv_writer_thread=None,
                 progress_callback=None, frame_callback=None):
        """
        Initialize analysis worker.

        Args:
            source: Path to a video file, or an iterable of frames
            tracker (Tracker, optional): Tracker to feed; built from params if omitted
            params (dict, optional): Tracking parameters for a new tracker
            csv_writer_thread (CSVWriterThread, optional): Receives one row per worm per frame
            progress_callback (callable, optional): Called as (percentage, status_text);
                percentage is -1 when the frame count is unknown
            frame_callback (callable, optional): Called as (frame_id, tracker) after each frame
        """
        super().__init__(daemon=True)
        self.source = source
        self.tracker = tracker if tracker is not None else Tracker(params)
        self.params = self.tracker.params
        self.csv_writer_thread = csv_writer_thread
        self.progress_callback = progress_callback
        self.frame_callback = frame_callback

        self._lock = threading.Lock()
        self._throttle = self.params["THROTTLE"]
        self._stop_requested = False

        self.success = False
        self.frames_processed = 0
        self.total_frames = None
        self.fps_list = []

    def set_throttle(self, throttle):
        """Thread-safe throttle update, percent of full speed (0-100)."""
        if not 0 <= throttle <= 100:
            raise ValueError(f"Throttle must be within 0-100, got {throttle}")
        with self._lock:
            self._throttle = throttle

    def get_throttle(self):
        with self._lock:
            return self._throttle

    def stop(self):
        """Ask the loop to finish after the current frame."""
        self._stop_requested = True

    def prepare_frame(self, frame):
        """Convert a decoded frame to the adjusted grayscale image the tracker expects."""
        gray = to_grayscale(frame)
        return apply_image_adjustments(
            gray,
            self.params["BRIGHTNESS"],
            self.params["CONTRAST"],
            self.params["GAMMA"],
        )

    def _reads_video_file(self):
        return isinstance(self.source, (str, os.PathLike))

    def _iter_frames(self):
        if not self._reads_video_file():
            try:
                self.total_frames = len(self.source)
            except TypeError:
                self.total_frames = None
            iterator = iter(self.source)
            while True:
                # Pull lazily so throttling and stop requests apply per frame
                yield next(iterator, None)

        capture = cv2.VideoCapture(os.fspath(self.source))
        if not capture.isOpened():
            capture.release()
            raise IOError(f"Cannot open video {self.source}; a suitable codec may be missing")
        try:
            count = int(capture.get(cv2.CAP_PROP_FRAME_COUNT))
            self.total_frames = count if count > 0 else None
            while True:
                ok, frame = capture.read()
                yield frame if ok else None
        finally:
            capture.release()

    def run(self):
        """Main loop: decode, prepare, track and export until the source runs dry or stop is requested."""
        self.tracker.reset()
        self.success = False
        logger.info(f"Analysis started on {os.fspath(self.source) if self._reads_video_file() else 'frame sequence'}")

        frames = None
        try:
            frames = self._iter_frames()
            while not self._stop_requested:
                throttle = self.get_throttle()
                if throttle < 100:
                    # [0, 2000] ms per frame depending on the throttle
                    time.sleep((100 - throttle) * 20 / 1000.0)
                    if throttle == 0:
                        continue

                frame = next(frames)
                if frame is None:
                    break

                started = time.time()
                self.tracker.advance_next_frame(self.prepare_frame(frame))
                frame_id = self.tracker.frame_count - 1
                self.frames_processed += 1

                elapsed = time.time() - started
                if elapsed > 0:
                    self.fps_list.append(1.0 / elapsed)

                if self.csv_writer_thread is not None:
                    self.csv_writer_thread.enqueue_frame(worm_rows(self.tracker, frame_id))

                if self.frame_callback is not None:
                    self.frame_callback(frame_id, self.tracker)

                self._report_progress(frame_id)

            self.success = True
        except IOError as e:
            logger.error(f"Analysis aborted: {e}")
        finally:
            if frames is not None:
                frames.close()
            logger.info(f"Analysis finished after {self.frames_processed} frame(s)")
            logger.debug(format_tracker(self.tracker))

    def _report_progress(self, frame_id):
        if self.progress_callback is None:
            return
        if self.total_frames:
            percentage = int(100 * (frame_id + 1) / self.total_frames)
        else:
            percentage = -1
        self.progress_callback(percentage, f"Frame {frame_id + 1}: tracking {self.tracker.tracking()} worm(s)")
