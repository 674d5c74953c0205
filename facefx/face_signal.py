"""Turning raw face detections into the signals the effects consume.

A detection is a list of zero or more faces, each an array of landmark points
in pixel coordinates (shape ``(n_landmarks, 2)`` or ``(n_landmarks, 3)``).
Only the first face is used.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence

import numpy as np

from facefx.gestures import GestureHistory, classify_gesture
from facefx.util import (
    FACE_FEATURE_INDICES,
    FaceLandmark,
    RangeMapper,
    DFLT_CANVAS_HEIGHT,
    DFLT_GESTURE_HISTORY_SIZE,
    DFLT_MIN_PITCH,
    DFLT_MAX_PITCH,
    format_point,
)

logger = logging.getLogger(__name__)

Faces = Sequence[np.ndarray]


def face_feature_points(landmarks) -> np.ndarray:
    """
    The anchor points of a face, as a ``(6, 2)`` array, primary anchor first.

    >>> landmarks = np.arange(478 * 2, dtype=float).reshape(478, 2)
    >>> face_feature_points(landmarks)[:2]
    array([[ 2.,  3.],
           [26., 27.]])
    """
    landmarks = np.asarray(landmarks, dtype=float)
    return landmarks[list(FACE_FEATURE_INDICES), :2].copy()


def pitch_mapper(canvas_height=DFLT_CANVAS_HEIGHT, pitch_range=(DFLT_MIN_PITCH, DFLT_MAX_PITCH)):
    """
    Map a vertical pixel position to a pitch in Hz. Positions off the canvas
    are clamped to its edges, so the pitch stays within ``pitch_range``.

    >>> to_pitch = pitch_mapper(480)
    >>> to_pitch(0), to_pitch(240), to_pitch(480)
    (100, 300.0, 500)
    >>> to_pitch(-30), to_pitch(528)
    (100, 500)
    """
    return RangeMapper((0, canvas_height), pitch_range)


class FaceSignalAdapter:
    """
    Keeps the current face features and gesture history up to date with the
    most recently delivered detection, and drives the audio pitch.

    Args:
        modes: The InputModeController (read for ``sound_enabled``)
        audio: Object with a ``set_pitch(hz)`` method, or None
        canvas_height: Height of the frames the landmarks refer to
        pitch_range: (min, max) pitch in Hz, mapped from top to bottom
        history_size: How many gestures to remember
    """

    def __init__(
        self,
        modes,
        audio=None,
        *,
        canvas_height: int = DFLT_CANVAS_HEIGHT,
        pitch_range=(DFLT_MIN_PITCH, DFLT_MAX_PITCH),
        history_size: int = DFLT_GESTURE_HISTORY_SIZE,
    ):
        self.modes = modes
        self.audio = audio
        self.to_pitch = pitch_mapper(canvas_height, pitch_range)
        self.gesture_history = GestureHistory(maxlen=history_size)
        self.features: Optional[np.ndarray] = None
        self.last_pitch: Optional[float] = None
        self.n_detections = 0

    @property
    def face_present(self) -> bool:
        return self.features is not None

    @property
    def primary_anchor(self) -> Optional[np.ndarray]:
        """The nose tip, if a face is present."""
        if self.features is None:
            return None
        return self.features[0]

    @property
    def current_gesture(self):
        return self.gesture_history.current

    def on_detection(self, faces: Faces):
        """Take in the latest detection result. Safe to call any number of times
        between frames: each call replaces what the previous one set."""
        self.n_detections += 1
        if len(faces) == 0:
            self.features = None
            return

        face = np.asarray(faces[0], dtype=float)
        self.features = face_feature_points(face)
        gesture = classify_gesture(face)
        self.gesture_history.append(gesture)

        if self.modes.sound_enabled and self.audio is not None:
            nose_y = face[FaceLandmark.NOSE_TIP, 1]
            self.last_pitch = float(self.to_pitch(nose_y))
            self.audio.set_pitch(self.last_pitch)

        logger.debug(
            f"Face at {format_point(self.features[0])}, gesture={gesture}, "
            f"pitch={self.last_pitch}"
        )

    def feature_dict(self) -> dict:
        """A json-friendly snapshot of the current signals, for logging."""
        return {
            'face_present': self.face_present,
            'features': None if self.features is None else self.features.tolist(),
            'gesture': None if self.current_gesture is None else str(self.current_gesture),
            'pitch': self.last_pitch,
        }


# -------------------------------------------------------------------------------
# Latest value cell, and background detection
# -------------------------------------------------------------------------------

NOTHING = object()


class LatestValue:
    """
    A single slot holding the latest value put in it. Putting overwrites any
    value that was not taken yet; taking empties the slot.

    >>> cell = LatestValue()
    >>> cell.take() is NOTHING
    True
    >>> cell.put(1); cell.put(2)
    >>> cell.take(), cell.take() is NOTHING
    (2, True)
    """

    def __init__(self):
        self._value = NOTHING
        self._condition = threading.Condition()

    def put(self, value):
        with self._condition:
            self._value = value
            self._condition.notify()

    def take(self, timeout: Optional[float] = 0):
        """
        Take the pending value, waiting up to ``timeout`` seconds for one
        (``None`` waits forever). Returns ``NOTHING`` if there is none.
        """
        with self._condition:
            if timeout != 0:
                self._condition.wait_for(lambda: self._value is not NOTHING, timeout)
            value, self._value = self._value, NOTHING
            return value


class BackgroundDetector:
    """
    Runs a detection function on a daemon thread, always on the most recently
    submitted frame, and delivers each result to ``callback``.

    Frames submitted while a detection is running overwrite each other: only
    the latest one is detected next.

    Args:
        detect: Function taking a frame and returning a list of faces
        callback: Called with each detection result (from the worker thread)
    """

    def __init__(self, detect: Callable[[np.ndarray], List], callback: Callable):
        self.detect = detect
        self.callback = callback
        self._frames = LatestValue()
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name='facefx-detector', daemon=True
        )

    def start(self):
        self._thread.start()
        return self

    def submit(self, frame: np.ndarray):
        self._frames.put(frame)

    def stop(self, timeout: float = 1.0):
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc_info):
        self.stop()

    def _run(self):
        while not self._stop.is_set():
            frame = self._frames.take(timeout=0.1)
            if frame is NOTHING:
                continue
            try:
                self.callback(self.detect(frame))
            except Exception:
                logger.exception("Face detection or delivery failed; skipping this frame")
