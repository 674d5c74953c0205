"""Heuristic face gesture classification, and a short history of gestures."""

from collections import deque
from enum import Enum
from typing import Optional, Sequence

from facefx.util import FaceLandmark, DFLT_GESTURE_HISTORY_SIZE

MOUTH_GAP_THRESHOLD = 20
WINK_THRESHOLD = 10

Y = 1


class Gesture(str, Enum):
    SMILE = 'smile'
    WINK = 'wink'
    NEUTRAL = 'neutral'

    def __str__(self):
        return self.value


def classify_gesture(landmarks: Sequence) -> Gesture:
    """
    Derive a gesture from the landmarks of one face (pixel coordinates, where
    smaller y is higher). The first matching rule wins:

    - mouth gap (lower lip y minus upper lip y) above 20: smile
    - eyelids more than 10 apart vertically: wink
    - otherwise: neutral

    >>> import numpy as np
    >>> face = np.zeros((468, 2))
    >>> face[FaceLandmark.LOWER_LIP, Y], face[FaceLandmark.UPPER_LIP, Y] = 125, 100
    >>> classify_gesture(face)
    <Gesture.SMILE: 'smile'>
    >>> face[FaceLandmark.LOWER_LIP, Y] = 105
    >>> face[FaceLandmark.LEFT_EYELID, Y], face[FaceLandmark.RIGHT_EYELID, Y] = 60, 80
    >>> str(classify_gesture(face))
    'wink'
    """
    mouth_gap = landmarks[FaceLandmark.LOWER_LIP][Y] - landmarks[FaceLandmark.UPPER_LIP][Y]
    left_eye = landmarks[FaceLandmark.LEFT_EYELID][Y]
    right_eye = landmarks[FaceLandmark.RIGHT_EYELID][Y]

    if mouth_gap > MOUTH_GAP_THRESHOLD:
        return Gesture.SMILE
    if abs(left_eye - right_eye) > WINK_THRESHOLD:
        return Gesture.WINK
    return Gesture.NEUTRAL


class GestureHistory:
    """
    The most recent gestures, oldest first. Older entries are evicted once
    ``maxlen`` is reached.

    >>> history = GestureHistory(maxlen=2)
    >>> history.current is None
    True
    >>> for g in (Gesture.SMILE, Gesture.WINK, Gesture.NEUTRAL):
    ...     history.append(g)
    >>> [str(g) for g in history]
    ['wink', 'neutral']
    >>> history.current
    <Gesture.NEUTRAL: 'neutral'>
    """

    def __init__(self, maxlen: int = DFLT_GESTURE_HISTORY_SIZE):
        self._gestures = deque(maxlen=maxlen)

    @property
    def maxlen(self):
        return self._gestures.maxlen

    def append(self, gesture: Gesture):
        self._gestures.append(Gesture(gesture))

    @property
    def current(self) -> Optional[Gesture]:
        """The most recent gesture, or None if nothing was recorded yet."""
        if not self._gestures:
            return None
        return self._gestures[-1]

    def __iter__(self):
        return iter(self._gestures)

    def __len__(self):
        return len(self._gestures)

    def __repr__(self):
        return f"{type(self).__name__}({[g.value for g in self._gestures]})"
