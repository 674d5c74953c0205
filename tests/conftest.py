import numpy as np
import pytest

from facefx.util import FaceLandmark

N_LANDMARKS = 478


def make_face(
    *,
    nose=(320.0, 240.0),
    lower_lip_y=300.0,
    upper_lip_y=295.0,
    left_eyelid_y=200.0,
    right_eyelid_y=200.0,
):
    """Landmarks of a face, in pixels, with the points the effects use set."""
    face = np.zeros((N_LANDMARKS, 3))
    face[:, 0] = 320
    face[:, 1] = 240
    face[FaceLandmark.NOSE_TIP, :2] = nose
    face[FaceLandmark.LOWER_LIP, 1] = lower_lip_y
    face[FaceLandmark.UPPER_LIP, 1] = upper_lip_y
    face[FaceLandmark.LEFT_EYE_OUTER, :2] = (280, 200)
    face[FaceLandmark.RIGHT_EYE_OUTER, :2] = (360, 200)
    face[FaceLandmark.LEFT_EYE_INNER, :2] = (340, 200)
    face[FaceLandmark.LEFT_EYELID, 1] = left_eyelid_y
    face[FaceLandmark.RIGHT_EYELID, 1] = right_eyelid_y
    return face


def smiling_face(**kwargs):
    return make_face(lower_lip_y=325.0, upper_lip_y=300.0, **kwargs)


class FakeAudio:
    """Stands in for AudioFeedback: records pitches, never touches a device."""

    def __init__(self, *, can_start=True):
        self.can_start = can_start
        self.start_calls = 0
        self.running = False
        self.failed = False
        self.pitches = []

    def start(self):
        # Like AudioFeedback.start: one attempt, then the outcome sticks
        if self.running or self.failed:
            return self.running
        self.start_calls += 1
        self.running = self.can_start
        self.failed = not self.can_start
        return self.running

    def set_pitch(self, hz):
        self.pitches.append(hz)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def frame():
    return np.full((120, 160, 3), 80, dtype=np.uint8)
