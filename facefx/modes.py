"""The user-controlled modes: filter, draw style, gesture reaction, follow target
and sound. They change only on discrete input events (key presses, clicks).
"""

import logging
from enum import Enum
from typing import Union

from facefx.filters import N_FILTER_MODES

logger = logging.getLogger(__name__)

N_DRAW_MODES = 4
N_GESTURE_MODES = 3

DRAW_NONE, DRAW_POLYGON, DRAW_RADIAL, DRAW_KALEIDOSCOPE = range(N_DRAW_MODES)
GESTURE_OFF, GESTURE_SHOW, GESTURE_SPAWN = range(N_GESTURE_MODES)


class FollowTarget(str, Enum):
    FACE = 'face'
    MOUSE = 'mouse'

    def __str__(self):
        return self.value


def _check_mode(name, value, n_modes):
    if not 0 <= value < n_modes:
        raise ValueError(f"{name} should be in range({n_modes}), got {value}")
    return value


class InputModeController:
    """
    Holds the mode state, and advances it on user input.

    >>> modes = InputModeController()
    >>> modes.handle_key('f'), modes.handle_key('f'), modes.filter_mode
    (True, True, 2)
    >>> modes.handle_key('x')
    False
    >>> for _ in range(3):
    ...     _ = modes.handle_key('g')
    >>> modes.gesture_mode
    0
    >>> modes.status_line()
    'Mode: Face | Filter: 2 | Draw: 0 | Gesture: 0 | Sound: off'
    """

    def __init__(
        self,
        *,
        filter_mode: int = 0,
        draw_mode: int = 0,
        gesture_mode: int = 0,
        follow_target: Union[FollowTarget, str] = FollowTarget.FACE,
        sound_enabled: bool = False,
    ):
        self.filter_mode = _check_mode('filter_mode', filter_mode, N_FILTER_MODES)
        self.draw_mode = _check_mode('draw_mode', draw_mode, N_DRAW_MODES)
        self.gesture_mode = _check_mode('gesture_mode', gesture_mode, N_GESTURE_MODES)
        self.follow_target = FollowTarget(follow_target)
        self.sound_enabled = sound_enabled

        self.key_bindings = {
            'f': self.cycle_filter_mode,
            'd': self.cycle_draw_mode,
            'g': self.cycle_gesture_mode,
            's': self.toggle_sound,
        }

    # ---------------------------------------------------------------------------
    # Transitions

    def cycle_filter_mode(self):
        self.filter_mode = (self.filter_mode + 1) % N_FILTER_MODES

    def cycle_draw_mode(self):
        self.draw_mode = (self.draw_mode + 1) % N_DRAW_MODES

    def cycle_gesture_mode(self):
        self.gesture_mode = (self.gesture_mode + 1) % N_GESTURE_MODES

    def toggle_sound(self):
        self.sound_enabled = not self.sound_enabled

    def toggle_follow_target(self):
        if self.follow_target is FollowTarget.FACE:
            self.follow_target = FollowTarget.MOUSE
        else:
            self.follow_target = FollowTarget.FACE

    @property
    def follow_mouse(self) -> bool:
        return self.follow_target is FollowTarget.MOUSE

    # ---------------------------------------------------------------------------
    # Input events

    def handle_key(self, key: Union[int, str]) -> bool:
        """
        Apply the transition bound to ``key`` (a one-character string or an
        OpenCV key code). Returns whether a mode changed.
        """
        if isinstance(key, int):
            if key <= 0 or key > 0x10FFFF:
                return False
            key = chr(key)
        action = self.key_bindings.get(key)
        if action is None:
            return False
        action()
        logger.info(f"Key {key!r}: {self.status_line()}")
        return True

    def handle_click(self, audio=None):
        """
        Toggle the follow target, and start the audio feedback if it has not
        been started yet (it is only ever started once, whatever the sound
        flag). While sound is off, the click also turns it on if audio runs.
        """
        self.toggle_follow_target()
        if audio is not None:
            audio_running = audio.start()
            if not self.sound_enabled:
                self.sound_enabled = audio_running
        logger.info(f"Click: {self.status_line()}")

    # ---------------------------------------------------------------------------
    # Display

    def status_line(self) -> str:
        return (
            f"Mode: {self.follow_target.value.capitalize()}"
            f" | Filter: {self.filter_mode}"
            f" | Draw: {self.draw_mode}"
            f" | Gesture: {self.gesture_mode}"
            f" | Sound: {'on' if self.sound_enabled else 'off'}"
        )

    def __repr__(self):
        return f"{type(self).__name__}({self.status_line()!r})"
