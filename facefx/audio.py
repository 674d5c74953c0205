"""Audio feedback: a continuous tone whose pitch follows the face."""

import logging
from contextlib import ExitStack
from typing import Callable, Optional, Union

from hum import Synth
from hum.pyo_util import add_default_dials
from pyo import Adsr, LFO, Sine

from facefx.util import DFLT_TONE_VOLUME

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------
# Tone functions
# -------------------------------------------------------------------------------


def sine_tone(freq=440, volume=DFLT_TONE_VOLUME):
    """A plain sine tone, at a low gain."""
    return Sine(freq=freq, mul=volume)


def triangle_tone(freq=440, volume=DFLT_TONE_VOLUME):
    """A triangle wave tone, slightly brighter than the sine."""
    return LFO(freq=freq, type=3, mul=volume)


@add_default_dials('freq volume')
def theremin_tone(
    freq=440,
    volume=DFLT_TONE_VOLUME,
    attack=0.01,
    release=0.1,
    vibrato_rate=5,
    vibrato_depth=5,
):
    """
    A theremin-like tone: a sine with vibrato and a soft attack.

    Parameters:
    - freq (float): Base frequency in Hz.
    - volume (float): Output volume (0 to 1).
    - attack (float): Attack time in seconds.
    - release (float): Release time in seconds.
    - vibrato_rate (float): Vibrato frequency in Hz.
    - vibrato_depth (float): Vibrato depth in Hz.
    """
    vibrato = Sine(freq=vibrato_rate, mul=vibrato_depth)
    env = Adsr(
        attack=attack, decay=0.1, sustain=0.8, release=release, dur=0, mul=volume
    )
    env.play()
    return Sine(freq=freq + vibrato, mul=env)


DFLT_TONE_FUNC = sine_tone

tone_funcs = {
    "sine": sine_tone,
    "triangle": triangle_tone,
    "theremin": theremin_tone,
}


# -------------------------------------------------------------------------------
# Audio feedback
# -------------------------------------------------------------------------------


class AudioFeedback:
    """
    Owns one synth, started lazily (typically on the first click) and at most
    once. A failure to start only disables the audio.

    Args:
        tone_func: The pyo tone function the synth runs
        nchnls: Number of output channels
        only_keep_new_freqs: Skip frequency updates equal to the last one
    """

    def __init__(
        self,
        tone_func: Callable = DFLT_TONE_FUNC,
        *,
        nchnls: int = 2,
        only_keep_new_freqs: bool = True,
    ):
        self.tone_func = tone_func
        self.nchnls = nchnls
        self.only_keep_new_freqs = only_keep_new_freqs
        self.failed = False
        self.last_freq: Optional[float] = None
        self._synth: Union[Synth, None] = None
        self._exit_stack = ExitStack()

    @property
    def running(self) -> bool:
        return self._synth is not None

    def start(self) -> bool:
        """Start the synth if it is not running yet. Returns whether it runs."""
        if self._synth is not None:
            return True
        if self.failed:
            return False
        try:
            synth = Synth(self.tone_func, nchnls=self.nchnls)
            self._exit_stack.enter_context(synth)
        except Exception:
            self.failed = True
            logger.exception("Could not start audio; continuing without sound")
            return False
        self._synth = synth
        logger.info(f"Audio started with tone {self.tone_func.__name__}")
        return True

    def set_pitch(self, hz: float):
        """Change the tone's frequency right away. Does nothing if not running."""
        if self._synth is None:
            return
        if self.only_keep_new_freqs and hz == self.last_freq:
            return
        self.last_freq = hz
        self._synth(freq=hz)

    def stop(self):
        if self._synth is None:
            return
        self._synth = None
        self._exit_stack.close()
        logger.info("Audio stopped")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.stop()
