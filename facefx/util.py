"""Utils for facefx."""

import logging
from typing import Tuple

pkg_name = 'facefx'


def return_none(*args, **kwargs):
    """
    An empty function that returns None no matter the arguments.
    Often used as a "do nothing" general callback function.
    """
    return None


def identity(x):
    """Identity function."""
    return x


# --------------------------------------------------------------------------------------
# Constants

DFLT_CANVAS_WIDTH = 640
DFLT_CANVAS_HEIGHT = 480
DFLT_N_PARTICLES = 100
DFLT_RIPPLE_PROBABILITY = 0.1
DFLT_SMILE_SPAWN_COUNT = 5
DFLT_GESTURE_HISTORY_SIZE = 10
DFLT_MIN_PITCH = 100
DFLT_MAX_PITCH = 500
DFLT_TONE_VOLUME = 0.1


class FaceLandmark:
    """Face mesh landmark indices used by the effects."""

    NOSE_TIP = 1
    LOWER_LIP = 13
    UPPER_LIP = 14
    LEFT_EYE_OUTER = 33
    LEFT_EYELID = 159
    RIGHT_EYE_OUTER = 263
    LEFT_EYE_INNER = 362
    RIGHT_EYELID = 386


# The anchor points, in order. The first one is the primary anchor.
FACE_FEATURE_INDICES = (
    FaceLandmark.NOSE_TIP,
    FaceLandmark.LOWER_LIP,
    FaceLandmark.UPPER_LIP,
    FaceLandmark.LEFT_EYE_OUTER,
    FaceLandmark.RIGHT_EYE_OUTER,
    FaceLandmark.LEFT_EYE_INNER,
)


# --------------------------------------------------------------------------------------
# Range mapping

Range = Tuple[float, float]


class RangeMapper:
    """
    A callable class that maps values from one range to another, linearly,
    clamping to the ends of the target range.
    Precomputes scaling factors for better performance.

    >>> mapper = RangeMapper((0, 1), (100, 200))
    >>> mapper(0.5)
    150.0
    >>> mapper(-0.1)  # Below range
    100
    >>> mapper(1.5)   # Above range
    200

    Decreasing target ranges work too:

    >>> fade = RangeMapper((0, 100), (255, 0))
    >>> fade(25)
    191.25
    """

    def __init__(
        self,
        value_range: Range,
        target_range: Range,
        *,
        ingress=identity,
        egress=identity,
    ):
        """
        Initialize the range mapper with source and target ranges.

        Args:
            value_range: The range of the input value (min, max)
            target_range: The range to map to (start, end)
        """
        self.value_min, self.value_max = value_range
        self.target_min, self.target_max = target_range

        self._value_span = self.value_max - self.value_min
        self._target_span = self.target_max - self.target_min
        self._scale_factor = self._target_span / self._value_span
        self.ingress = ingress
        self.egress = egress

    def __call__(self, value: float) -> float:
        value = self.ingress(value)
        if value <= self.value_min:
            output = self.target_min
        elif value >= self.value_max:
            output = self.target_max
        else:
            output = self.target_min + (value - self.value_min) * self._scale_factor

        return self.egress(output)


# --------------------------------------------------------------------------------------
# String utils


def format_point(point, *, ndigits=1):
    """
    Format a 2D (or more) point as a compact string.

    >>> format_point((12.345, 6.789))
    '(12.3, 6.8)'
    >>> format_point((1, 2, 3), ndigits=0)
    '(1, 2)'
    """
    x, y = point[0], point[1]
    return f"({x:.{ndigits}f}, {y:.{ndigits}f})"


# --------------------------------------------------------------------------------------
# Logging

DFLT_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging(level='INFO', *, log_format=DFLT_LOG_FORMAT):
    """
    Configure the dedicated ``facefx`` logger (not the root logger), so that
    verbose logs from third-party libraries (mediapipe, pyo) stay out of ours.

    Calling it again replaces the handler instead of duplicating it.
    """
    logger = logging.getLogger(pkg_name)
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format))

    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(handler)

    return logger
