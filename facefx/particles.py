"""Particles and ripples: the two populations of face-driven effects."""

import math
from typing import Optional

import numpy as np

from facefx.display import draw_circle, draw_rotated_square, rgb_to_bgr, WHITE
from facefx.util import RangeMapper

INITIAL_LIFESPAN = 255
STEERING_FORCE = 0.5
MAX_SPEED = 5.0


def limit_magnitude(vector: np.ndarray, max_magnitude: float) -> np.ndarray:
    """
    Scale ``vector`` down to ``max_magnitude`` if it is longer than that.

    >>> limit_magnitude(np.array([3.0, 4.0]), 2.5)
    array([1.5, 2. ])
    >>> limit_magnitude(np.array([0.3, 0.4]), 2.5)
    array([0.3, 0.4])
    """
    norm = np.linalg.norm(vector)
    if norm > max_magnitude:
        return vector * (max_magnitude / norm)
    return vector


def set_magnitude(vector: np.ndarray, magnitude: float) -> np.ndarray:
    """
    Rescale ``vector`` to the given magnitude. A zero vector stays zero.

    >>> set_magnitude(np.array([0.0, 2.0]), 0.5)
    array([0. , 0.5])
    >>> set_magnitude(np.zeros(2), 0.5)
    array([0., 0.])
    """
    norm = np.linalg.norm(vector)
    if norm == 0:
        return np.zeros_like(vector)
    return vector * (magnitude / norm)


class Particle:
    """
    A rotating square that steers toward a target and fades as it ages.

    Attributes:
        position (np.ndarray): Current position, in pixels.
        velocity (np.ndarray): Pixels per frame.
        size (float): Side of the square.
        color (tuple): RGB color.
        lifespan (int): Starts at 255, decremented each update. Also the alpha.
        angle (float): Current rotation, in radians.
        rotation_speed (float): Radians per frame.
    """

    def __init__(self, x: float, y: float, *, rng: Optional[np.random.Generator] = None):
        rng = rng if rng is not None else np.random.default_rng()
        self.position = np.array([x, y], dtype=float)
        self.velocity = rng.uniform(-2, 2, size=2)
        self.size = float(rng.uniform(3, 8))
        self.color = tuple(int(c) for c in rng.integers(0, 256, size=3))
        self.lifespan = INITIAL_LIFESPAN
        self.rotation_speed = float(rng.uniform(-0.1, 0.1))
        self.angle = float(rng.uniform(0, 2 * math.pi))

    def update(self, target_x: float, target_y: float):
        """Steer toward the target, move, age and spin by one frame."""
        force = set_magnitude(np.array([target_x, target_y]) - self.position, STEERING_FORCE)
        self.velocity = limit_magnitude(self.velocity + force, MAX_SPEED)
        self.position = self.position + self.velocity
        self.lifespan -= 1
        self.angle += self.rotation_speed

    def show(self, img: np.ndarray):
        draw_rotated_square(
            img,
            self.position,
            self.size,
            self.angle,
            rgb_to_bgr(self.color),
            alpha=self.lifespan / 255,
        )
        return img

    def is_dead(self) -> bool:
        return self.lifespan < 0

    def __repr__(self):
        x, y = self.position
        return f"{type(self).__name__}(x={x:.1f}, y={y:.1f}, lifespan={self.lifespan})"


class Ripple:
    """
    An expanding ring, fixed at its origin, that fades out as it grows.

    >>> ripple = Ripple(10, 20, rng=np.random.default_rng(0))
    >>> 50 <= ripple.max_size < 150 and 2 <= ripple.speed < 5
    True
    >>> ripple.size, ripple.alpha
    (0.0, 255)
    """

    def __init__(
        self,
        x: float,
        y: float,
        *,
        max_size: Optional[float] = None,
        speed: Optional[float] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        rng = rng if rng is not None else np.random.default_rng()
        self.origin = (float(x), float(y))
        self.size = 0.0
        self.max_size = float(max_size if max_size is not None else rng.uniform(50, 150))
        self.speed = float(speed if speed is not None else rng.uniform(2, 5))
        self.alpha = 255
        self._alpha_mapper = RangeMapper((0, self.max_size), (255, 0))

    def update(self):
        self.size += self.speed
        self.alpha = self._alpha_mapper(self.size)

    def show(self, img: np.ndarray):
        """Draw the ring, with ``size`` as its diameter."""
        draw_circle(img, self.origin, self.size, WHITE, alpha=self.alpha / 255)
        return img

    def is_dead(self) -> bool:
        return self.size > self.max_size

    def __repr__(self):
        return (
            f"{type(self).__name__}(origin={self.origin}, "
            f"size={self.size:.1f}, max_size={self.max_size:.1f})"
        )
