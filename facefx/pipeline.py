"""The per-frame effect pipeline.

Each frame, the pipeline filters the video frame, then (only while a face is
present) spawns ripples, draws the face geometry, moves and draws the
particles and ripples, and reacts to the current gesture. It ends with a
status line.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from facefx.display import (
    display_text_on_image,
    draw_feature_polygon,
    draw_kaleidoscope,
    draw_radial_lines,
    draw_text,
)
from facefx.filters import apply_filter
from facefx.gestures import Gesture
from facefx.modes import (
    DRAW_KALEIDOSCOPE,
    DRAW_NONE,
    DRAW_POLYGON,
    DRAW_RADIAL,
    GESTURE_OFF,
    GESTURE_SHOW,
)
from facefx.particles import Particle, Ripple
from facefx.util import (
    DFLT_CANVAS_HEIGHT,
    DFLT_CANVAS_WIDTH,
    DFLT_N_PARTICLES,
    DFLT_RIPPLE_PROBABILITY,
    DFLT_SMILE_SPAWN_COUNT,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

draw_mode_funcs = {
    DRAW_POLYGON: draw_feature_polygon,
    DRAW_RADIAL: draw_radial_lines,
}


class EffectPipeline:
    """
    Owns the particle and ripple populations and renders them, with the other
    effects, onto each frame.

    Args:
        face_signal: The FaceSignalAdapter holding the current face features
        modes: The InputModeController
        width, height: Canvas size, where new particles are placed
        n_particles: Initial size of the particle pool
        ripple_probability: Chance, per frame with a face, of a new ripple
        smile_spawn_count: Particles added per frame of smile (gesture mode 2)
        max_particles: Optional cap on the pool size (smile spawns stop there)
        max_ripples: Optional cap on the number of live ripples
        rng: Random generator (a fresh one if not given)
    """

    def __init__(
        self,
        face_signal,
        modes,
        *,
        width: int = DFLT_CANVAS_WIDTH,
        height: int = DFLT_CANVAS_HEIGHT,
        n_particles: int = DFLT_N_PARTICLES,
        ripple_probability: float = DFLT_RIPPLE_PROBABILITY,
        smile_spawn_count: int = DFLT_SMILE_SPAWN_COUNT,
        max_particles: Optional[int] = None,
        max_ripples: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.face_signal = face_signal
        self.modes = modes
        self.width = width
        self.height = height
        self.ripple_probability = ripple_probability
        self.smile_spawn_count = smile_spawn_count
        self.max_particles = max_particles
        self.max_ripples = max_ripples
        self.rng = rng if rng is not None else np.random.default_rng()

        self.particles: List[Particle] = [self.new_particle() for _ in range(n_particles)]
        self.ripples: List[Ripple] = []
        self.frame_count = 0

    def new_particle(self) -> Particle:
        """A particle at a random position on the canvas."""
        x = self.rng.uniform(0, self.width)
        y = self.rng.uniform(0, self.height)
        return Particle(x, y, rng=self.rng)

    # ---------------------------------------------------------------------------
    # The frame

    def tick(self, img: np.ndarray, pointer: Point = (0, 0)) -> np.ndarray:
        """
        Render one frame of effects.

        Args:
            img: The (mirrored) video frame, BGR
            pointer: Current pointer position, the target in mouse-follow mode

        Returns:
            The rendered image (a new array if a filter was applied, else
            ``img`` drawn on in place)
        """
        self.frame_count += 1
        img = apply_filter(img, self.modes.filter_mode)

        if self.face_signal.face_present:
            features = self.face_signal.features
            anchor = features[0]

            self.maybe_spawn_ripple(anchor)
            self.draw_geometry(img, features)

            target = pointer if self.modes.follow_mouse else anchor
            self.update_particles(img, target)
            self.update_ripples(img)
            self.react_to_gesture(img)

        display_text_on_image(img, self.modes.status_line())
        return img

    # ---------------------------------------------------------------------------
    # Steps

    def maybe_spawn_ripple(self, anchor):
        if self.rng.random() >= self.ripple_probability:
            return
        if self.max_ripples is not None and len(self.ripples) >= self.max_ripples:
            return
        self.ripples.append(Ripple(anchor[0], anchor[1], rng=self.rng))

    def draw_geometry(self, img, features):
        draw_mode = self.modes.draw_mode
        if draw_mode == DRAW_NONE:
            return
        if draw_mode == DRAW_KALEIDOSCOPE:
            for point in features:
                draw_kaleidoscope(img, point)
        elif draw_mode in draw_mode_funcs:
            draw_mode_funcs[draw_mode](img, features)

    def update_particles(self, img, target: Point):
        """Replace dead particles with new ones, move and draw the others.
        Replacements only start moving on the next frame."""
        tx, ty = float(target[0]), float(target[1])
        survivors = []
        n_dead = 0
        for particle in self.particles:
            if particle.is_dead():
                n_dead += 1
                continue
            particle.update(tx, ty)
            particle.show(img)
            survivors.append(particle)
        survivors.extend(self.new_particle() for _ in range(n_dead))
        self.particles = survivors

    def update_ripples(self, img):
        alive = []
        for ripple in self.ripples:
            ripple.update()
            ripple.show(img)
            if not ripple.is_dead():
                alive.append(ripple)
        self.ripples = alive

    def react_to_gesture(self, img):
        gesture_mode = self.modes.gesture_mode
        if gesture_mode == GESTURE_OFF:
            return
        gesture = self.face_signal.current_gesture
        if gesture is None:
            return
        draw_text(img, str(gesture), (10, img.shape[0] - 30), font_scale=0.8, thickness=2)

        if gesture_mode == GESTURE_SHOW or gesture is not Gesture.SMILE:
            return
        n_new = self.smile_spawn_count
        if self.max_particles is not None:
            n_new = min(n_new, max(self.max_particles - len(self.particles), 0))
        self.particles.extend(self.new_particle() for _ in range(n_new))
        if n_new:
            logger.debug(f"Smile: {n_new} new particles ({len(self.particles)} total)")
