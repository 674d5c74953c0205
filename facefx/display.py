"""Display utilities for facefx visualization."""

import math

import cv2
import numpy as np
from typing import Union, Tuple, Sequence, Callable

# -------------------------------------------------------------------------------
# Types
# -------------------------------------------------------------------------------

Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]  # BGR or BGRA
Point = Tuple[float, float]

WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
RED = (0, 0, 255)  # BGR


def rgb_to_bgr(color) -> Tuple[int, int, int]:
    """
    Convert an RGB triple into OpenCV's BGR order.

    >>> rgb_to_bgr((10, 20, 30))
    (30, 20, 10)
    """
    r, g, b = color[:3]
    return (int(b), int(g), int(r))


def as_pixel(point: Point) -> Tuple[int, int]:
    """Round a float point to integer pixel coordinates."""
    return (int(round(point[0])), int(round(point[1])))


# -------------------------------------------------------------------------------
# Alpha blending
# -------------------------------------------------------------------------------


def draw_with_alpha(
    img: np.ndarray,
    draw: Callable[[np.ndarray, Tuple[int, int]], None],
    bbox: Tuple[int, int, int, int],
    alpha: float,
):
    """
    Draw something semi-transparent, blending only the region it can touch.

    Args:
        img: The image to draw on (modified in place)
        draw: Function taking ``(roi, offset)`` that draws opaquely on ``roi``,
            where ``offset`` is the ``(x, y)`` of the roi's top-left corner
        bbox: ``(x0, y0, x1, y1)`` region the drawing may touch
        alpha: Opacity, from 0 (invisible) to 1 (opaque)

    Returns:
        img
    """
    alpha = float(np.clip(alpha, 0.0, 1.0))
    if alpha <= 0:
        return img

    h, w = img.shape[:2]
    x0, y0, x1, y1 = bbox
    x0, y0 = max(int(x0), 0), max(int(y0), 0)
    x1, y1 = min(int(x1), w), min(int(y1), h)
    if x0 >= x1 or y0 >= y1:
        return img

    roi = img[y0:y1, x0:x1]
    overlay = roi.copy()
    draw(overlay, (x0, y0))
    img[y0:y1, x0:x1] = cv2.addWeighted(overlay, alpha, roi, 1 - alpha, 0)
    return img


def draw_rotated_square(
    img: np.ndarray,
    center: Point,
    size: float,
    angle: float,
    color: Color,
    alpha: float = 1.0,
):
    """
    Draw a filled square of side ``size`` centered on ``center``, rotated by
    ``angle`` radians.
    """
    corners = cv2.boxPoints(
        ((float(center[0]), float(center[1])), (size, size), math.degrees(angle))
    )
    x0, y0 = np.floor(corners.min(axis=0)).astype(int)
    x1, y1 = np.ceil(corners.max(axis=0)).astype(int) + 1

    def draw(roi, offset):
        pts = np.round(corners - offset).astype(np.int32)
        cv2.fillPoly(roi, [pts], color, lineType=cv2.LINE_AA)

    return draw_with_alpha(img, draw, (x0, y0, x1, y1), alpha)


def draw_circle(
    img: np.ndarray,
    center: Point,
    diameter: float,
    color: Color = WHITE,
    alpha: float = 1.0,
    *,
    thickness: int = 1,
):
    """Draw an unfilled circle of the given diameter."""
    radius = max(int(round(diameter / 2)), 0)
    cx, cy = as_pixel(center)
    margin = radius + thickness + 1
    bbox = (cx - margin, cy - margin, cx + margin + 1, cy + margin + 1)

    def draw(roi, offset):
        local_center = (cx - offset[0], cy - offset[1])
        cv2.circle(roi, local_center, radius, color, thickness, lineType=cv2.LINE_AA)

    return draw_with_alpha(img, draw, bbox, alpha)


# -------------------------------------------------------------------------------
# Face geometry overlays
# -------------------------------------------------------------------------------


def draw_feature_polygon(img: np.ndarray, points: Sequence[Point], color=GREEN):
    """Draw a closed polygon through the feature points."""
    pts = np.array([as_pixel(p) for p in points], dtype=np.int32)
    cv2.polylines(img, [pts], isClosed=True, color=color, thickness=1)
    return img


def draw_radial_lines(img: np.ndarray, points: Sequence[Point], color=RED):
    """Draw lines from the center of the image to each feature point."""
    h, w = img.shape[:2]
    center = (w // 2, h // 2)
    for point in points:
        cv2.line(img, center, as_pixel(point), color, 1)
    return img


def kaleidoscope_segments(center: Point, *, n_segments=8, length=50):
    """
    Endpoints of the rays of a kaleidoscope burst, evenly rotated around
    ``center``.

    >>> segments = kaleidoscope_segments((0, 0), n_segments=4, length=10)
    >>> [tuple(round(v) for v in end) for _, end in segments]
    [(0, 10), (-10, 0), (0, -10), (10, 0)]
    """
    cx, cy = center[0], center[1]
    step = 2 * math.pi / n_segments
    return [
        (
            (cx, cy),
            (cx + length * math.cos(k * step), cy + length * math.sin(k * step)),
        )
        for k in range(1, n_segments + 1)
    ]


def draw_kaleidoscope(
    img: np.ndarray,
    center: Point,
    *,
    n_segments=8,
    length=50,
    color=WHITE,
    alpha=100 / 255,
):
    """Draw an ``n_segments`` rotational burst of lines at ``center``."""
    segments = kaleidoscope_segments(center, n_segments=n_segments, length=length)
    cx, cy = as_pixel(center)
    margin = length + 2
    bbox = (cx - margin, cy - margin, cx + margin + 1, cy + margin + 1)

    def draw(roi, offset):
        ox, oy = offset
        for start, end in segments:
            cv2.line(
                roi,
                (int(round(start[0])) - ox, int(round(start[1])) - oy),
                (int(round(end[0])) - ox, int(round(end[1])) - oy),
                color,
                1,
                lineType=cv2.LINE_AA,
            )

    return draw_with_alpha(img, draw, bbox, alpha)


# -------------------------------------------------------------------------------
# Text
# -------------------------------------------------------------------------------


def draw_text(
    img: np.ndarray,
    text: str,
    position: Tuple[int, int],
    *,
    font=cv2.FONT_HERSHEY_SIMPLEX,
    font_scale: float = 0.5,
    color: Color = WHITE,
    thickness: int = 1,
):
    """Write ``text`` with its baseline starting at ``position``."""
    cv2.putText(
        img, text, position, font, font_scale, color, thickness, cv2.LINE_AA
    )
    return img


def display_text_on_image(
    img: np.ndarray,
    text: str,
    *,
    font=cv2.FONT_HERSHEY_SIMPLEX,
    font_scale: float = 0.5,
    color: Color = WHITE,
    thickness: int = 1,
    x_pos=10,
    y_pos=20,
    bg_color: Color = (
        60,
        60,
        60,
        128,
    ),  # Dark grey, semi-transparent (BGR + alpha)
):
    """
    Display a line of text on the image with a semi-transparent background.

    Args:
        img: The image to draw on
        text: The text to write
        font: Font type to use
        font_scale: Size of the font
        color: Text color in BGR format
        thickness: Line thickness of text
        x_pos: x position of the text start
        y_pos: y position of the text baseline
        bg_color: Background color (BGR + alpha) where alpha is 0-255
    """
    if not text:
        return img

    if len(bg_color) == 4:
        bg_rgb = bg_color[:3]
        alpha = bg_color[3] / 255.0
    else:
        bg_rgb = bg_color
        alpha = 0.5

    (text_width, text_height), baseline = cv2.getTextSize(
        text, font, font_scale, thickness
    )
    padding = 4

    def draw_background(roi, offset):
        cv2.rectangle(roi, (0, 0), (roi.shape[1], roi.shape[0]), bg_rgb, -1)

    draw_with_alpha(
        img,
        draw_background,
        (
            x_pos - padding,
            y_pos - text_height - padding,
            x_pos + text_width + padding,
            y_pos + baseline + padding,
        ),
        alpha,
    )

    return draw_text(
        img,
        text,
        (x_pos, y_pos),
        font=font,
        font_scale=font_scale,
        color=color,
        thickness=thickness,
    )
