"""Per-pixel filters applied to the video frame before the overlays are drawn.

Frames are OpenCV BGR ``uint8`` arrays of shape ``(height, width, 3)``.
"""

import numpy as np

PASSTHROUGH, GRAYSCALE, INVERT, TINT = range(4)

FILTER_NAMES = {
    PASSTHROUGH: 'none',
    GRAYSCALE: 'grayscale',
    INVERT: 'invert',
    TINT: 'tint',
}
N_FILTER_MODES = len(FILTER_NAMES)

# Per channel factors of the tint filter, in BGR order
TINT_FACTORS = np.array([0.5, 0.5, 1.5])


def grayscale(img: np.ndarray) -> np.ndarray:
    """
    Every channel becomes the unweighted mean of the three.

    >>> grayscale(np.array([[[0, 30, 90]]], dtype=np.uint8))
    array([[[40, 40, 40]]], dtype=uint8)
    """
    mean = np.rint(img[..., :3].mean(axis=-1, keepdims=True))
    out = img.copy()
    out[..., :3] = mean.astype(np.uint8)
    return out


def invert(img: np.ndarray) -> np.ndarray:
    """
    >>> invert(np.array([[[0, 55, 255]]], dtype=np.uint8))
    array([[[255, 200,   0]]], dtype=uint8)
    """
    out = img.copy()
    out[..., :3] = 255 - img[..., :3]
    return out


def tint(img: np.ndarray) -> np.ndarray:
    """
    Boost red by half and halve green and blue, clamping to the uint8 range.

    >>> tint(np.array([[[100, 100, 200]]], dtype=np.uint8))
    array([[[ 50,  50, 255]]], dtype=uint8)
    """
    out = img.copy()
    scaled = img[..., :3].astype(np.float32) * TINT_FACTORS
    out[..., :3] = np.clip(np.rint(scaled), 0, 255).astype(np.uint8)
    return out


filter_funcs = {
    GRAYSCALE: grayscale,
    INVERT: invert,
    TINT: tint,
}


def apply_filter(img: np.ndarray, mode: int) -> np.ndarray:
    """
    Apply the filter of the given mode. Mode 0 returns ``img`` itself.

    Raises:
        ValueError: If the mode is not one of the filter modes.
    """
    if mode == PASSTHROUGH:
        return img
    if mode not in filter_funcs:
        raise ValueError(
            f"Unknown filter mode: {mode}. Should be one of {sorted(FILTER_NAMES)}"
        )
    return filter_funcs[mode](img)
