"""Utility functions for running facefx."""

import json
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

import cv2
import numpy as np

from facefx.util import (
    DFLT_CANVAS_HEIGHT,
    DFLT_CANVAS_WIDTH,
    DFLT_N_PARTICLES,
    return_none as do_nothing,
    setup_logging,
)

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------
# Object resolution
# -------------------------------------------------------------------------------

T = TypeVar('T')


def resolve_object(
    obj: Union[str, T],
    *,
    object_map: Dict[str, T],
    expected_type: type = None,
    error_message: str = None,
) -> T:
    """
    Resolves an object by either returning it directly if it's of the correct type,
    or looking it up in a mapping if it's a string.

    Args:
        obj: The object to resolve. Can be a string (to be looked up in object_map)
             or the object itself.
        object_map: A dictionary mapping strings to objects of type T.
        expected_type: (Optional) The expected type of the resolved object.
        error_message: (Optional) A custom error message for ValueError or TypeError.

    Raises:
        TypeError: If obj (or what it resolves to) is not of the expected type.
        ValueError: If obj is a string but is not found in object_map.

    >>> resolve_object('one', object_map={'one': 1})
    1
    >>> resolve_object(2, object_map={'one': 1}, expected_type=int)
    2
    >>> resolve_object('two', object_map={'one': 1})
    Traceback (most recent call last):
      ...
    ValueError: Unknown object identifier: two
    """
    if isinstance(obj, str):
        if obj in object_map:
            resolved_obj = object_map[obj]
        else:
            msg = error_message or f"Unknown object identifier: {obj}"
            raise ValueError(msg)
    elif expected_type is None or isinstance(obj, expected_type):
        resolved_obj = obj
    else:
        msg = error_message or f"Expected type {expected_type}, got {type(obj)}"
        raise TypeError(msg)

    if expected_type and not isinstance(resolved_obj, expected_type):
        msg = (
            error_message
            or f"Resolved object should be of type {expected_type}, got {type(resolved_obj)}"
        )
        raise TypeError(msg)

    return resolved_obj


def resolve_tone_func(tone_func):
    from facefx.audio import tone_funcs

    return resolve_object(tone_func, object_map=tone_funcs)


# -------------------------------------------------------------------------------
# Logging utilities
# -------------------------------------------------------------------------------


def print_json_if_possible(x):
    """Prints the input (as json, if possible) and adds a newline."""
    try:
        x = json.dumps(x)
    except (TypeError, ValueError):
        pass
    print(x)
    print()


# -------------------------------------------------------------------------------
# Keyboard handling functions
# -------------------------------------------------------------------------------

ESCAPE_KEY_ASCII = 27
BREAK_KEYS = {ESCAPE_KEY_ASCII}


class KeyboardBreakSignal(Exception):
    """Exception raised when a break key is pressed."""


def read_keyboard(wait_time: int = 5) -> int:
    """
    Read keyboard input with the specified wait time (in milliseconds).
    This is also when OpenCV runs the window's mouse callbacks.
    """
    return cv2.waitKey(wait_time) & 0xFF


def keyboard_feature_vector(key_code: int) -> Dict[str, Any]:
    """
    Convert a key code into a feature vector with keyboard information.

    Raises:
        KeyboardBreakSignal: If a key that signals program termination is pressed

    >>> keyboard_feature_vector(ord('f'))['key_pressed']
    True
    """
    keyboard_fv = {
        'key_code': key_code,
        'key_pressed': 0 < key_code < 255,
        'is_escape': key_code == ESCAPE_KEY_ASCII,
    }

    if keyboard_fv['key_code'] in BREAK_KEYS:
        raise KeyboardBreakSignal(f"Break key pressed: {key_code}")

    return keyboard_fv


# -------------------------------------------------------------------------------
# Pointer handling
# -------------------------------------------------------------------------------


class Pointer:
    """
    Tracks the mouse over the display window, and forwards left clicks.

    >>> clicks = []
    >>> pointer = Pointer(on_click=lambda: clicks.append(1))
    >>> pointer.mouse_callback(cv2.EVENT_MOUSEMOVE, 30, 40, 0, None)
    >>> pointer.mouse_callback(cv2.EVENT_LBUTTONDOWN, 50, 60, 0, None)
    >>> pointer.position, len(clicks)
    ((50, 60), 1)
    """

    def __init__(self, on_click: Optional[Callable] = None, position=(0, 0)):
        self.on_click = on_click or do_nothing
        self.position: Tuple[int, int] = tuple(position)

    def mouse_callback(self, event, x, y, flags, param):
        """To be given to ``cv2.setMouseCallback``."""
        if event == cv2.EVENT_MOUSEMOVE:
            self.position = (x, y)
        elif event == cv2.EVENT_LBUTTONDOWN:
            self.position = (x, y)
            self.on_click()


# -------------------------------------------------------------------------------
# Camera handling functions
# -------------------------------------------------------------------------------


class CameraReadError(Exception):
    """Exception raised when camera read fails."""


def read_camera(cap: cv2.VideoCapture, size: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """
    Read a frame from the camera, flip it horizontally and resize it.

    Args:
        cap: OpenCV video capture object
        size: (width, height) to resize the frame to, or None to keep it

    Raises:
        CameraReadError: If the camera read operation fails
    """
    success, img = cap.read()
    if not success:
        raise CameraReadError("Failed to read from camera")

    # Flip image horizontally for a more natural interaction
    img = cv2.flip(img, 1)
    if size is not None and (img.shape[1], img.shape[0]) != tuple(size):
        img = cv2.resize(img, tuple(size))
    return img


# -------------------------------------------------------------------------------
# Main run function
# -------------------------------------------------------------------------------

DFLT_TONE_FUNC_NAME = "sine"
DFLT_WINDOW_NAME = "facefx"


def run_facefx(
    *,
    camera_index: int = 0,
    width: int = DFLT_CANVAS_WIDTH,
    height: int = DFLT_CANVAS_HEIGHT,
    tone_func: Union[str, Callable] = DFLT_TONE_FUNC_NAME,
    n_particles: int = DFLT_N_PARTICLES,
    max_particles: Optional[int] = None,
    max_ripples: Optional[int] = None,
    seed: Optional[int] = None,
    threaded_detection: bool = False,
    log_face_features: Optional[Callable] = None,
    window_name: str = DFLT_WINDOW_NAME,
):
    """
    Run the webcam effects application.

    Keys: ``f`` filter, ``d`` draw mode, ``g`` gesture mode, ``s`` sound,
    Escape quits. Clicking toggles whether particles follow the face or the
    mouse, and starts the sound the first time.

    Args:
        camera_index: Index of the capture device
        width, height: Canvas size frames are resized to
        tone_func: Tone function (or its name in ``tone_funcs``) for the audio
        n_particles: Size of the particle pool
        max_particles: Optional cap on the pool size
        max_ripples: Optional cap on the number of live ripples
        seed: Seed of the random generator, for reproducible effects
        threaded_detection: Run face detection on a background thread
        log_face_features: Function called with the face signals after each
            detection (or None to disable)
        window_name: Title for the display window
    """
    from facefx.audio import AudioFeedback
    from facefx.detection import FaceMeshDetector
    from facefx.face_signal import (
        NOTHING,
        BackgroundDetector,
        FaceSignalAdapter,
        LatestValue,
    )
    from facefx.modes import InputModeController
    from facefx.pipeline import EffectPipeline

    tone_func = resolve_tone_func(tone_func)
    log_face_features = log_face_features or do_nothing

    modes = InputModeController()
    detections = LatestValue()
    cap = cv2.VideoCapture(camera_index)

    # The synth and the face mesh are released on exit, however the loop ends
    with AudioFeedback(tone_func) as audio, FaceMeshDetector() as detector:
        face_signal = FaceSignalAdapter(modes, audio, canvas_height=height)
        pipeline = EffectPipeline(
            face_signal,
            modes,
            width=width,
            height=height,
            n_particles=n_particles,
            max_particles=max_particles,
            max_ripples=max_ripples,
            rng=np.random.default_rng(seed),
        )
        pointer = Pointer(on_click=partial(modes.handle_click, audio))
        background = (
            BackgroundDetector(detector, detections.put) if threaded_detection else None
        )

        cv2.namedWindow(window_name)
        cv2.setMouseCallback(window_name, pointer.mouse_callback)
        logger.info(f"Starting: camera {camera_index}, canvas {width}x{height}")

        try:
            if background is not None:
                background.start()
            while cap.isOpened():
                try:
                    key_code = read_keyboard()

                    # Raises on break keys
                    keyboard_feature_vector(key_code)
                    modes.handle_key(key_code)

                    img = read_camera(cap, (width, height))

                    if background is not None:
                        background.submit(img.copy())
                    else:
                        detections.put(detector.find_faces(img))

                    faces = detections.take()
                    if faces is not NOTHING:
                        face_signal.on_detection(faces)
                        log_face_features(face_signal.feature_dict())

                    img = pipeline.tick(img, pointer.position)

                    cv2.imshow(window_name, img)

                except (CameraReadError, KeyboardBreakSignal) as e:
                    logger.info(f"Stopping: {e}")
                    break

        finally:
            if background is not None:
                background.stop()
            cap.release()
            cv2.destroyAllWindows()
            logger.info(f"Stopped after {pipeline.frame_count} frames")


def facefx_cli(
    # Capture and canvas
    camera_index: int = 0,
    width: int = DFLT_CANVAS_WIDTH,
    height: int = DFLT_CANVAS_HEIGHT,
    # Effects
    tone: str = DFLT_TONE_FUNC_NAME,
    n_particles: int = DFLT_N_PARTICLES,
    max_particles: int = 0,
    max_ripples: int = 0,
    seed: int = -1,
    threaded_detection: bool = False,
    # Logging options
    log_level: str = "INFO",
    log_face_features: bool = False,
    # Display options
    window_name: str = DFLT_WINDOW_NAME,
    # List available components
    list_tones: bool = False,
):
    """
    Run the webcam effects application with the specified parameters.

    Args:
        camera_index: Index of the capture device
        width: Canvas width
        height: Canvas height
        tone: Name of the tone function used for the audio feedback
        n_particles: Initial number of particles
        max_particles: Cap on the number of particles (0 for no cap)
        max_ripples: Cap on the number of ripples (0 for no cap)
        seed: Random seed (negative for a random one)
        threaded_detection: Run face detection on a background thread
        log_level: Logging level of the facefx logger
        log_face_features: Whether to print the face signals after each detection
        window_name: Title for the display window
        list_tones: List available tone functions and exit
    """
    if list_tones:
        from facefx.audio import tone_funcs

        print("Available tone functions:")
        for name in sorted(tone_funcs.keys()):
            print(f"  - {name}")
        return

    setup_logging(log_level.upper())

    log_face_features_callback = print_json_if_possible if log_face_features else None

    run_facefx(
        camera_index=camera_index,
        width=width,
        height=height,
        tone_func=tone,
        n_particles=n_particles,
        max_particles=max_particles or None,
        max_ripples=max_ripples or None,
        seed=None if seed < 0 else seed,
        threaded_detection=threaded_detection,
        log_face_features=log_face_features_callback,
        window_name=window_name,
    )
