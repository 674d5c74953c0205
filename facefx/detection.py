"""Face landmark detection with MediaPipe's Face Mesh."""

from typing import List

import cv2
import mediapipe as mp
import numpy as np


def landmarks_to_pixels(face_landmarks, width: int, height: int) -> np.ndarray:
    """
    Convert MediaPipe normalized landmarks into an ``(n, 3)`` array of pixel
    coordinates (z is scaled by the width, as MediaPipe suggests).
    """
    return np.array(
        [(lm.x * width, lm.y * height, lm.z * width) for lm in face_landmarks.landmark],
        dtype=float,
    )


class FaceMeshDetector:
    """
    A class to detect face landmarks using MediaPipe's FaceMesh.

    Attributes:
        max_faces (int): Maximum number of faces to detect.
        detection_con (float): Minimum detection confidence threshold.
        track_con (float): Minimum tracking confidence threshold.
        refine_landmarks (bool): Whether to refine eye and lip landmarks.
    """

    def __init__(
        self,
        *,
        max_faces=1,
        detection_con=0.5,
        track_con=0.5,
        refine_landmarks=False,
    ):
        self.max_faces = max_faces
        self.detection_con = detection_con
        self.track_con = track_con
        self.refine_landmarks = refine_landmarks

        self.mp_face_mesh = mp.solutions.face_mesh
        self.face_mesh = self.mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=self.max_faces,
            refine_landmarks=self.refine_landmarks,
            min_detection_confidence=self.detection_con,
            min_tracking_confidence=self.track_con,
        )

    def find_faces(self, img: np.ndarray) -> List[np.ndarray]:
        """
        Detects faces in the provided (BGR) image.

        Args:
            img: The input image.

        Returns:
            list: One array of pixel-coordinate landmarks per detected face
            (empty if none was found).
        """
        if img is None or img.size == 0:
            return []

        h, w = img.shape[:2]
        img_rgb = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
        face_detection = self.face_mesh.process(img_rgb)

        if not face_detection.multi_face_landmarks:
            return []
        return [
            landmarks_to_pixels(face_landmarks, w, h)
            for face_landmarks in face_detection.multi_face_landmarks
        ]

    __call__ = find_faces

    def close(self):
        self.face_mesh.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
