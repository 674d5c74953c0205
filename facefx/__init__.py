"""
facefx: face-driven effects over a live webcam feed.

Particles swarm toward your nose (or the mouse), ripples spread from it, lines
and kaleidoscope bursts trace your face, a tone follows how high your head is,
and smiling can make more particles appear.

Here's what's where:

* util.py: constants (canvas, landmark indices), range mapping, logging setup.
* particles.py: the Particle and Ripple effects.
* gestures.py: smile/wink/neutral classification from landmarks, and its history.
* filters.py: grayscale, invert and tint pixel filters.
* display.py: OpenCV drawing helpers (semi-transparent shapes, overlays, text).
* face_signal.py: turns detections into face features, gestures and pitch.
* detection.py: MediaPipe Face Mesh landmark detection.
* audio.py: the tone (pyo, through hum's Synth) whose pitch follows the face.
* modes.py: the keyboard and mouse controlled modes.
* pipeline.py: the per-frame effect pipeline.
* script_utils.py: the webcam run loop and its CLI function (see main.py).

"""
