#!/usr/bin/env python
"""
Command-line interface for the facefx application.

This script provides a CLI wrapper around the run_facefx function, allowing all
parameters to be controlled via command-line arguments.

Examples:
    # Run with default settings (face-following particles, sine tone)
    python -m facefx.main

    # Use the second camera, and a theremin-like tone
    python -m facefx.main --camera-index 1 --tone theremin

    # Print the face signals after each detection
    python -m facefx.main --log-face-features --log-level DEBUG

    # Detect faces on a background thread, with capped populations
    python -m facefx.main --threaded-detection --max-particles 500 --max-ripples 50

While running: f cycles filters, d cycles draw modes, g cycles gesture modes,
s toggles sound, clicking toggles face/mouse following, Escape quits.
"""

import argh
from facefx.script_utils import facefx_cli


def dispatched_facefx_cli():
    argh.dispatch_command(facefx_cli)


if __name__ == "__main__":
    dispatched_facefx_cli()
