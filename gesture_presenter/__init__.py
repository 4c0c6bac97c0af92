"""
Gesture Presenter - Hand gesture remote for presentations.

This module runs on a laptop or phone-tethered machine, detects pointing
gestures in the camera feed with MediaPipe, and posts Left/Right slide
gestures with a pairing code to the presenter endpoint over HTTP.
"""

__version__ = "1.0.0"
