#!/usr/bin/env python3
"""
Gesture Presenter Client - Main Entry Point

This client shows the camera feed, detects hands locally with MediaPipe,
turns left/right pointing into slide gestures and posts the stabilized
gesture, with a pairing code, to the presenter endpoint.

Environment Variables:
    GESTURE_PRESENTER_URL: Endpoint receiving gestures
    GESTURE_PAIRING_CODE: Pairing code of the presentation session

Usage:
    python -m gesture_presenter.main --code ABC123
    python -m gesture_presenter.main --code ABC123 --rear --rear-camera 1
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
import time
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np

from .debounce import GestureDebouncer
from .frame_gate import DetectorGate, FrameGate
from .gestures import LEFT, NONE, RIGHT, extract_landmark_lists, frame_vote
from .message import MessageValidator, create_gesture_message
from .notifier import DEFAULT_ENDPOINT, GestureNotifier
from .settings import KEY_ESC, SettingsPanel

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# MediaPipe setup
mp_hands = mp.solutions.hands
mp_draw = mp.solutions.drawing_utils

WINDOW_NAME = "Gesture Presenter"

# Overlay styles per gesture (BGR): Right green, Left red, None deep sky blue
HAND_STYLES = {
    RIGHT: (
        mp_draw.DrawingSpec(color=(0, 255, 0), thickness=2, circle_radius=2),
        mp_draw.DrawingSpec(color=(0, 255, 0), thickness=2),
    ),
    LEFT: (
        mp_draw.DrawingSpec(color=(0, 0, 255), thickness=2, circle_radius=2),
        mp_draw.DrawingSpec(color=(0, 0, 255), thickness=2),
    ),
    NONE: (
        mp_draw.DrawingSpec(color=(255, 191, 0), thickness=1, circle_radius=1),
        mp_draw.DrawingSpec(color=(255, 191, 0), thickness=1),
    ),
}


class GesturePresenterClient:
    """
    Main client that integrates all components:
    - Camera capture (user / environment facing)
    - Frame and detector gates
    - MediaPipe hand detection
    - Point gesture vote
    - Debounce timers
    - HTTP notification
    - Preview overlay and settings panel
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT,
        pairing_code: str = "",
        flipped: bool = False,
        user_camera: int = 0,
        environment_camera: int = 1,
        user_facing: bool = True,
        rate: float = 30.0,
        width: int = 500,
        height: int = 500,
        max_hands: int = 6,
        show_preview: bool = True,
        timeout: float = 5.0,
    ):
        """
        Initialize the presenter client.

        Args:
            endpoint_url: URL receiving gesture POSTs
            pairing_code: Pairing code of the presentation session
            flipped: Invert the left/right orientation
            user_camera: Camera index of the front (user) camera
            environment_camera: Camera index of the rear (environment) camera
            user_facing: Start on the front camera
            rate: Frame loop rate (Hz)
            width: Requested capture width
            height: Requested capture height
            max_hands: Maximum number of hands to detect
            show_preview: Whether to show the OpenCV preview window
            timeout: HTTP request timeout in seconds
        """
        self.endpoint_url = endpoint_url
        self.user_camera = user_camera
        self.environment_camera = environment_camera
        self.user_facing = user_facing
        self.rate = rate
        self.width = width
        self.height = height
        self.max_hands = max_hands
        self.show_preview = show_preview

        # Components
        self.settings = SettingsPanel(pairing_code=pairing_code, flipped=flipped)
        self.frame_gate = FrameGate()
        self.detector_gate = DetectorGate(retry_delay=0.5)
        self.debouncer = GestureDebouncer()
        self.validator = MessageValidator()
        self.notifier = GestureNotifier(
            endpoint_url=endpoint_url,
            timeout=timeout,
            on_failure=self._on_send_failed,
        )

        # Camera
        self.cap: Optional[cv2.VideoCapture] = None

        # MediaPipe
        self.hands: Optional[mp_hands.Hands] = None

        # State
        self._running = False
        self._started = False
        self.vote = 0
        self._last_results = None
        self._last_gestures: List[str] = []

        # UI font
        self.font = cv2.FONT_HERSHEY_SIMPLEX

    @property
    def camera_index(self) -> int:
        return self.user_camera if self.user_facing else self.environment_camera

    async def start(self) -> None:
        """Start the client."""
        logger.info("Starting Gesture Presenter Client...")
        self._started = True

        if not self._init_camera():
            raise RuntimeError("Failed to initialize camera")

        self._init_detector()
        await self.notifier.start()

        if not self.settings.pairing_code:
            if self.show_preview:
                self.settings.open("no pairing code")
            else:
                logger.warning("No pairing code set, gestures will not be sent")

        self._running = True
        logger.info("Gesture Presenter Client started")

    async def stop(self) -> None:
        """Stop the client and clean up resources."""
        if not self._started:
            return
        logger.info("Stopping Gesture Presenter Client...")
        self._started = False
        self._running = False

        await self.notifier.stop()
        self.debouncer.reset()
        self._release_camera()
        self._close_detector()

        if self.show_preview:
            cv2.destroyAllWindows()

        logger.info("Gesture Presenter Client stopped")

    def request_stop(self) -> None:
        """Ask the frame loop to exit; teardown happens in stop()."""
        self._running = False

    async def run(self) -> None:
        """Main frame loop."""
        target_dt = 1.0 / self.rate

        while self._running:
            loop_start = time.monotonic()

            try:
                self._process_frame()
            except Exception as e:
                logger.error(f"Error in frame loop: {e}")

            if self.show_preview:
                self._handle_key(cv2.waitKey(1) & 0xFF)

            # Yield to the notifier task even when the frame took too long
            elapsed = time.monotonic() - loop_start
            await asyncio.sleep(max(target_dt - elapsed, 0.0))

    def _process_frame(self) -> None:
        """Process a single frame through the pipeline."""
        ok, frame = self.cap.read()

        frame_result = self.frame_gate.validate(ok, frame)
        if not frame_result.valid:
            logger.debug(f"Frame invalid: {frame_result.reason}")
            return

        frame = frame_result.frame
        h, w = frame.shape[:2]
        now = time.monotonic()

        if self.detector_gate.ready(now):
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            mp_ok, results = self.detector_gate.process(self.hands, rgb, now)
            if mp_ok:
                self._last_results = results
                self.vote, self._last_gestures = frame_vote(
                    extract_landmark_lists(results), w, h,
                    flipped=self.settings.flipped,
                    user_facing=self.user_facing,
                )

        fired = self.debouncer.update(self.vote, now)
        if fired:
            self._send_gesture(fired)

        if self.show_preview:
            self._draw_preview(frame)
            cv2.imshow(WINDOW_NAME, frame)

    def _send_gesture(self, vote: int) -> None:
        """Create, validate and queue a gesture message."""
        if not self.settings.can_notify:
            logger.debug("Gesture ready but settings open or no pairing code")
            return

        msg = create_gesture_message(self.settings.pairing_code, vote)
        if msg is None:
            return

        valid, reason = self.validator.validate(msg)
        if not valid:
            logger.warning(f"Message validation failed: {reason}")
            return

        if not self.notifier.notify(msg):
            logger.warning("Failed to queue gesture")

    def _handle_key(self, key: int) -> None:
        """Handle preview window key presses."""
        if key == 255:
            return
        if self.settings.handle_key(key):
            return
        if key in (KEY_ESC, ord('q'), ord('Q')):
            logger.info("Quit requested")
            self.request_stop()
        elif key in (ord('s'), ord('S')):
            self.settings.open()
        elif key in (ord('c'), ord('C')):
            self.switch_camera()

    def switch_camera(self) -> None:
        """Toggle between the user and environment cameras."""
        self.user_facing = not self.user_facing
        logger.info(f"Switching to {'user' if self.user_facing else 'environment'} camera")

        self.debouncer.reset()
        self.vote = 0
        self._last_results = None
        self._last_gestures = []
        self._release_camera()
        self._close_detector()
        self.frame_gate.reset()
        self.detector_gate.reset()

        if not self._init_camera():
            logger.error("Failed to open camera after switch")
            self.request_stop()
            return
        self._init_detector()

    def _init_camera(self) -> bool:
        """Initialize video capture for the current facing mode."""
        facing = "user" if self.user_facing else "environment"
        logger.info(f"Opening {facing} camera index: {self.camera_index}")
        self.cap = cv2.VideoCapture(self.camera_index)

        if not self.cap.isOpened():
            logger.error("Error accessing camera device")
            self.cap.release()
            self.cap = None
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        logger.info(f"Camera opened: {width}x{height} @ {fps:.1f} fps")

        return True

    def _release_camera(self) -> None:
        if self.cap:
            self.cap.release()
            self.cap = None

    def _init_detector(self) -> None:
        """Create the hand detector, closing any previous instance."""
        self._close_detector()
        self.hands = mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=self.max_hands,
            model_complexity=1,
            min_detection_confidence=0.5,
            min_tracking_confidence=0.5,
        )

    def _close_detector(self) -> None:
        if self.hands:
            self.hands.close()
            self.hands = None

    async def _on_send_failed(self) -> None:
        """Callback when the endpoint rejects or cannot be reached."""
        if self.show_preview:
            self.settings.open("send failed")

    def _draw_preview(self, frame: np.ndarray) -> None:
        """Draw hands, status and settings on the frame, in place."""
        results = self._last_results
        if results is not None and results.multi_hand_landmarks:
            for hand, gesture in zip(results.multi_hand_landmarks, self._last_gestures):
                landmark_style, connection_style = HAND_STYLES.get(gesture, HAND_STYLES[NONE])
                mp_draw.draw_landmarks(
                    frame, hand, mp_hands.HAND_CONNECTIONS,
                    landmark_style, connection_style,
                )

        # Mirror the view of the front camera; text is drawn afterwards
        if self.user_facing:
            frame[:] = cv2.flip(frame, 1)

        h, w = frame.shape[:2]

        if self.vote > 0:
            label, color = f"Right ({self.vote:+d})", (0, 255, 0)
        elif self.vote < 0:
            label, color = f"Left ({self.vote:+d})", (0, 0, 255)
        else:
            label, color = "No gesture", (255, 191, 0)
        cv2.putText(frame, label, (20, 40), self.font, 0.9, color, 2)

        code = self.settings.pairing_code or "-"
        cv2.putText(frame, f"Code: {code}", (20, 70), self.font, 0.5, (255, 255, 255), 1)

        stats = self.notifier.get_stats()
        server_ok = stats["last_error"] is None
        cv2.putText(
            frame,
            f"Sent: {stats['messages_sent']}  Failed: {stats['messages_failed']}",
            (20, 95),
            self.font, 0.5, (0, 255, 0) if server_ok else (0, 0, 255), 1
        )

        if self.settings.visible:
            self._draw_settings(frame, h, w)
        else:
            cv2.putText(
                frame,
                "[s] settings  [c] switch camera  [q] quit",
                (20, h - 20),
                self.font, 0.45, (200, 200, 200), 1
            )

    def _draw_settings(self, frame: np.ndarray, h: int, w: int) -> None:
        """Draw the settings panel over the frame."""
        overlay = frame.copy()
        cv2.rectangle(overlay, (10, h // 2 - 70), (w - 10, h // 2 + 70), (40, 40, 40), -1)
        cv2.addWeighted(overlay, 0.75, frame, 0.25, 0, dst=frame)

        y = h // 2 - 40
        cv2.putText(frame, "Settings", (25, y), self.font, 0.7, (255, 255, 255), 2)
        cv2.putText(
            frame, f"Pairing code: {self.settings.draft}_",
            (25, y + 30), self.font, 0.6, (0, 255, 255), 1
        )
        cv2.putText(
            frame, f"Flipped: {'yes' if self.settings.flipped else 'no'}  [Tab]",
            (25, y + 55), self.font, 0.5, (255, 255, 255), 1
        )
        cv2.putText(
            frame, "[Enter] save  [Esc] close",
            (25, y + 80), self.font, 0.5, (200, 200, 200), 1
        )


async def main_async(args: argparse.Namespace) -> None:
    """Async main entry point."""
    client = GesturePresenterClient(
        endpoint_url=args.endpoint,
        pairing_code=args.code,
        flipped=args.flipped,
        user_camera=args.camera,
        environment_camera=args.rear_camera,
        user_facing=not args.rear,
        rate=args.rate,
        width=args.width,
        height=args.height,
        max_hands=args.max_hands,
        show_preview=not args.no_preview,
        timeout=args.timeout,
    )

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Shutdown signal received")
        client.request_stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            pass

    try:
        await client.start()
        await client.run()
    except Exception as e:
        logger.error(f"Client error: {e}")
    finally:
        await client.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gesture Presenter Client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--endpoint",
        type=str,
        default=os.environ.get("GESTURE_PRESENTER_URL", DEFAULT_ENDPOINT),
        help="Endpoint receiving gesture POSTs",
    )
    parser.add_argument(
        "--code",
        type=str,
        default=os.environ.get("GESTURE_PAIRING_CODE", ""),
        help="Pairing code of the presentation session",
    )
    parser.add_argument(
        "--flipped",
        action="store_true",
        help="Invert left/right orientation",
    )
    parser.add_argument(
        "--camera",
        type=int,
        default=0,
        help="Front (user-facing) camera index",
    )
    parser.add_argument(
        "--rear-camera",
        type=int,
        default=1,
        help="Rear (environment-facing) camera index",
    )
    parser.add_argument(
        "--rear",
        action="store_true",
        help="Start on the rear camera",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=30.0,
        help="Frame loop rate (Hz)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=500,
        help="Requested capture width",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=500,
        help="Requested capture height",
    )
    parser.add_argument(
        "--max-hands",
        type=int,
        default=6,
        help="Maximum number of hands to detect",
    )
    parser.add_argument(
        "--no-preview",
        action="store_true",
        help="Run without the preview window",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="HTTP request timeout (s)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
