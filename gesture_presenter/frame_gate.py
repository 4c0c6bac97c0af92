"""
Frame and Detector Gates - Keep broken frames and detector errors out of the vote.

A failed camera read or a malformed frame never reaches the detector, and
a detector exception pauses detection for a fixed delay before the next
attempt.
"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class FrameValidationResult:
    """Result of frame validation."""
    valid: bool
    reason: str
    frame: Optional[np.ndarray] = None


class FrameGate:
    """
    Frame quality gate for camera frames.

    Validates:
    - cap.read() success
    - Frame not empty/None
    - Frame has shape (H, W, 3)

    Resolution changes are accepted; switching cameras changes the frame size.
    """

    def __init__(self):
        self._last_valid_shape: Optional[tuple] = None
        self._total_invalid_count: int = 0
        self._total_valid_count: int = 0

    def validate(self, ok: bool, frame: Optional[np.ndarray]) -> FrameValidationResult:
        """
        Validate a frame from cap.read().

        Args:
            ok: The boolean return value from cap.read()
            frame: The frame array from cap.read()

        Returns:
            FrameValidationResult with valid flag, reason, and frame if valid.
        """
        if not ok:
            self._mark_invalid()
            return FrameValidationResult(False, "read_failed")

        if frame is None:
            self._mark_invalid()
            return FrameValidationResult(False, "frame_none")

        if frame.size == 0:
            self._mark_invalid()
            return FrameValidationResult(False, "empty_frame")

        if frame.ndim != 3:
            self._mark_invalid()
            return FrameValidationResult(False, "invalid_dims")

        if frame.shape[2] != 3:
            self._mark_invalid()
            return FrameValidationResult(False, "invalid_channels")

        if self._last_valid_shape is not None and frame.shape != self._last_valid_shape:
            logger.info(f"Frame size changed from {self._last_valid_shape} to {frame.shape}")

        self._mark_valid(frame.shape)
        return FrameValidationResult(True, "ok", frame)

    def _mark_invalid(self) -> None:
        self._total_invalid_count += 1

    def _mark_valid(self, shape: tuple) -> None:
        self._total_valid_count += 1
        self._last_valid_shape = shape

    def reset(self) -> None:
        """Forget the last frame size (e.g. after switching cameras)."""
        self._last_valid_shape = None

    def get_stats(self) -> dict:
        """Get validation statistics."""
        total = self._total_valid_count + self._total_invalid_count
        return {
            "total_frames": total,
            "valid_frames": self._total_valid_count,
            "invalid_frames": self._total_invalid_count,
            "valid_rate": self._total_valid_count / total if total > 0 else 0.0,
            "last_valid_shape": self._last_valid_shape,
        }


class DetectorGate:
    """
    Gate for hand detector errors.

    Wraps the detector call, catches exceptions and holds further
    detection for retry_delay seconds after a failure.
    """

    def __init__(self, retry_delay: float = 0.5):
        """
        Initialize DetectorGate.

        Args:
            retry_delay: Seconds to wait before the next attempt after a failure
        """
        self.retry_delay = retry_delay
        self._retry_at: Optional[float] = None
        self._total_failures = 0
        self._total_successes = 0

    def ready(self, now: float) -> bool:
        """Whether detection may run at monotonic time now."""
        return self._retry_at is None or now >= self._retry_at

    def process(self, hands, rgb_frame: np.ndarray, now: float):
        """
        Run the detector on an RGB frame, catching exceptions.

        Args:
            hands: MediaPipe Hands instance
            rgb_frame: RGB frame to process
            now: Monotonic time in seconds

        Returns:
            Tuple of (success: bool, result or None)
        """
        if not self.ready(now):
            return False, None

        try:
            result = hands.process(rgb_frame)
        except Exception as e:
            self._total_failures += 1
            self._retry_at = now + self.retry_delay
            logger.error(f"Error running hand detector: {e}")
            return False, None

        self._retry_at = None
        self._total_successes += 1
        return True, result

    def reset(self) -> None:
        """Clear a pending retry delay."""
        self._retry_at = None

    def get_stats(self) -> dict:
        """Get processing statistics."""
        total = self._total_successes + self._total_failures
        return {
            "total_processed": total,
            "successes": self._total_successes,
            "failures": self._total_failures,
            "success_rate": self._total_successes / total if total > 0 else 0.0,
            "waiting_retry": self._retry_at is not None,
        }
