"""
Gesture Debouncer - Turns a noisy per-frame vote into paced notifications.

A new nonzero vote must hold for a short settle window before it is
reported. While it keeps holding, it is reported again on a fixed
interval. Timers are kept as monotonic deadlines and polled once per frame
from the client loop.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GestureDebouncer:
    """
    Deadline-based debouncer for the gesture vote.

    Timeline for a vote change at time T (defaults):
        T + 0.15   first notification
        T + 0.90   repeat (0.25 s settle + 0.5 s interval)
        T + 1.40   repeat, and every 0.5 s after that
    """

    def __init__(
        self,
        stable_delay: float = 0.15,
        repeat_delay: float = 0.25,
        repeat_interval: float = 0.5,
    ):
        """
        Initialize debouncer.

        Args:
            stable_delay: Seconds a new vote must hold before the first fire
            repeat_delay: Seconds between the first fire and the repeat timer start
            repeat_interval: Seconds between repeated fires
        """
        self.stable_delay = stable_delay
        self.repeat_delay = repeat_delay
        self.repeat_interval = repeat_interval

        self.vote = 0
        self._first_at: Optional[float] = None
        self._next_repeat_at: Optional[float] = None

    @property
    def pending(self) -> bool:
        """Whether any deadline is armed."""
        return self._first_at is not None or self._next_repeat_at is not None

    def reset(self) -> None:
        """Cancel all deadlines and forget the current vote."""
        self.vote = 0
        self._first_at = None
        self._next_repeat_at = None

    def update(self, vote: int, now: float) -> int:
        """
        Feed the current frame's vote.

        Args:
            vote: Signed vote for this frame
            now: Monotonic time in seconds

        Returns:
            The vote to notify, or 0 if nothing fires this frame
        """
        if vote != self.vote:
            logger.debug(f"Vote changed {self.vote} -> {vote}")
            self.vote = vote
            self._first_at = None
            self._next_repeat_at = None
            if vote != 0:
                self._first_at = now + self.stable_delay

        if self.vote == 0:
            return 0

        if self._first_at is not None:
            if now < self._first_at:
                return 0
            # Repeat timer is armed from the actual fire time
            self._next_repeat_at = now + self.repeat_delay + self.repeat_interval
            self._first_at = None
            return self.vote

        if self._next_repeat_at is not None and now >= self._next_repeat_at:
            # Interval timers fire once per tick, they never catch up
            while self._next_repeat_at <= now:
                self._next_repeat_at += self.repeat_interval
            return self.vote

        return 0
