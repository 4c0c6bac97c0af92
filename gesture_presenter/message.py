"""
Message Schema and Validation for gesture notifications.

Defines the JSON body posted to the presenter endpoint and validates every
outgoing message before it is queued.
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from .gestures import LEFT, RIGHT

logger = logging.getLogger(__name__)

VALID_GESTURES = (RIGHT, LEFT)


def vote_to_gesture(vote: int) -> Optional[str]:
    """Map the sign of a vote to a gesture; zero maps to None."""
    if vote > 0:
        return RIGHT
    if vote < 0:
        return LEFT
    return None


@dataclass
class GestureMessage:
    """
    Gesture notification sent to the presenter endpoint.

    Attributes:
        code: Pairing code of the presentation session
        gesture: "Right" or "Left"
    """
    code: str
    gesture: str

    def to_payload(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_payload())

    @classmethod
    def from_json(cls, data: str) -> 'GestureMessage':
        """Deserialize from JSON string."""
        d = json.loads(data)
        return cls(code=str(d['code']), gesture=str(d['gesture']))


class MessageValidator:
    """
    Validates outgoing gesture messages before they are queued.

    Ensures:
    - the pairing code is a non-empty string
    - the gesture is Right or Left
    """

    def __init__(self):
        self._dropped_count: int = 0
        self._validated_count: int = 0

    def validate(self, msg: GestureMessage) -> Tuple[bool, str]:
        """
        Validate a gesture message.

        Args:
            msg: The message to validate

        Returns:
            Tuple of (is_valid, reason_string)
        """
        if not isinstance(msg.code, str) or not msg.code.strip():
            self._dropped_count += 1
            logger.warning("Invalid message: empty pairing code")
            return False, "code_empty"

        if msg.gesture not in VALID_GESTURES:
            self._dropped_count += 1
            logger.warning(f"Invalid message: gesture={msg.gesture!r} is not Right/Left")
            return False, "gesture_not_valid"

        self._validated_count += 1
        return True, "ok"

    def get_stats(self) -> dict:
        """Get validation statistics."""
        total = self._validated_count + self._dropped_count
        return {
            "total_messages": total,
            "validated": self._validated_count,
            "dropped": self._dropped_count,
            "drop_rate": self._dropped_count / total if total > 0 else 0.0,
        }


def create_gesture_message(code: str, vote: int) -> Optional[GestureMessage]:
    """
    Create a gesture message from a debounced vote.

    Returns None for a zero vote.
    """
    gesture = vote_to_gesture(vote)
    if gesture is None:
        return None
    return GestureMessage(code=code.strip(), gesture=gesture)
