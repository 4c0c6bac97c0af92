"""
Point Gesture Logic - Classifies MediaPipe hand landmarks as a pointing gesture.

Each detected hand is scaled to pixel space and checked for a "point"
pose (index finger out, other fingers folded). The horizontal direction of
the index finger gives a Left/Right gesture, which is then turned into a
signed vote summed over all hands in the frame.
"""

from typing import List, Sequence, Tuple
import numpy as np

# ============================================================================
# MediaPipe Landmark Indices
# ============================================================================

WRIST = 0
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

NUM_LANDMARKS = 21

# Gesture labels
RIGHT = "Right"
LEFT = "Left"
NONE = "None"

# Fingertip-to-palm distance, normalized by hand size
EXTENDED_RATIO = 0.9
FOLDED_RATIO = 0.75


# ============================================================================
# Vector/Geometry Helpers
# ============================================================================

def to_pixels(landmarks, width: int, height: int) -> np.ndarray:
    """Scale normalized landmarks to pixel space (z is left untouched)."""
    return np.array(
        [[p.x * width, p.y * height, p.z] for p in landmarks],
        dtype=np.float32,
    )


def _dist(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(a[:2] - b[:2]))


def _hand_size_ref(pts: np.ndarray) -> float:
    """Get reference hand size for normalization."""
    w = pts[WRIST]
    return max(
        (_dist(pts[INDEX_MCP], w) + _dist(pts[MIDDLE_MCP], w) + _dist(pts[PINKY_MCP], w)) / 3.0,
        1e-3,
    )


def _palm_center(pts: np.ndarray) -> np.ndarray:
    """Get center of palm."""
    return np.mean(pts[[WRIST, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP]], axis=0)


def finger_extension(pts: np.ndarray, tip_idx: int) -> float:
    """Distance from fingertip to palm center, in hand-size units."""
    return _dist(pts[tip_idx], _palm_center(pts)) / _hand_size_ref(pts)


def is_pointing(pts: np.ndarray) -> bool:
    """Index finger extended while middle, ring and pinky are folded."""
    if finger_extension(pts, INDEX_TIP) < EXTENDED_RATIO:
        return False
    return all(
        finger_extension(pts, tip) < FOLDED_RATIO
        for tip in (MIDDLE_TIP, RING_TIP, PINKY_TIP)
    )


# ============================================================================
# Gesture Classification
# ============================================================================

def classify_point(landmarks: Sequence, width: int, height: int) -> str:
    """
    Classify one hand as pointing Left, Right or neither.

    Args:
        landmarks: 21 normalized landmarks (objects with x, y, z)
        width: Frame width in pixels
        height: Frame height in pixels

    Returns:
        RIGHT, LEFT or NONE, in raw (un-mirrored) image coordinates
    """
    if len(landmarks) < NUM_LANDMARKS:
        return NONE

    pts = to_pixels(landmarks, width, height)
    if not is_pointing(pts):
        return NONE

    v = pts[INDEX_TIP] - pts[INDEX_MCP]
    dx, dy = float(v[0]), float(v[1])
    if dx == 0.0 or abs(dx) < abs(dy):
        return NONE
    return RIGHT if dx > 0 else LEFT


def should_mirror(flipped: bool, user_facing: bool) -> bool:
    """Swap Left/Right when exactly one of flipped / user-facing is set."""
    return (flipped or user_facing) and flipped != user_facing


def mirror_gesture(gesture: str) -> str:
    if gesture == LEFT:
        return RIGHT
    if gesture == RIGHT:
        return LEFT
    return gesture


def gesture_vote(gesture: str) -> int:
    return 1 if gesture == RIGHT else -1 if gesture == LEFT else 0


def frame_vote(
    hands: Sequence,
    width: int,
    height: int,
    flipped: bool = False,
    user_facing: bool = True,
) -> Tuple[int, List[str]]:
    """
    Classify every hand in a frame and sum their votes.

    Args:
        hands: Landmark sequences, one per detected hand
        width: Frame width in pixels
        height: Frame height in pixels
        flipped: User setting that inverts the camera orientation
        user_facing: Whether the front (user) camera is active

    Returns:
        Tuple of (vote, per-hand gestures)
    """
    mirror = should_mirror(flipped, user_facing)
    vote = 0
    gestures = []
    for landmarks in hands:
        gesture = classify_point(landmarks, width, height)
        if mirror:
            gesture = mirror_gesture(gesture)
        vote += gesture_vote(gesture)
        gestures.append(gesture)
    return vote, gestures


def extract_landmark_lists(results) -> List[Sequence]:
    """Pull plain landmark sequences out of MediaPipe hands results."""
    if not results or not results.multi_hand_landmarks:
        return []
    return [hand.landmark for hand in results.multi_hand_landmarks]
