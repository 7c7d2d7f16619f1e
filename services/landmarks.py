import numpy as np


# MediaPipe Face Mesh topology (468 points).
# Each eye is ordered p1..p6: outer corner, two upper lid points,
# inner corner, two lower lid points.
LEFT_EYE = (362, 385, 387, 263, 373, 380)
RIGHT_EYE = (33, 160, 158, 133, 153, 144)

# forehead, chin, left eye outer corner
MOVEMENT_POINTS = (10, 152, 226)

FACE_POINTS = 468

# MediaPipe Hands topology (21 points)
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_PIP = 10
MIDDLE_TIP = 12

HAND_POINTS = 21


class MalformedLandmarks(ValueError):
    """Landmark set does not cover the indices an operation reads."""

    def __init__(self, needed, got, message=None):
        super().__init__(message or f"landmark set has {got} points, need at least {needed}")
        self.needed = needed
        self.got = got


def require_points(landmarks, indices):
    needed = max(indices) + 1
    if landmarks is None or len(landmarks) < needed:
        raise MalformedLandmarks(needed, 0 if landmarks is None else len(landmarks))
    return landmarks


def dist_2d(a, b) -> float:
    # z is ignored, distances are taken on the image plane
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def to_pixel_points(normalized, width: int, height: int):
    """
    MediaPipe returns x/y normalized to [0, 1] and z on roughly the same
    scale as x. Convert to (x, y, z) tuples in frame pixels.
    """
    return [(lm.x * width, lm.y * height, lm.z * width) for lm in normalized]
