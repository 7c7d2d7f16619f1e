import logging

from services.landmarks import MOVEMENT_POINTS, require_points

logger = logging.getLogger(__name__)


class MovementAnalyzer:
    """
    Head movement evidence from consecutive face landmark sets.

    A frame pair qualifies when at least `min_horizontal_hits` of the tracked
    points moved more than the horizontal threshold AND at least one of them
    moved more than the vertical threshold. Pure sideways shifts (camera
    jitter, a photo slid across the lens) do not qualify.

    `movement_count` accumulates over the session and is only cleared when
    the face is lost. Once it reaches `confirm_movements`, every further
    qualifying pair is a confirmed vote.
    """

    def __init__(
        self,
        horizontal_threshold=10.0,
        vertical_threshold=5.0,
        min_horizontal_hits=2,
        confirm_movements=3,
        points=MOVEMENT_POINTS,
    ):
        self.HORIZONTAL_THRESHOLD = horizontal_threshold
        self.VERTICAL_THRESHOLD = vertical_threshold
        self.MIN_HORIZONTAL_HITS = min_horizontal_hits
        self.CONFIRM_MOVEMENTS = confirm_movements
        self.POINTS = tuple(points)

        self.movement_count = 0
        self.previous_landmarks = None

    def reset(self):
        self.movement_count = 0
        self.previous_landmarks = None

    def lose_face(self):
        # movement evidence can't span a gap without a face
        self.previous_landmarks = None
        self.movement_count = 0

    def measure(self, current, previous):
        """Return (horizontal_hits, vertical_significant) for a frame pair."""
        require_points(current, self.POINTS)
        require_points(previous, self.POINTS)

        horizontal_hits = 0
        vertical_significant = False
        for i in self.POINTS:
            if abs(current[i][0] - previous[i][0]) > self.HORIZONTAL_THRESHOLD:
                horizontal_hits += 1
            if abs(current[i][1] - previous[i][1]) > self.VERTICAL_THRESHOLD:
                vertical_significant = True

        return horizontal_hits, vertical_significant

    def update(self, landmarks) -> bool:
        require_points(landmarks, self.POINTS)

        previous = self.previous_landmarks
        self.previous_landmarks = landmarks

        if previous is None:
            return False

        hits, vertical = self.measure(landmarks, previous)
        if hits < self.MIN_HORIZONTAL_HITS or not vertical:
            return False

        self.movement_count += 1
        logger.debug("movement %d (hits=%d)", self.movement_count, hits)
        return self.movement_count >= self.CONFIRM_MOVEMENTS
