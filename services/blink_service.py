import logging

from services.landmarks import LEFT_EYE, RIGHT_EYE, MalformedLandmarks, dist_2d, require_points

logger = logging.getLogger(__name__)


def _single_eye_ratio(landmarks, eye):
    p1, p2, p3, p4, p5, p6 = (landmarks[i] for i in eye)

    horiz = dist_2d(p1, p4)
    if horiz <= 1e-6:
        # collapsed eye corners, the model gave us garbage
        raise MalformedLandmarks(
            max(eye) + 1,
            len(landmarks),
            f"eye corners {eye[0]} and {eye[3]} coincide, cannot measure eye width",
        )

    return (dist_2d(p2, p6) + dist_2d(p3, p5)) / (2.0 * horiz)


def eye_aspect_ratio(landmarks) -> float:
    """
    Eye Aspect Ratio averaged over both eyes.

    Uses the MediaPipe Face Mesh eye indices (see services.landmarks).
    Raises MalformedLandmarks if the set is too short to contain them.
    """
    require_points(landmarks, LEFT_EYE + RIGHT_EYE)

    left = _single_eye_ratio(landmarks, LEFT_EYE)
    right = _single_eye_ratio(landmarks, RIGHT_EYE)
    return (left + right) / 2.0


class BlinkCounter:
    """
    Debounced blink counter.

    A frame with EAR below the threshold counts as a blink only if the last
    counted blink is older than the debounce interval, so one long closure
    spread over several frames is a single blink. Every `confirm_blinks`
    blinks produce one confirmed vote and the count starts over.
    """

    def __init__(self, closed_threshold=0.25, debounce_seconds=0.3, confirm_blinks=3, start_time=0.0):
        self.CLOSED_THRESHOLD = closed_threshold
        self.DEBOUNCE_SECONDS = debounce_seconds
        self.CONFIRM_BLINKS = confirm_blinks

        self.blink_count = 0
        self.last_blink_time = start_time

    def reset(self, start_time=0.0):
        self.blink_count = 0
        self.last_blink_time = start_time

    def update(self, ear: float, now: float) -> bool:
        if ear < self.CLOSED_THRESHOLD and now - self.last_blink_time > self.DEBOUNCE_SECONDS:
            self.blink_count += 1
            self.last_blink_time = now
            logger.debug("blink %d (ear=%.3f)", self.blink_count, ear)

        if self.blink_count >= self.CONFIRM_BLINKS:
            self.blink_count = 0
            return True

        return False
