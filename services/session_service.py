import logging
import time

from services.blink_service import BlinkCounter, eye_aspect_ratio
from services.gesture_service import Gesture, classify_gesture
from services.landmarks import MalformedLandmarks, require_points
from services.movement_service import MovementAnalyzer
from services.voting_service import CONFIRMED, LivenessTimeout, LivenessVoter, TimeoutState

logger = logging.getLogger(__name__)


class LivenessResult:
    """What the client gets back after every processed frame."""

    def __init__(
        self,
        liveness_confirmed,
        fallback_triggered,
        gesture=Gesture.NONE,
        blink_count=0,
        movement_count=0,
        confirmed_votes=0,
        state=None,
        remaining_seconds=None,
    ):
        self.liveness_confirmed = liveness_confirmed
        self.fallback_triggered = fallback_triggered
        self.gesture = gesture
        self.blink_count = blink_count
        self.movement_count = movement_count
        self.confirmed_votes = confirmed_votes
        self.state = state
        self.remaining_seconds = remaining_seconds

    def to_dict(self):
        return {
            "liveness_confirmed": self.liveness_confirmed,
            "fallback_triggered": self.fallback_triggered,
            "gesture": self.gesture.label,
            "progress": {
                "blink_count": self.blink_count,
                "movement_count": self.movement_count,
                "confirmed_votes": self.confirmed_votes,
            },
            "state": self.state.value if self.state else None,
            # None once the timeout is confirmed or expired
            "remaining_seconds": self.remaining_seconds,
        }


class LivenessSession:
    """
    All mutable state of one capture session.

    Frames must be fed one at a time in capture order (see
    services.scheduler_service); blink debouncing and movement deltas
    depend on it.
    """

    def __init__(
        self,
        timeout_seconds=15.0,
        on_timeout=None,
        clock=time.monotonic,
        history_size=5,
        blink_counter=None,
        movement_analyzer=None,
    ):
        self.clock = clock
        self.on_timeout = on_timeout

        self.blinks = blink_counter or BlinkCounter()
        self.movement = movement_analyzer or MovementAnalyzer()
        self.voter = LivenessVoter(history_size)
        self.timeout = LivenessTimeout(timeout_seconds, on_expire=self._expired, clock=clock)

        self.liveness_confirmed = False
        self.fallback_triggered = False
        self.gesture = Gesture.NONE
        self.frames_seen = 0

    # --------------------------------------------------

    @property
    def state(self):
        return self.timeout.state

    def reset(self, now=None):
        if now is None:
            now = self.clock()

        self.timeout.reset()
        self.blinks.reset(start_time=now)
        self.movement.reset()
        self.voter.reset()

        self.liveness_confirmed = False
        self.fallback_triggered = False
        self.gesture = Gesture.NONE
        self.frames_seen = 0

    def start(self, now=None, schedule=False):
        if now is None:
            now = self.clock()
        self.reset(now)
        self.timeout.start(now, schedule=schedule)
        logger.info("liveness session started (timeout %.1fs)", self.timeout.SECONDS)

    def close(self):
        self.timeout.cancel()

    def _expired(self):
        self.fallback_triggered = True
        self.liveness_confirmed = False
        if self.on_timeout is not None:
            self.on_timeout(self)

    # --------------------------------------------------

    def _process_face(self, face, now):
        # validate everything up front so a bad set leaves no partial update
        try:
            ear = eye_aspect_ratio(face)
            require_points(face, self.movement.POINTS)
        except MalformedLandmarks as e:
            logger.debug("skipping face landmarks: %s", e)
            return

        if self.blinks.update(ear, now):
            self.voter.add(CONFIRMED)

        if self.movement.update(face):
            self.voter.add(CONFIRMED)

    def _process_hand(self, hand):
        if hand is None:
            return False, Gesture.NONE
        try:
            return True, classify_gesture(hand)
        except MalformedLandmarks as e:
            logger.debug("skipping hand landmarks: %s", e)
            return False, Gesture.NONE

    def process_frame(self, face=None, hand=None, now=None) -> LivenessResult:
        if now is None:
            now = self.clock()
        self.frames_seen += 1

        self.timeout.poll(now)

        if face is not None:
            self._process_face(face, now)
        else:
            self.movement.lose_face()

        hand_detected, self.gesture = self._process_hand(hand)

        verdict = self.voter.verdict(hand_detected)
        # confirm() decides under the timeout's lock, a timer that expired
        # first wins and the verdict is dropped
        if verdict and not self.timeout.confirm() and self.timeout.state is TimeoutState.TIMED_OUT:
            verdict = False

        self.liveness_confirmed = verdict
        return self.result(now)

    def result(self, now=None) -> LivenessResult:
        return LivenessResult(
            liveness_confirmed=self.liveness_confirmed,
            fallback_triggered=self.fallback_triggered,
            gesture=self.gesture,
            blink_count=self.blinks.blink_count,
            movement_count=self.movement.movement_count,
            confirmed_votes=self.voter.confirmed_votes(),
            state=self.timeout.state,
            remaining_seconds=self.timeout.remaining(now),
        )
