import logging
import threading
import time
from collections import deque
from enum import Enum

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"


class LivenessVoter:
    """
    Fixed-size vote history. Blink and movement confirmations land in the
    same window; the window is confirmed when strictly more than half of its
    slots (not of the votes cast so far) hold a confirmed vote.
    """

    def __init__(self, history_size=5):
        self.HISTORY_SIZE = history_size
        self.history = deque(maxlen=history_size)

    def reset(self):
        self.history.clear()

    def add(self, vote=CONFIRMED):
        self.history.append(vote)

    def confirmed_votes(self) -> int:
        return sum(1 for v in self.history if v == CONFIRMED)

    def is_majority_confirmed(self) -> bool:
        return self.confirmed_votes() > self.HISTORY_SIZE / 2

    def verdict(self, hand_detected: bool) -> bool:
        # the hand has to be in the current frame, history alone is not enough
        return bool(hand_detected) and self.is_majority_confirmed()


class TimeoutState(Enum):
    ARMED = "ARMED"
    CONFIRMED = "CONFIRMED"
    TIMED_OUT = "TIMED_OUT"


class LivenessTimeout:
    """
    ARMED -> CONFIRMED when liveness is first seen, ARMED -> TIMED_OUT when
    the deadline passes first. Both end states are final until start() is
    called again.

    The deadline can be driven two ways: poll(now) from the frame loop, or a
    threading.Timer (start(schedule=True)) so a client that stops sending
    frames still gets its fallback. Whichever comes first wins, on_expire
    runs once.
    """

    def __init__(self, seconds=15.0, on_expire=None, clock=time.monotonic):
        self.SECONDS = seconds
        self.on_expire = on_expire
        self.clock = clock

        self.state = None
        self.deadline = None

        self._timer = None
        self._generation = 0
        self._lock = threading.Lock()

    def start(self, now=None, schedule=False):
        self.cancel()
        if now is None:
            now = self.clock()

        with self._lock:
            self._generation += 1
            self.state = TimeoutState.ARMED
            self.deadline = now + self.SECONDS

            if schedule:
                gen = self._generation
                self._timer = threading.Timer(self.SECONDS, self.expire, args=(gen,))
                self._timer.daemon = True
                self._timer.start()

    def reset(self):
        self.cancel()
        with self._lock:
            self._generation += 1
            self.state = None
            self.deadline = None

    def cancel(self):
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def confirm(self) -> bool:
        with self._lock:
            if self.state is not TimeoutState.ARMED:
                return False
            self.state = TimeoutState.CONFIRMED
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        logger.info("liveness confirmed, timeout cancelled")
        return True

    def expire(self, generation=None) -> bool:
        with self._lock:
            # a timer from a previous start() must not end the current run
            if generation is not None and generation != self._generation:
                return False
            if self.state is not TimeoutState.ARMED:
                return False
            self.state = TimeoutState.TIMED_OUT
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

        logger.info("liveness timed out after %.1fs", self.SECONDS)
        if self.on_expire is not None:
            self.on_expire()
        return True

    def poll(self, now=None) -> bool:
        if self.state is not TimeoutState.ARMED:
            return False
        if now is None:
            now = self.clock()
        if now >= self.deadline:
            return self.expire()
        return False

    def remaining(self, now=None):
        if self.state is not TimeoutState.ARMED:
            return None
        if now is None:
            now = self.clock()
        return max(0.0, self.deadline - now)
