import logging
import threading

logger = logging.getLogger(__name__)


class FrameScheduler:
    """
    Single-slot frame scheduler, one per session.

    At most one frame is processed at a time. A frame that arrives while
    another is in flight goes into the single pending slot, replacing
    whatever was waiting there (latest wins, the replaced frame is dropped).
    When the in-flight frame is done, the thread that ran it picks up the
    pending frame, so frames are always applied in arrival order and never
    concurrently.
    """

    def __init__(self, handler):
        self.handler = handler
        self.dropped = 0
        self.processed = 0

        self._lock = threading.Lock()
        self._busy = False
        self._pending = None
        self._has_pending = False

    def submit(self, item):
        """
        Run handler(item), or park it if a frame is in flight.
        Returns True if this call did the processing.
        """
        with self._lock:
            if self._busy:
                if self._has_pending:
                    self.dropped += 1
                    logger.debug("frame dropped, %d so far", self.dropped)
                self._pending = item
                self._has_pending = True
                return False
            self._busy = True

        current = item
        while True:
            try:
                self.handler(current)
            except Exception:
                with self._lock:
                    self._busy = False
                    self._pending = None
                    self._has_pending = False
                raise
            self.processed += 1

            # release the slot under the same lock that checks for pending,
            # otherwise a frame parked in between would never run
            with self._lock:
                if not self._has_pending:
                    self._busy = False
                    return True
                current = self._pending
                self._pending = None
                self._has_pending = False
