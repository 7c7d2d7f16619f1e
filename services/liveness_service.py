import logging

import cv2
import mediapipe as mp

from services.landmarks import to_pixel_points
from services.session_service import LivenessSession

logger = logging.getLogger(__name__)


class LivenessService:
    """
    Loads MediaPipe Face Mesh and Hands once and turns BGR frames into
    pixel-space landmark lists. Models are created on first use so the
    server can boot (and be tested) without them.
    """

    def __init__(self, mirror=True, timeout_seconds=15.0):
        self.mirror = mirror
        self.timeout_seconds = timeout_seconds

        self._face_mesh = None
        self._hands = None

    # --------------------------------------------------

    @property
    def face_mesh(self):
        if self._face_mesh is None:
            # refine_landmarks=False keeps the 468-point topology the eye indices use
            self._face_mesh = mp.solutions.face_mesh.FaceMesh(
                static_image_mode=False,
                max_num_faces=1,
                refine_landmarks=False,
                min_detection_confidence=0.5,
                min_tracking_confidence=0.5,
            )
            logger.info("face mesh loaded")
        return self._face_mesh

    @property
    def hands(self):
        if self._hands is None:
            self._hands = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=1,
                min_detection_confidence=0.5,
                min_tracking_confidence=0.5,
            )
            logger.info("hand model loaded")
        return self._hands

    # --------------------------------------------------

    def extract(self, frame):
        """Return (face_points or None, hand_points or None) for a BGR frame."""
        if self.mirror:
            frame = cv2.flip(frame, 1)

        h, w = frame.shape[:2]
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        face = None
        res = self.face_mesh.process(rgb)
        if res.multi_face_landmarks:
            face = to_pixel_points(res.multi_face_landmarks[0].landmark, w, h)

        hand = None
        res = self.hands.process(rgb)
        if res.multi_hand_landmarks:
            hand = to_pixel_points(res.multi_hand_landmarks[0].landmark, w, h)

        return face, hand

    def create_session(self, on_timeout=None):
        return LivenessSession(timeout_seconds=self.timeout_seconds, on_timeout=on_timeout)

    def close(self):
        if self._face_mesh is not None:
            self._face_mesh.close()
            self._face_mesh = None
        if self._hands is not None:
            self._hands.close()
            self._hands = None
