from types import SimpleNamespace

import numpy as np
import pytest

from services.landmarks import to_pixel_points
from services.liveness_service import LivenessService
from services.session_service import LivenessSession


def landmark(x, y, z=0.0):
    return SimpleNamespace(x=x, y=y, z=z)


class FakeModel:
    def __init__(self, attr, points):
        self.attr = attr
        self.points = points
        self.frames = []
        self.closed = False

    def process(self, rgb):
        self.frames.append(rgb)
        found = [SimpleNamespace(landmark=self.points)] if self.points else None
        return SimpleNamespace(**{self.attr: found})

    def close(self):
        self.closed = True


def test_to_pixel_points():
    points = to_pixel_points([landmark(0.5, 0.25, -0.1)], 640, 480)
    assert points == [pytest.approx((320.0, 120.0, -64.0))]


def test_extract_face_and_hand():
    service = LivenessService(mirror=False)
    service._face_mesh = FakeModel("multi_face_landmarks", [landmark(0.5, 0.5)] * 468)
    service._hands = FakeModel("multi_hand_landmarks", [landmark(0.1, 0.2)] * 21)

    face, hand = service.extract(np.zeros((480, 640, 3), dtype=np.uint8))
    assert len(face) == 468
    assert face[0] == pytest.approx((320.0, 240.0, 0.0))
    assert len(hand) == 21
    assert hand[0] == pytest.approx((64.0, 96.0, 0.0))


def test_extract_nothing_found():
    service = LivenessService()
    service._face_mesh = FakeModel("multi_face_landmarks", [])
    service._hands = FakeModel("multi_hand_landmarks", [])

    assert service.extract(np.zeros((48, 64, 3), dtype=np.uint8)) == (None, None)


def test_extract_mirrors_frame():
    service = LivenessService(mirror=True)
    service._face_mesh = FakeModel("multi_face_landmarks", [])
    service._hands = FakeModel("multi_hand_landmarks", [])

    frame = np.zeros((2, 2, 3), dtype=np.uint8)
    frame[0, 0] = (255, 0, 0)
    service.extract(frame)

    rgb = service._face_mesh.frames[0]
    # blue pixel moved to the right edge and converted to RGB
    assert tuple(rgb[0, 1]) == (0, 0, 255)


def test_create_session_and_close():
    service = LivenessService(timeout_seconds=3.0)
    session = service.create_session()
    assert isinstance(session, LivenessSession)
    assert session.timeout.SECONDS == 3.0

    face_mesh = FakeModel("multi_face_landmarks", [])
    service._face_mesh = face_mesh
    service.close()
    assert face_mesh.closed
    assert service._face_mesh is None
