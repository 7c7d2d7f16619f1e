import pytest

from services.landmarks import FACE_POINTS, HAND_POINTS, LEFT_EYE, MOVEMENT_POINTS, RIGHT_EYE


def make_eye(points, eye, x0, y0, width=30.0, opening=10.0):
    """Lay out a six-point eye: corners on y0, lids `opening` apart."""
    p1, p2, p3, p4, p5, p6 = eye
    half = opening / 2.0
    points[p1] = (x0, y0, 0.0)
    points[p2] = (x0 + width / 3, y0 - half, 0.0)
    points[p3] = (x0 + 2 * width / 3, y0 - half, 0.0)
    points[p4] = (x0 + width, y0, 0.0)
    points[p5] = (x0 + 2 * width / 3, y0 + half, 0.0)
    points[p6] = (x0 + width / 3, y0 + half, 0.0)


def make_face(opening=10.0, dx=0.0, dy=0.0):
    """
    468-point face with both eyes `opening` px open (EAR = opening / 30)
    and the movement points shifted by (dx, dy).
    """
    points = [(300.0, 300.0, 0.0)] * FACE_POINTS
    make_eye(points, LEFT_EYE, 340.0, 200.0, opening=opening)
    make_eye(points, RIGHT_EYE, 230.0, 200.0, opening=opening)
    for i, (x, y) in zip(MOVEMENT_POINTS, ((320.0, 120.0), (320.0, 420.0), (220.0, 200.0))):
        points[i] = (x + dx, y + dy, 0.0)
    return points


def make_hand(index_up=True, middle_up=True):
    points = [(100.0, 100.0, 0.0)] * HAND_POINTS
    points[6] = (100.0, 100.0, 0.0)
    points[10] = (110.0, 100.0, 0.0)
    points[8] = (100.0, 80.0 if index_up else 120.0, 0.0)
    points[12] = (110.0, 80.0 if middle_up else 120.0, 0.0)
    return points


@pytest.fixture
def open_face():
    return make_face(opening=12.0)


@pytest.fixture
def closed_face():
    return make_face(opening=3.0)


@pytest.fixture
def open_palm():
    return make_hand(True, True)
