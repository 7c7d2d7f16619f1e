import pytest

from conftest import make_hand
from services.gesture_service import Gesture, classify_gesture
from services.landmarks import MalformedLandmarks


@pytest.mark.parametrize("index_up, middle_up, expected", [
    (True, True, Gesture.OPEN_PALM),
    (False, False, Gesture.CLOSED_FIST),
    (True, False, Gesture.UNKNOWN),
    (False, True, Gesture.UNKNOWN),
])
def test_classify(index_up, middle_up, expected):
    assert classify_gesture(make_hand(index_up, middle_up)) is expected


def test_no_hand():
    assert classify_gesture(None) is Gesture.NONE
    assert Gesture.NONE.label == ""


def test_short_hand():
    with pytest.raises(MalformedLandmarks):
        classify_gesture(make_hand()[:10])


def test_labels():
    assert Gesture.OPEN_PALM.label == "Open Palm"
    assert Gesture.CLOSED_FIST.label == "Closed Fist"
