from enum import Enum

from services.landmarks import INDEX_PIP, INDEX_TIP, MIDDLE_PIP, MIDDLE_TIP, require_points


class Gesture(Enum):
    OPEN_PALM = "Open Palm"
    CLOSED_FIST = "Closed Fist"
    UNKNOWN = "Unknown Gesture"
    NONE = ""

    @property
    def label(self):
        return self.value


def classify_gesture(hand_landmarks) -> Gesture:
    """
    Coarse two-finger heuristic, not a general gesture recognizer.

    Looks only at the index and middle fingers: tip above its middle joint
    (smaller y, image y grows downwards) means extended. Both extended is an
    open palm, both curled a fist, anything else is unknown.
    """
    if hand_landmarks is None:
        return Gesture.NONE

    lm = require_points(hand_landmarks, (INDEX_PIP, INDEX_TIP, MIDDLE_PIP, MIDDLE_TIP))

    if lm[INDEX_TIP][1] < lm[INDEX_PIP][1] and lm[MIDDLE_TIP][1] < lm[MIDDLE_PIP][1]:
        return Gesture.OPEN_PALM
    if lm[INDEX_TIP][1] > lm[INDEX_PIP][1] and lm[MIDDLE_TIP][1] > lm[MIDDLE_PIP][1]:
        return Gesture.CLOSED_FIST
    return Gesture.UNKNOWN
