from calibration import CalibrationController
from gesture_state import BlinkClassifier

from conftest import CLOSED, OPEN


def blink_once(clf, t):
    # open, closed, closed (fires), open: 800 ms per blink
    clf.update(OPEN, t)
    clf.update(CLOSED, t + 200)
    event = clf.update(CLOSED, t + 400)
    clf.update(OPEN, t + 600)
    return event


def test_three_blinks_complete_calibration_and_reset_count():
    clf = BlinkClassifier()
    cal = CalibrationController(clf, target_blinks=3)
    cal.begin()

    done = []
    for i in range(3):
        assert blink_once(clf, i * 800) is not None
        done.append(cal.record_blink())

    assert done == [False, False, True]
    assert not cal.active
    assert cal.blinks == 0
    assert clf.blink_count == 0


def test_remaining_counts_down():
    cal = CalibrationController(BlinkClassifier(), target_blinks=3)
    assert cal.remaining == 0
    cal.begin()
    assert cal.remaining == 3
    cal.record_blink()
    assert cal.remaining == 2


def test_skip_has_same_reset_effect():
    clf = BlinkClassifier()
    cal = CalibrationController(clf)
    cal.begin()
    blink_once(clf, 0)
    cal.record_blink()
    assert clf.blink_count == 1

    cal.skip()
    assert not cal.active
    assert cal.blinks == 0
    assert clf.blink_count == 0


def test_blinks_ignored_when_inactive():
    clf = BlinkClassifier()
    cal = CalibrationController(clf)
    assert cal.record_blink() is False
    assert cal.blinks == 0
