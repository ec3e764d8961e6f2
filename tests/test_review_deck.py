from face_geometry import LEFT_EAR, RIGHT_EAR
from gesture_engine import GestureEngine
from gesture_state import Direction
from review_deck import USER_TILT, ReviewDeck

from conftest import CLOSED, OPEN, make_frame


def test_toggle_marks_current_photo():
    deck = ReviewDeck(["a", "b", "c"])
    assert deck.toggle_mark()
    assert deck.marked_names == ["a"]
    deck.toggle_mark()
    assert deck.marked_names == []


def test_navigation_and_finish():
    deck = ReviewDeck(["a", "b"])
    deck.prev()
    assert deck.index == 0
    deck.next()
    assert deck.index == 1
    deck.toggle_mark()
    deck.next()
    assert deck.finished
    assert deck.kept_names == ["a"]
    assert deck.marked_names == ["b"]
    assert deck.toggle_mark() is False


def test_reset():
    deck = ReviewDeck(["a", "b"])
    deck.toggle_mark()
    deck.next()
    deck.next()
    deck.reset()
    assert not deck.finished
    assert deck.index == 0
    assert deck.marked_names == []


def drive_tilt(engine, roll):
    for i in range(4):
        t = i * 100
        engine.submit(make_frame(roll=roll, t=t), t)


def test_user_right_tilt_advances():
    # Ear on the image left (234) lower than the one on the image right (454).
    frame = make_frame(roll=-20)
    assert frame.point(LEFT_EAR)[1] > frame.point(RIGHT_EAR)[1]

    deck = ReviewDeck(["a", "b", "c"])
    deck.index = 1
    engine = deck.attach(GestureEngine())
    engine.start(calibrate=False)
    drive_tilt(engine, -20)
    assert engine.tilt.last_direction is Direction.LEFT
    assert deck.index == 2


def test_user_left_tilt_goes_back():
    deck = ReviewDeck(["a", "b", "c"])
    deck.index = 1
    engine = deck.attach(GestureEngine())
    engine.start(calibrate=False)
    drive_tilt(engine, 20)
    assert deck.index == 0


def test_attach_blink_marks_by_default():
    deck = ReviewDeck(["a", "b"])
    engine = deck.attach(GestureEngine())
    engine.start(calibrate=False)
    for v, t in ((OPEN, 0), (CLOSED, 200), (CLOSED, 400)):
        engine.submit(make_frame(v, t=t), t)
    assert deck.marked_names == ["a"]


def test_user_tilt_labels_are_mirrored():
    assert USER_TILT[Direction.LEFT] == "right"
    assert USER_TILT[Direction.RIGHT] == "left"
