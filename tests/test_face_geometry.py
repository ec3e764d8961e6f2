import math

import numpy as np
import pytest

from face_geometry import (
    LandmarkFrame,
    eye_openness,
    frame_openness,
    frame_roll,
    head_roll_angle,
)


def test_eye_openness_ratio():
    pts = [(0, 0), (30, -6), (60, -6), (100, 0), (60, 6), (30, 6)]
    assert eye_openness(pts) == pytest.approx(0.12)


@pytest.mark.parametrize("pts", [None, [], [(0, 0)] * 5])
def test_eye_openness_too_few_points_is_open(pts):
    assert eye_openness(pts) == 1.0


def test_eye_openness_zero_width_is_open():
    pts = [(5, 5), (5, 0), (5, 0), (5, 5), (5, 10), (5, 10)]
    assert eye_openness(pts) == 1.0


def test_head_roll_angle_missing_point_is_neutral():
    assert head_roll_angle(None, (1, 1)) == 0.0
    assert head_roll_angle((1, 1), None) == 0.0


def test_head_roll_angle_zero_delta_is_neutral():
    assert head_roll_angle((3, 4), (3, 4)) == 0.0


def test_head_roll_angle_degrees():
    assert head_roll_angle((0, 0), (10, 0)) == pytest.approx(0.0)
    assert head_roll_angle((0, 0), (10, 10)) == pytest.approx(45.0)
    assert head_roll_angle((0, 0), (10, -10)) == pytest.approx(-45.0)


def test_landmark_frame_point_missing_or_invalid():
    pts = np.array([[1.0, 2.0, 0.0], [np.nan, 1.0, 0.0]])
    frame = LandmarkFrame(points=pts, timestamp_ms=0)
    assert frame.point(0) is not None
    assert frame.point(1) is None
    assert frame.point(5) is None
    assert len(frame.points_at([0, 1, 5])) == 1


def test_frame_openness_averages_both_eyes(frame_factory):
    frame = frame_factory(openness=0.1, right_openness=0.3)
    assert frame_openness(frame) == pytest.approx(0.2)


def test_frame_roll(frame_factory):
    assert frame_roll(frame_factory(roll=20)) == pytest.approx(20.0, abs=1e-3)
    assert frame_roll(frame_factory(roll=-20)) == pytest.approx(-20.0, abs=1e-3)


def test_truncated_frame_gives_safe_defaults():
    frame = LandmarkFrame(points=np.zeros((10, 2)), timestamp_ms=0)
    assert frame_openness(frame) == 1.0
    assert frame_roll(frame) == 0.0
    assert not math.isnan(frame_roll(frame))
