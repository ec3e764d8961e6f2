import math

import numpy as np
import pytest

from face_geometry import LEFT_EAR, LEFT_EYE, RIGHT_EAR, RIGHT_EYE, LandmarkFrame

NUM_LANDMARKS = 478
OPEN = 0.3
CLOSED = 0.05


def _place_eye(pts, idx, x0, y0, openness):
    # 100 px wide eye whose EAR is exactly `openness`.
    half = 50.0 * openness
    pts[idx[0]] = (x0, y0, 0)
    pts[idx[1]] = (x0 + 30, y0 - half, 0)
    pts[idx[2]] = (x0 + 60, y0 - half, 0)
    pts[idx[3]] = (x0 + 100, y0, 0)
    pts[idx[4]] = (x0 + 60, y0 + half, 0)
    pts[idx[5]] = (x0 + 30, y0 + half, 0)


def make_frame(openness=OPEN, roll=0.0, t=0.0, right_openness=None):
    pts = np.zeros((NUM_LANDMARKS, 3), dtype=np.float32)
    _place_eye(pts, LEFT_EYE, 360, 300, openness)
    _place_eye(pts, RIGHT_EYE, 180, 300, openness if right_openness is None else right_openness)

    a = math.radians(roll)
    pts[LEFT_EAR] = (120, 320, 0)
    pts[RIGHT_EAR] = (120 + 400 * math.cos(a), 320 + 400 * math.sin(a), 0)
    return LandmarkFrame(points=pts, timestamp_ms=t)


@pytest.fixture
def frame_factory():
    return make_frame
