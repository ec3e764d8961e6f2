import math
from dataclasses import dataclass

import numpy as np

# Eye landmark sets (MediaPipe Face Mesh ids) used to compute EAR (eye aspect ratio).
# Order: outer corner, two upper lid points, inner corner, two lower lid points.
LEFT_EYE = [362, 385, 387, 263, 373, 380]
RIGHT_EYE = [33, 160, 158, 133, 153, 144]

# Face-edge points next to the ears, used for the roll estimate.
LEFT_EAR = 234
RIGHT_EAR = 454

OPEN_EYE_RATIO = 1.0
NEUTRAL_ROLL = 0.0


@dataclass(frozen=True)
class LandmarkFrame:
    """
    One inference cycle worth of landmarks: an (N, 2) or (N, 3) array indexed
    by landmark id, plus the capture time in milliseconds.
    """
    points: np.ndarray
    timestamp_ms: float

    def point(self, idx: int):
        if idx < 0 or idx >= len(self.points):
            return None
        p = np.asarray(self.points[idx], dtype=np.float64)[:2]
        if not np.all(np.isfinite(p)):
            return None
        return p

    def points_at(self, indices) -> list:
        found = []
        for idx in indices:
            p = self.point(idx)
            if p is not None:
                found.append(p)
        return found


def dist(a, b) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def eye_openness(eye_pts) -> float:
    """
    EAR drops when the eye closes.
    Fewer than 6 points or a zero-width eye gives OPEN_EYE_RATIO, so a bad
    frame can never look like a blink.
    """
    if eye_pts is None or len(eye_pts) < 6:
        return OPEN_EYE_RATIO

    p1, p2, p3, p4, p5, p6 = (np.asarray(p, dtype=np.float64)[:2] for p in eye_pts[:6])
    h = dist(p1, p4)
    if h == 0:
        return OPEN_EYE_RATIO

    v1 = dist(p2, p6)
    v2 = dist(p3, p5)
    return (v1 + v2) / (2.0 * h)


def head_roll_angle(left_ear, right_ear) -> float:
    """
    Roll in degrees from the line between the two ear points.
    """
    if left_ear is None or right_ear is None:
        return NEUTRAL_ROLL

    dy = float(right_ear[1]) - float(left_ear[1])
    dx = float(right_ear[0]) - float(left_ear[0])
    if dx == 0 and dy == 0:
        return NEUTRAL_ROLL
    return math.degrees(math.atan2(dy, dx))


def frame_openness(frame: LandmarkFrame) -> float:
    left = eye_openness(frame.points_at(LEFT_EYE))
    right = eye_openness(frame.points_at(RIGHT_EYE))
    return (left + right) / 2.0


def frame_roll(frame: LandmarkFrame) -> float:
    return head_roll_angle(frame.point(LEFT_EAR), frame.point(RIGHT_EAR))
