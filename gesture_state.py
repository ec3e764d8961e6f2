import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import GestureConfig
from face_geometry import LandmarkFrame, frame_openness, frame_roll

log = logging.getLogger(__name__)


class Direction(Enum):
    NEUTRAL = "neutral"
    LEFT = "left"
    RIGHT = "right"


class TiltPhase(Enum):
    # Head centred, next excursion armed.
    NEUTRAL = "neutral"
    # Head tilted, excursion not fired yet (confirming or debouncing).
    PENDING = "pending"
    # Fired for this excursion; only a neutral frame leaves this phase.
    FIRED = "fired"


@dataclass(frozen=True)
class BlinkEvent:
    timestamp_ms: float
    count: int
    openness: float


@dataclass(frozen=True)
class TiltEvent:
    timestamp_ms: float
    direction: Direction
    angle: float


class BlinkClassifier:
    """
    Turns per-frame eye openness into single blink events.

    A closure is confirmed after `blink_confirm_frames` low frames in a row.
    The confirmation fires only if the last blink is older than the debounce
    window and the eyes had been open long enough beforehand.
    """

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()
        self.reset()

    def reset(self):
        self.consecutive_low = 0
        self.closed = False
        self.eyes_open_since_ms: Optional[float] = None
        self.last_blink_ms: Optional[float] = None
        self.blink_count = 0
        self.is_blinking = False

    def reset_counts(self):
        self.blink_count = 0

    def evaluate(self, frame: LandmarkFrame, now_ms: float) -> Optional[BlinkEvent]:
        return self.update(frame_openness(frame), now_ms)

    def update(self, openness: float, now_ms: float) -> Optional[BlinkEvent]:
        cfg = self.config
        low = openness < cfg.blink_threshold

        if low:
            self.consecutive_low += 1
        else:
            self.consecutive_low = 0
            if self.eyes_open_since_ms is None:
                self.eyes_open_since_ms = now_ms

        confirmed = self.consecutive_low >= cfg.blink_confirm_frames

        event = None
        if confirmed and not self.closed:
            open_long_enough = (
                self.eyes_open_since_ms is None
                or now_ms - self.eyes_open_since_ms > cfg.min_eyes_open_ms
            )
            debounced = (
                self.last_blink_ms is None
                or now_ms - self.last_blink_ms > cfg.blink_debounce_ms
            )
            if debounced and open_long_enough:
                self.last_blink_ms = now_ms
                self.eyes_open_since_ms = None
                self.blink_count += 1
                self.is_blinking = True
                event = BlinkEvent(timestamp_ms=now_ms, count=self.blink_count, openness=openness)
                log.debug("Blink #%d at %.0f ms (EAR %.3f)", self.blink_count, now_ms, openness)
            else:
                log.debug("Blink suppressed at %.0f ms (debounced=%s, open_long_enough=%s)",
                          now_ms, debounced, open_long_enough)

        if not low and self.is_blinking:
            self.is_blinking = False

        self.closed = confirmed
        return event


class TiltClassifier:
    """
    Turns per-frame roll angle into single left/right tilt events.

    One event per excursion: after firing, the head has to pass back through
    the neutral band before either direction can fire again.
    """

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()
        self.reset()

    def reset(self):
        self.consecutive_frames = 0
        self.last_direction = Direction.NEUTRAL
        self.phase = TiltPhase.NEUTRAL
        self.last_tilt_ms: Optional[float] = None
        self.direction = Direction.NEUTRAL
        self.tilt_count = 0

    def reset_counts(self):
        self.tilt_count = 0

    @property
    def has_fired(self) -> bool:
        return self.phase is TiltPhase.FIRED

    @property
    def neutral_since_fire(self) -> bool:
        return self.phase is not TiltPhase.FIRED

    def classify(self, angle: float) -> Direction:
        th = self.config.tilt_threshold_deg
        if angle > th:
            return Direction.RIGHT
        if angle < -th:
            return Direction.LEFT
        return Direction.NEUTRAL

    def evaluate(self, frame: LandmarkFrame, now_ms: float) -> Optional[TiltEvent]:
        return self.update(frame_roll(frame), now_ms)

    def update(self, angle: float, now_ms: float) -> Optional[TiltEvent]:
        cfg = self.config
        detected = self.classify(angle)

        if detected is not Direction.NEUTRAL and detected is self.last_direction:
            self.consecutive_frames += 1
        else:
            self.consecutive_frames = 0
        self.last_direction = detected

        confirmed = self.consecutive_frames >= cfg.tilt_confirm_frames
        if confirmed:
            self.direction = detected

        if detected is Direction.NEUTRAL:
            if self.phase is TiltPhase.FIRED:
                log.debug("Head back to neutral, next tilt armed")
            self.phase = TiltPhase.NEUTRAL
            self.direction = Direction.NEUTRAL
            return None

        if self.phase is TiltPhase.FIRED:
            return None

        self.phase = TiltPhase.PENDING
        if not confirmed:
            return None

        if self.last_tilt_ms is not None and now_ms - self.last_tilt_ms <= cfg.tilt_debounce_ms:
            return None

        self.last_tilt_ms = now_ms
        self.phase = TiltPhase.FIRED
        self.tilt_count += 1
        log.debug("Tilt %s at %.0f ms (%.1f deg)", detected.value, now_ms, angle)
        return TiltEvent(timestamp_ms=now_ms, direction=detected, angle=angle)
