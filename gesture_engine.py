import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from calibration import CalibrationController
from config import GestureConfig
from face_geometry import LandmarkFrame
from gesture_state import BlinkClassifier, BlinkEvent, Direction, TiltClassifier, TiltEvent

log = logging.getLogger(__name__)


@dataclass
class GestureResult:
    face_found: bool
    blink: Optional[BlinkEvent] = None
    tilt: Optional[TiltEvent] = None
    # True when events were consumed by calibration instead of the callbacks.
    suppressed: bool = False


class GestureEngine:
    """
    Frame-evaluation entry point for one review session.

    Owns one blink classifier, one tilt classifier and the calibration
    controller. Frames come from a pump created by `pump_factory` on start()
    (anything with read_frame() -> (image, LandmarkFrame | None) | None and
    release()), or are pushed directly through evaluate()/submit().
    Not thread-safe: use one engine per capture thread.
    """

    def __init__(
        self,
        config: Optional[GestureConfig] = None,
        pump_factory: Optional[Callable[[], object]] = None,
        on_blink: Optional[Callable[[], None]] = None,
        on_tilt_left: Optional[Callable[[], None]] = None,
        on_tilt_right: Optional[Callable[[], None]] = None,
        on_calibration_blink: Optional[Callable[[int], None]] = None,
        on_calibration_complete: Optional[Callable[[], None]] = None,
    ):
        self.config = (config or GestureConfig()).validate()
        self.pump_factory = pump_factory
        self.on_blink = on_blink
        self.on_tilt_left = on_tilt_left
        self.on_tilt_right = on_tilt_right
        self.on_calibration_blink = on_calibration_blink
        self.on_calibration_complete = on_calibration_complete

        self.blink = BlinkClassifier(self.config)
        self.tilt = TiltClassifier(self.config)
        self.calibration = CalibrationController(self.blink, self.config.calibration_target_blinks)

        self.pump = None
        self.last_image = None
        self.last_frame: Optional[LandmarkFrame] = None
        self.error: Optional[str] = None
        self.face_found = False
        self.is_running = False
        self.dropped_frames = 0
        self._processing = False
        self._last_frame_ms: Optional[float] = None

    # UI state
    @property
    def is_blinking(self) -> bool:
        return self.blink.is_blinking

    @property
    def head_tilt(self) -> Direction:
        return self.tilt.direction

    @property
    def blink_count(self) -> int:
        return self.blink.blink_count

    @property
    def tilt_count(self) -> int:
        return self.tilt.tilt_count

    @property
    def is_calibrating(self) -> bool:
        return self.calibration.active

    @property
    def calibration_blinks(self) -> int:
        return self.calibration.blinks

    # Lifecycle
    def start(self, calibrate: bool = True) -> bool:
        """
        Acquires the frame pump and starts a fresh session.
        Returns False (with `error` set) if the pump could not be opened;
        the caller keeps manual controls in that case.
        """
        if self.is_running:
            self.stop()

        self.error = None
        self._reset_state()

        if self.pump_factory is not None:
            try:
                self.pump = self.pump_factory()
            except RuntimeError as e:
                self.error = str(e) or "Failed to initialize camera or face detection"
                log.error("Gesture detection unavailable: %s", self.error)
                return False

        self.is_running = True
        if calibrate:
            self.calibration.begin()
        log.info("Gesture session started")
        return True

    def stop(self):
        pump, self.pump = self.pump, None
        try:
            if pump is not None:
                pump.release()
                log.info("Frame pump released")
        finally:
            self._reset_state()
            self.is_running = False

    def reset_counts(self):
        self.blink.reset_counts()
        self.tilt.reset_counts()

    def skip_calibration(self):
        if self.calibration.active:
            self.calibration.skip()
            self.tilt.reset_counts()

    def _reset_state(self):
        self.blink.reset()
        self.tilt.reset()
        self.calibration.reset()
        self.face_found = False
        self.last_image = None
        self.last_frame = None
        self.dropped_frames = 0
        self._processing = False
        self._last_frame_ms = None

    # Frame handling
    def poll(self) -> Optional[GestureResult]:
        """
        Pulls one frame from the pump and evaluates it.
        Returns None if there is no pump or the camera read failed.
        """
        if self.pump is None:
            return None

        captured = self.pump.read_frame()
        if captured is None:
            log.debug("Frame read failed")
            return None

        image, frame = captured
        self.last_image = image
        self.last_frame = frame
        now_ms = frame.timestamp_ms if frame is not None else time.monotonic() * 1000.0
        return self.submit(frame, now_ms)

    def submit(self, frame: Optional[LandmarkFrame], now_ms: float) -> Optional[GestureResult]:
        """
        Evaluates a frame unless another evaluation is still in progress,
        in which case the frame is dropped and None is returned.
        """
        if self._processing:
            self.dropped_frames += 1
            log.debug("Dropped frame at %.0f ms, previous frame still processing", now_ms)
            return None

        self._processing = True
        try:
            return self.evaluate(frame, now_ms)
        finally:
            self._processing = False

    def evaluate(self, frame: Optional[LandmarkFrame], now_ms: float) -> GestureResult:
        if not self.is_running:
            log.debug("Ignoring frame at %.0f ms, session not running", now_ms)
            return GestureResult(face_found=False)

        if frame is None:
            self.face_found = False
            return GestureResult(face_found=False)

        self.face_found = True
        if self._last_frame_ms is not None and now_ms < self._last_frame_ms:
            log.warning("Out-of-order frame: %.0f ms after %.0f ms", now_ms, self._last_frame_ms)
        self._last_frame_ms = now_ms

        blink = self.blink.evaluate(frame, now_ms)
        tilt = self.tilt.evaluate(frame, now_ms)
        result = GestureResult(face_found=True, blink=blink, tilt=tilt)

        if self.calibration.active:
            result.suppressed = blink is not None or tilt is not None
            if blink is not None:
                count = self.calibration.blinks + 1
                done = self.calibration.record_blink()
                if done:
                    # Tilts seen while calibrating do not count toward the session.
                    self.tilt.reset_counts()
                if self.on_calibration_blink:
                    self.on_calibration_blink(count)
                if done and self.on_calibration_complete:
                    self.on_calibration_complete()
            return result

        if blink is not None:
            log.info("Blink (%d this session)", blink.count)
            if self.on_blink:
                self.on_blink()

        if tilt is not None:
            log.info("Tilt %s", tilt.direction.value)
            if tilt.direction is Direction.LEFT and self.on_tilt_left:
                self.on_tilt_left()
            elif tilt.direction is Direction.RIGHT and self.on_tilt_right:
                self.on_tilt_right()

        return result
