import logging

from config import CALIBRATION_TARGET_BLINKS
from gesture_state import BlinkClassifier

log = logging.getLogger(__name__)


class CalibrationController:
    """
    Counts blinks at the start of a review session.
    Reaching the target (or skipping) leaves calibration and clears the
    classifier's blink count so the session starts from zero.
    """

    def __init__(self, blink: BlinkClassifier, target_blinks: int = CALIBRATION_TARGET_BLINKS):
        self.blink = blink
        self.target_blinks = int(target_blinks)
        self.active = False
        self.blinks = 0

    @property
    def remaining(self) -> int:
        if not self.active:
            return 0
        return max(0, self.target_blinks - self.blinks)

    def begin(self):
        self.active = True
        self.blinks = 0
        log.info("Calibration started: blink %d times", self.target_blinks)

    def record_blink(self) -> bool:
        """
        Returns True if this blink completed calibration.
        """
        if not self.active:
            return False

        self.blinks += 1
        log.info("Calibration blink %d/%d", self.blinks, self.target_blinks)
        if self.blinks >= self.target_blinks:
            self._finish()
            log.info("Calibration complete")
            return True
        return False

    def skip(self):
        if not self.active:
            return
        self._finish()
        log.info("Calibration skipped")

    def reset(self):
        self.active = False
        self.blinks = 0

    def _finish(self):
        self.reset()
        self.blink.reset_counts()
