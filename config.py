import json
import logging
import os
from dataclasses import dataclass, fields

log = logging.getLogger(__name__)

# Frame rate (pump throttle: 20 Hz == one frame every 50 ms)
FPS = 20

# Window
WIN_W = 960
WIN_H = 720
TITLE = "Blink Review (BLINK=mark, TILT left/right=navigate, S=skip calibration)"

# Logging
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Optional JSON overrides for GestureConfig
CONFIG_PATH = os.environ.get("BLINK_REVIEW_CONFIG", "gesture_config.json")

# Blink
BLINK_THRESHOLD = 0.18
BLINK_DEBOUNCE_MS = 500
BLINK_CONFIRM_FRAMES = 2
MIN_EYES_OPEN_MS = 150

# Head tilt
TILT_THRESHOLD_DEG = 15.0
TILT_DEBOUNCE_MS = 600
TILT_CONFIRM_FRAMES = 3

# Calibration
CALIBRATION_TARGET_BLINKS = 3

# Review demo
DEMO_PHOTO_COUNT = 8
FLASH_SECONDS = 0.2


@dataclass
class GestureConfig:
    blink_threshold: float = BLINK_THRESHOLD
    blink_debounce_ms: float = BLINK_DEBOUNCE_MS
    tilt_threshold_deg: float = TILT_THRESHOLD_DEG
    tilt_debounce_ms: float = TILT_DEBOUNCE_MS
    calibration_target_blinks: int = CALIBRATION_TARGET_BLINKS
    blink_confirm_frames: int = BLINK_CONFIRM_FRAMES
    tilt_confirm_frames: int = TILT_CONFIRM_FRAMES
    min_eyes_open_ms: float = MIN_EYES_OPEN_MS

    def validate(self) -> "GestureConfig":
        if self.blink_threshold <= 0:
            raise ValueError(f"blink_threshold must be positive, got {self.blink_threshold}")
        if self.tilt_threshold_deg <= 0:
            raise ValueError(f"tilt_threshold_deg must be positive, got {self.tilt_threshold_deg}")
        for name in ("blink_confirm_frames", "tilt_confirm_frames", "calibration_target_blinks"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        for name in ("blink_debounce_ms", "tilt_debounce_ms", "min_eyes_open_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "GestureConfig":
        """
        Builds a config from a flat dict, ignoring keys it does not know.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                log.warning("Ignoring unknown gesture setting %r", key)
                continue
            kwargs[key] = int(value) if key.endswith("_frames") or key.endswith("_blinks") else float(value)
        return cls(**kwargs).validate()


def load_config(path: str = CONFIG_PATH) -> GestureConfig:
    """
    Loads overrides from a JSON file; a missing file means all defaults.
    """
    if not os.path.exists(path):
        log.debug("No gesture config at %s, using defaults", path)
        return GestureConfig().validate()

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")

    log.info("Loaded gesture config overrides from %s", path)
    return GestureConfig.from_dict(data)
