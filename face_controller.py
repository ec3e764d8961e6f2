import logging
import time

import cv2
import numpy as np
import mediapipe as mp

from face_geometry import LEFT_EYE, RIGHT_EYE, LandmarkFrame

log = logging.getLogger(__name__)

mp_face = mp.solutions.face_mesh

EYE_POINT_COLOR = (0, 255, 0)


class FaceController:
    """
    Frame pump: reads the webcam, runs MediaPipe Face Mesh and hands back
    landmarks in pixel coordinates. Pacing is left to the caller's loop.
    """

    def __init__(self, cam_index=0, width=640, height=480,
                 min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.cap = cv2.VideoCapture(cam_index)
        if not self.cap.isOpened():
            raise RuntimeError("Could not open webcam.")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        try:
            self.face_mesh = mp_face.FaceMesh(
                static_image_mode=False,
                max_num_faces=1,
                refine_landmarks=True,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence
            )
        except Exception as e:
            self.cap.release()
            raise RuntimeError(f"Could not initialize face landmark model: {e}") from e

        log.info("Camera %s opened with Face Mesh", cam_index)

    def read_frame(self):
        """
        Returns (bgr_image, LandmarkFrame) for one capture, with None in
        place of the landmarks when no face is found.
        Returns None if the camera read fails.
        """
        ok, frame = self.cap.read()
        if not ok:
            return None

        now_ms = time.monotonic() * 1000.0
        h, w = frame.shape[:2]
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        res = self.face_mesh.process(rgb)

        if not res.multi_face_landmarks:
            return frame, None

        lm = res.multi_face_landmarks[0].landmark
        pts = np.array([(p.x * w, p.y * h, p.z * w) for p in lm], dtype=np.float32)
        return frame, LandmarkFrame(points=pts, timestamp_ms=now_ms)

    def release(self):
        try:
            self.face_mesh.close()
        except Exception as e:
            log.debug("Face Mesh close failed: %s", e)
        self.cap.release()


def draw_eye_points(image, frame: LandmarkFrame, radius=2):
    """
    Draws the EAR landmarks of both eyes onto a BGR image in place.
    """
    for p in frame.points_at(LEFT_EYE + RIGHT_EYE):
        cv2.circle(image, (int(p[0]), int(p[1])), radius, EYE_POINT_COLOR, -1)
    return image
