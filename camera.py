import logging
import time
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class CameraFrame:
    frame: Optional[np.ndarray]
    timestamp: float
    ok: bool


class CameraStream:
    def __init__(self, camera_index: int = 0, width: int = 1280, height: int = 720, api_preference: int = cv2.CAP_ANY):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.api_preference = api_preference
        self._capture: Optional[cv2.VideoCapture] = None

    def open(self) -> bool:
        self._capture = cv2.VideoCapture(self.camera_index, self.api_preference)
        if not self._capture.isOpened():
            logger.error("Could not open camera %s", self.camera_index)
            self._capture = None
            return False
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        logger.info("Camera %s opened at %sx%s", self.camera_index, self.width, self.height)
        return True

    def is_opened(self) -> bool:
        return self._capture is not None

    def read(self) -> CameraFrame:
        # A failed read while opened means the device is still buffering.
        now = time.monotonic()
        if self._capture is None:
            return CameraFrame(None, now, False)
        ok, frame = self._capture.read()
        if not ok:
            return CameraFrame(None, now, False)
        return CameraFrame(frame, now, True)

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera %s released", self.camera_index)
