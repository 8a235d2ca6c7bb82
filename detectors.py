"""MediaPipe Tasks adapters producing landmark sets for the pipeline.

Each adapter runs in VIDEO mode, so timestamps passed to ``detect`` must
increase monotonically. Any error raised by MediaPipe is wrapped in
``DetectionFailure``; the scheduler treats it as "no detection" for that
modality on that tick.
"""

import logging
import urllib.request
from pathlib import Path
from typing import List, Optional

import cv2

from errors import DetectionFailure
from tracking_types import FaceLandmarkSet, HandLandmarkSet, LandmarkPoint, PoseLandmarkSet

logger = logging.getLogger(__name__)

MODEL_URLS = {
    "face": (
        "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
        "face_landmarker/float16/latest/face_landmarker.task"
    ),
    "pose": (
        "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
        "pose_landmarker_heavy/float16/latest/pose_landmarker_heavy.task"
    ),
    "hand": (
        "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
        "hand_landmarker/float16/latest/hand_landmarker.task"
    ),
}

MODEL_CACHE_DIR = Path.home() / ".cache" / "avatar_retarget" / "models"


def model_path(modality: str, cache_dir: Path = MODEL_CACHE_DIR) -> Path:
    cache_dir.mkdir(parents=True, exist_ok=True)
    path = cache_dir / f"{modality}_landmarker.task"
    if not path.exists():
        url = MODEL_URLS[modality]
        logger.info("Downloading %s landmarker model to %s", modality, path)
        try:
            urllib.request.urlretrieve(url, path)
        except OSError as exc:
            raise RuntimeError(f"Failed to download {modality} model from {url}: {exc}") from exc
    return path


def _points(landmarks) -> List[LandmarkPoint]:
    out = []
    for lm in landmarks:
        visibility = getattr(lm, "visibility", None)
        out.append(LandmarkPoint(lm.x, lm.y, lm.z, 1.0 if visibility is None else float(visibility)))
    return out


def face_from_result(result) -> Optional[FaceLandmarkSet]:
    if not result.face_landmarks:
        return None
    blend_shapes = {}
    if result.face_blendshapes:
        blend_shapes = {c.category_name: float(c.score) for c in result.face_blendshapes[0]}
    return FaceLandmarkSet(points=_points(result.face_landmarks[0]), blend_shapes=blend_shapes)


def pose_from_result(result) -> Optional[PoseLandmarkSet]:
    if not result.pose_landmarks:
        return None
    return PoseLandmarkSet(points=_points(result.pose_landmarks[0]))


def hands_from_result(result) -> List[HandLandmarkSet]:
    hands: List[HandLandmarkSet] = []
    for idx, landmarks in enumerate(result.hand_landmarks or []):
        if not result.handedness or idx >= len(result.handedness) or not result.handedness[idx]:
            continue
        label = result.handedness[idx][0].category_name
        hands.append(HandLandmarkSet(handedness=label, points=_points(landmarks)))
    return hands


class LandmarkDetector:
    modality = "base"

    def __init__(self, model_asset_path: Optional[Path] = None):
        self._model_asset_path = model_asset_path
        self._landmarker = None

    @property
    def ready(self) -> bool:
        return self._landmarker is not None

    def open(self) -> None:
        if self._landmarker is not None:
            return
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision

        path = self._model_asset_path or model_path(self.modality)
        base_options = mp_python.BaseOptions(model_asset_path=str(path))
        self._landmarker = self._create(vision, base_options)
        logger.info("%s landmarker ready", self.modality)

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("%s landmarker released", self.modality)

    def detect(self, frame_bgr, timestamp_ms: int):
        if self._landmarker is None:
            raise DetectionFailure(self.modality, RuntimeError("detector not opened"))
        try:
            import mediapipe as mp

            frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
            image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
            result = self._landmarker.detect_for_video(image, int(timestamp_ms))
            return self._convert(result)
        except Exception as exc:
            raise DetectionFailure(self.modality, exc) from exc

    def _create(self, vision, base_options):
        raise NotImplementedError

    def _convert(self, result):
        raise NotImplementedError


class FaceDetector(LandmarkDetector):
    modality = "face"

    def _create(self, vision, base_options):
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_faces=1,
            output_face_blendshapes=True,
        )
        return vision.FaceLandmarker.create_from_options(options)

    def _convert(self, result) -> Optional[FaceLandmarkSet]:
        return face_from_result(result)


class PoseDetector(LandmarkDetector):
    modality = "pose"

    def _create(self, vision, base_options):
        options = vision.PoseLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
        )
        return vision.PoseLandmarker.create_from_options(options)

    def _convert(self, result) -> Optional[PoseLandmarkSet]:
        return pose_from_result(result)


class HandDetector(LandmarkDetector):
    modality = "hand"

    def _create(self, vision, base_options):
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=2,
        )
        return vision.HandLandmarker.create_from_options(options)

    def _convert(self, result) -> List[HandLandmarkSet]:
        return hands_from_result(result)
