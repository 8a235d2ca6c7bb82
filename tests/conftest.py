from typing import Dict, Optional, Tuple

import pytest

from tracking_types import (
    FACE_LEFT_EYE,
    FACE_NOSE_TIP,
    FACE_RIGHT_EYE,
    HAND_MIDDLE_MCP,
    HAND_WRIST,
    POSE_ELBOW,
    POSE_SHOULDER,
    POSE_WRIST,
    FaceLandmarkSet,
    HandLandmarkSet,
    LandmarkPoint,
    PoseLandmarkSet,
)

FACE_POINT_COUNT = 478
POSE_POINT_COUNT = 33
HAND_POINT_COUNT = 21


def make_face(
    nose=(0.5, 0.5),
    left_eye=(0.45, 0.5),
    right_eye=(0.55, 0.5),
    blend_shapes: Optional[Dict[str, float]] = None,
    count: int = FACE_POINT_COUNT,
) -> FaceLandmarkSet:
    points = [LandmarkPoint(0.5, 0.5, 0.0) for _ in range(count)]
    for index, (x, y) in ((FACE_NOSE_TIP, nose), (FACE_LEFT_EYE, left_eye), (FACE_RIGHT_EYE, right_eye)):
        if index < count:
            points[index] = LandmarkPoint(x, y, 0.0)
    return FaceLandmarkSet(points=points, blend_shapes=dict(blend_shapes or {}))


def make_pose(
    joints: Optional[Dict[str, Dict[str, Tuple[float, float]]]] = None, visibility: float = 1.0
) -> PoseLandmarkSet:
    points = [LandmarkPoint(0.0, 0.0, 0.0, visibility) for _ in range(POSE_POINT_COUNT)]
    joints = joints or {
        "left": {"shoulder": (0.6, 0.4), "elbow": (0.6, 0.6), "wrist": (0.7, 0.6)},
        "right": {"shoulder": (0.4, 0.4), "elbow": (0.3, 0.4), "wrist": (0.3, 0.3)},
    }
    indices = {"shoulder": POSE_SHOULDER, "elbow": POSE_ELBOW, "wrist": POSE_WRIST}
    for side, parts in joints.items():
        for part, (x, y) in parts.items():
            points[indices[part][side]] = LandmarkPoint(x, y, 0.0, visibility)
    return PoseLandmarkSet(points=points)


def make_hand(handedness: str = "Left", wrist=(0.5, 0.8), middle=(0.5, 0.6)) -> HandLandmarkSet:
    points = [LandmarkPoint(0.5, 0.7, 0.0) for _ in range(HAND_POINT_COUNT)]
    points[HAND_WRIST] = LandmarkPoint(wrist[0], wrist[1], 0.0)
    points[HAND_MIDDLE_MCP] = LandmarkPoint(middle[0], middle[1], 0.0)
    return HandLandmarkSet(handedness=handedness, points=points)


@pytest.fixture
def face():
    return make_face()


@pytest.fixture
def pose():
    return make_pose()
