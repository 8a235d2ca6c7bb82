from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from errors import MissingSignal

SIDES = ("left", "right")

# Fixed index contract with the MediaPipe face / pose / hand landmarkers.
FACE_NOSE_TIP = 1
FACE_LEFT_EYE = 33
FACE_RIGHT_EYE = 263
FACE_CHIN = 152

POSE_SHOULDER = {"left": 11, "right": 12}
POSE_ELBOW = {"left": 13, "right": 14}
POSE_WRIST = {"left": 15, "right": 16}

HAND_WRIST = 0
HAND_MIDDLE_MCP = 9


@dataclass(frozen=True)
class LandmarkPoint:
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0


def landmark_at(points: Sequence[LandmarkPoint], index: int, source: str) -> LandmarkPoint:
    if index < 0 or index >= len(points):
        raise MissingSignal(source, index, len(points))
    return points[index]


@dataclass
class FaceLandmarkSet:
    points: List[LandmarkPoint]
    blend_shapes: Dict[str, float] = field(default_factory=dict)


@dataclass
class PoseLandmarkSet:
    points: List[LandmarkPoint]


@dataclass
class HandLandmarkSet:
    handedness: str
    points: List[LandmarkPoint]


@dataclass
class FrameSample:
    timestamp: float
    face: Optional[FaceLandmarkSet] = None
    pose: Optional[PoseLandmarkSet] = None
    hands: List[HandLandmarkSet] = field(default_factory=list)


@dataclass
class DetectionStatus:
    face_detected: bool = False
    pose_detected: bool = False
    hands_detected: Dict[str, bool] = field(default_factory=lambda: {"left": False, "right": False})


@dataclass(frozen=True)
class HeadRotation:
    # Degrees: x = pitch, y = yaw, z = roll.
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def negated(self) -> "HeadRotation":
        return HeadRotation(-self.x, -self.y, -self.z)

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z


def _side_pair() -> Dict[str, Tuple[float, float]]:
    return {"left": (0.0, 0.0), "right": (0.0, 0.0)}


@dataclass
class PoseFeatures:
    shoulders: Dict[str, Tuple[float, float]] = field(default_factory=_side_pair)
    elbows: Dict[str, Tuple[float, float]] = field(default_factory=_side_pair)
    wrists: Dict[str, Tuple[float, float]] = field(default_factory=_side_pair)
    detected: Dict[str, bool] = field(default_factory=lambda: {"left": False, "right": False})


@dataclass
class HandFeatures:
    landmarks: List[LandmarkPoint] = field(default_factory=list)
    detected: bool = False


@dataclass
class TrackingFrame:
    rotation: HeadRotation = field(default_factory=HeadRotation)
    blend_shapes: Dict[str, float] = field(default_factory=dict)
    pose: PoseFeatures = field(default_factory=PoseFeatures)
    hands: Dict[str, HandFeatures] = field(
        default_factory=lambda: {"left": HandFeatures(), "right": HandFeatures()}
    )
