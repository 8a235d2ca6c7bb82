import math
from typing import Dict, List, Optional, Tuple

from errors import MissingSignal
from geometry import midpoint, to_xy
from settings import Settings
from tracking_types import (
    FACE_LEFT_EYE,
    FACE_NOSE_TIP,
    FACE_RIGHT_EYE,
    HAND_MIDDLE_MCP,
    POSE_ELBOW,
    POSE_SHOULDER,
    POSE_WRIST,
    SIDES,
    DetectionStatus,
    FaceLandmarkSet,
    FrameSample,
    HandFeatures,
    HandLandmarkSet,
    HeadRotation,
    LandmarkPoint,
    PoseFeatures,
    PoseLandmarkSet,
    TrackingFrame,
    landmark_at,
)

# Normalized image offsets are scaled into a +-30 degree working range.
ROTATION_SCALE = 60.0


def estimate_head_rotation(
    nose: LandmarkPoint, left_eye: LandmarkPoint, right_eye: LandmarkPoint, mirror: bool = False
) -> HeadRotation:
    eye_center = midpoint(left_eye, right_eye)
    yaw = (nose.x - 0.5) * ROTATION_SCALE
    pitch = (nose.y - eye_center.y) * ROTATION_SCALE
    roll = math.degrees(math.atan2(right_eye.y - left_eye.y, right_eye.x - left_eye.x))
    rotation = HeadRotation(x=pitch, y=yaw, z=roll)
    return rotation.negated() if mirror else rotation


def extract_face(
    face: Optional[FaceLandmarkSet], mirror: bool
) -> Tuple[Optional[HeadRotation], Dict[str, float]]:
    """Head rotation and blend shapes for one face, or ``(None, {})``.

    A missing or truncated landmark set yields no rotation so the caller
    can hold the previous value.
    """
    if face is None or not face.points:
        return None, {}
    try:
        nose = landmark_at(face.points, FACE_NOSE_TIP, "face")
        left_eye = landmark_at(face.points, FACE_LEFT_EYE, "face")
        right_eye = landmark_at(face.points, FACE_RIGHT_EYE, "face")
    except MissingSignal:
        return None, {}
    return estimate_head_rotation(nose, left_eye, right_eye, mirror), dict(face.blend_shapes)


def extract_pose(pose: Optional[PoseLandmarkSet], previous: PoseFeatures, visibility_threshold: float) -> PoseFeatures:
    features = PoseFeatures(
        shoulders=dict(previous.shoulders),
        elbows=dict(previous.elbows),
        wrists=dict(previous.wrists),
        detected={side: False for side in SIDES},
    )
    if pose is None or not pose.points:
        return features

    for side in SIDES:
        try:
            shoulder = landmark_at(pose.points, POSE_SHOULDER[side], "pose")
            elbow = landmark_at(pose.points, POSE_ELBOW[side], "pose")
            wrist = landmark_at(pose.points, POSE_WRIST[side], "pose")
        except MissingSignal:
            continue
        if min(shoulder.visibility, elbow.visibility, wrist.visibility) < visibility_threshold:
            continue
        features.shoulders[side] = to_xy(shoulder)
        features.elbows[side] = to_xy(elbow)
        features.wrists[side] = to_xy(wrist)
        features.detected[side] = True
    return features


def normalize_handedness(label: str) -> Optional[str]:
    side = label.strip().lower()
    return side if side in SIDES else None


def extract_hands(hands: List[HandLandmarkSet]) -> Dict[str, HandFeatures]:
    # Unreported hands are explicitly empty, never carried from the last tick.
    features = {side: HandFeatures() for side in SIDES}
    for hand in hands:
        side = normalize_handedness(hand.handedness)
        if side is None or len(hand.points) <= HAND_MIDDLE_MCP:
            continue
        features[side] = HandFeatures(landmarks=list(hand.points), detected=True)
    return features


def extract_frame(
    sample: FrameSample, previous: TrackingFrame, settings: Settings
) -> Tuple[TrackingFrame, DetectionStatus]:
    status = DetectionStatus()

    rotation = previous.rotation
    blend_shapes: Dict[str, float] = {}
    if settings.face_tracking_enabled:
        raw_rotation, blend_shapes = extract_face(sample.face, settings.mirror_mode)
        if raw_rotation is not None:
            rotation = raw_rotation
            status.face_detected = True

    if settings.body_tracking_enabled:
        pose = extract_pose(sample.pose, previous.pose, settings.pose_visibility_threshold)
    else:
        pose = extract_pose(None, previous.pose, settings.pose_visibility_threshold)
    status.pose_detected = any(pose.detected.values())

    if settings.hand_tracking_enabled:
        hands = extract_hands(sample.hands)
    else:
        hands = extract_hands([])
    status.hands_detected = {side: hands[side].detected for side in SIDES}

    frame = TrackingFrame(rotation=rotation, blend_shapes=blend_shapes, pose=pose, hands=hands)
    return frame, status
