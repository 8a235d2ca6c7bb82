import math
from typing import Dict, Optional

from geometry import clamp, segment_angle, to_xy
from rig import RigTarget
from settings import ModelTransform, Settings
from signal_fusion import ExpressionWeights, LookTarget
from tracking_types import HAND_MIDDLE_MCP, HAND_WRIST, SIDES, HandFeatures, HeadRotation, PoseFeatures

# Upper-arm angles are measured against a rest pose that hangs straight down.
UPPER_ARM_REST_OFFSET = math.pi / 2


def apply_head(rig: RigTarget, rotation: HeadRotation, speed: float) -> None:
    head = rig.get_bone("head")
    if head is None:
        return
    head.set_rotation(
        x=math.radians(rotation.x * speed),
        y=math.radians(rotation.y * speed),
        z=math.radians(rotation.z * speed),
    )


def apply_expressions(rig: RigTarget, weights: ExpressionWeights) -> None:
    for name, value in weights.as_rig_map().items():
        # clamp() maps NaN to 1.0, so non-finite scores are dropped first.
        if not math.isfinite(value):
            continue
        rig.set_expression(name, clamp(value))


def arm_angles(pose: PoseFeatures, side: str) -> Dict[str, float]:
    shoulder = pose.shoulders[side]
    elbow = pose.elbows[side]
    wrist = pose.wrists[side]
    return {
        "upper": segment_angle(shoulder, elbow) - UPPER_ARM_REST_OFFSET,
        "lower": segment_angle(elbow, wrist),
    }


def apply_pose(rig: RigTarget, pose: PoseFeatures) -> None:
    for side in SIDES:
        if not pose.detected[side]:
            continue
        angles = arm_angles(pose, side)
        upper = rig.get_bone(f"{side}UpperArm")
        if upper is not None:
            upper.set_rotation(z=angles["upper"])
        lower = rig.get_bone(f"{side}LowerArm")
        if lower is not None:
            lower.set_rotation(z=angles["lower"])


def hand_angle(hand: HandFeatures) -> Optional[float]:
    if not hand.detected or len(hand.landmarks) <= HAND_MIDDLE_MCP:
        return None
    return segment_angle(to_xy(hand.landmarks[HAND_WRIST]), to_xy(hand.landmarks[HAND_MIDDLE_MCP]))


def apply_hands(rig: RigTarget, hands: Dict[str, HandFeatures]) -> None:
    for side in SIDES:
        angle = hand_angle(hands[side])
        if angle is None:
            continue
        bone = rig.get_bone(f"{side}Hand")
        if bone is not None:
            bone.set_rotation(z=angle)


def apply_breathing(rig: RigTarget, offset: float) -> None:
    chest = rig.get_bone("chest")
    if chest is not None:
        chest.set_rotation(x=offset)


def apply_model_transform(rig: RigTarget, transform: ModelTransform) -> None:
    rig.set_root_transform(transform.position, transform.scale, math.radians(transform.rotation_y))


def apply_retarget(
    rig: RigTarget,
    rotation: HeadRotation,
    weights: ExpressionWeights,
    look: LookTarget,
    pose: PoseFeatures,
    hands: Dict[str, HandFeatures],
    breathing: Optional[float],
    settings: Settings,
    transform: ModelTransform,
) -> None:
    apply_model_transform(rig, transform)
    if settings.face_tracking_enabled:
        apply_head(rig, rotation, settings.tracking_speed)
    apply_expressions(rig, weights)
    rig.set_look_target(look.x, look.y)
    if settings.body_tracking_enabled:
        apply_pose(rig, pose)
    if settings.hand_tracking_enabled:
        apply_hands(rig, hands)
    if breathing is not None:
        apply_breathing(rig, breathing)
