import math
from typing import Optional, Tuple

import cv2

from geometry import Point2D
from pipeline import TickResult
from tracking_types import SIDES, TrackingFrame

POSE_COLOR = (0, 255, 0)
JOINT_COLOR = (0, 255, 255)
HAND_COLORS = {"left": (255, 0, 0), "right": (0, 165, 255)}


def _to_pixel(point: Point2D, image_size: Tuple[int, int]) -> Tuple[int, int]:
    width, height = image_size
    return int(point[0] * width), int(point[1] * height)


def draw_arms(frame, tracked: TrackingFrame) -> None:
    height, width = frame.shape[:2]
    pose = tracked.pose
    for side in SIDES:
        if not pose.detected[side]:
            continue
        chain = [pose.shoulders[side], pose.elbows[side], pose.wrists[side]]
        pixels = [_to_pixel(p, (width, height)) for p in chain]
        for a, b in zip(pixels, pixels[1:]):
            cv2.line(frame, a, b, POSE_COLOR, 2)
        for p in pixels:
            cv2.circle(frame, p, 5, JOINT_COLOR, -1)


def draw_hands(frame, tracked: TrackingFrame) -> None:
    height, width = frame.shape[:2]
    for side in SIDES:
        hand = tracked.hands[side]
        if not hand.detected:
            continue
        for lm in hand.landmarks:
            cv2.circle(frame, _to_pixel((lm.x, lm.y), (width, height)), 3, HAND_COLORS[side], -1)


def draw_head_axis(frame, tracked: TrackingFrame, origin: Optional[Tuple[int, int]] = None, length: int = 60) -> None:
    # Projects yaw/pitch onto a short line so head motion is visible at a glance.
    height, width = frame.shape[:2]
    ox, oy = origin or (width // 2, 60)
    yaw = math.radians(tracked.rotation.y)
    pitch = math.radians(tracked.rotation.x)
    end = (int(ox + length * math.sin(yaw)), int(oy + length * math.sin(pitch)))
    cv2.circle(frame, (ox, oy), 4, (255, 255, 255), -1)
    cv2.line(frame, (ox, oy), end, (255, 0, 255), 2)


def draw_tracking(frame, result: Optional[TickResult]) -> None:
    if result is None:
        return
    tracked = result.state.frame
    draw_arms(frame, tracked)
    draw_hands(frame, tracked)
    if result.state.status.face_detected:
        draw_head_axis(frame, tracked)
