import math
from typing import Tuple

from tracking_types import LandmarkPoint

Point2D = Tuple[float, float]


def midpoint(a: LandmarkPoint, b: LandmarkPoint) -> LandmarkPoint:
    return LandmarkPoint((a.x + b.x) / 2.0, (a.y + b.y) / 2.0, (a.z + b.z) / 2.0)


def segment_angle(start: Point2D, end: Point2D) -> float:
    # Radians of the image-space vector start -> end, measured from +x.
    return math.atan2(end[1] - start[1], end[0] - start[0])


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def to_xy(lm: LandmarkPoint) -> Point2D:
    return lm.x, lm.y
