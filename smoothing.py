from geometry import lerp
from tracking_types import HeadRotation


def smooth_value(previous: float, raw: float, smoothing: float) -> float:
    if smoothing <= 0.0:
        return raw
    return lerp(previous, raw, 1.0 - smoothing)


def smooth_rotation(previous: HeadRotation, raw: HeadRotation, smoothing: float) -> HeadRotation:
    # Only the head channel is filtered; pose, hands and blend shapes pass through.
    return HeadRotation(
        x=smooth_value(previous.x, raw.x, smoothing),
        y=smooth_value(previous.y, raw.y, smoothing),
        z=smooth_value(previous.z, raw.z, smoothing),
    )
