import math
from typing import Mapping

from settings import Settings
from signal_fusion import ExpressionWeights

BLINK_PULSE_SECONDS = 0.15
BREATH_RATE = 2.0
BREATH_AMPLITUDE = 0.02


def auto_blink_active(t: float, blink_interval: float) -> bool:
    whole = math.floor(t)
    return whole % blink_interval == 0 and (t - whole) < BLINK_PULSE_SECONDS


def apply_auto_blink(
    weights: ExpressionWeights, blend_shapes: Mapping[str, float], t: float, settings: Settings
) -> ExpressionWeights:
    # Only fills in when the detector gives no live blink signal this tick.
    if not settings.blink_enabled or blend_shapes.get("eyeBlinkLeft"):
        return weights
    if auto_blink_active(t, settings.blink_interval):
        weights.blink = 1.0
    return weights


def breathing_offset(t: float) -> float:
    return math.sin(t * BREATH_RATE) * BREATH_AMPLITUDE
