"""Fuse tracked facial blend shapes with the microphone level.

The two inputs are clocked independently (video frames vs. audio blocks).
Each tick uses the latest value of both; no attempt is made to align them
in time.
"""

from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional, Tuple

from settings import Settings

LOOK_GAIN = 2.0


@dataclass
class ExpressionWeights:
    # None means "not written this tick" (the channel is gated off).
    blink_left: Optional[float] = None
    blink_right: Optional[float] = None
    blink: Optional[float] = None
    aa: Optional[float] = None
    happy: Optional[float] = None
    surprised: Optional[float] = None
    angry: Optional[float] = None

    def as_rig_map(self) -> Dict[str, float]:
        names = {
            "blink_left": "blinkLeft",
            "blink_right": "blinkRight",
            "blink": "blink",
            "aa": "aa",
            "happy": "happy",
            "surprised": "surprised",
            "angry": "angry",
        }
        out: Dict[str, float] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                out[names[f.name]] = value
        return out


@dataclass(frozen=True)
class LookTarget:
    x: float = 0.0
    y: float = 0.0


def _score(blend_shapes: Mapping[str, float], name: str) -> float:
    return float(blend_shapes.get(name) or 0.0)


def fuse_mouth_open(tracking_mouth: float, mic_level: float, sensitivity: float) -> float:
    # The microphone acts as a floor: the louder of the two signals wins.
    return max(tracking_mouth, mic_level) * sensitivity


def fuse_expressions(blend_shapes: Mapping[str, float], mic_level: float, settings: Settings) -> ExpressionWeights:
    weights = ExpressionWeights()

    if settings.blink_enabled:
        weights.blink_left = _score(blend_shapes, "eyeBlinkLeft")
        weights.blink_right = _score(blend_shapes, "eyeBlinkRight")
        weights.blink = (weights.blink_left + weights.blink_right) / 2.0

    if settings.lip_sync_enabled:
        weights.aa = fuse_mouth_open(_score(blend_shapes, "jawOpen"), mic_level or 0.0, settings.lip_sync_sensitivity)

    # Sums are left unclamped; the retarget stage clamps on delivery.
    weights.happy = _score(blend_shapes, "mouthSmileLeft") + _score(blend_shapes, "mouthSmileRight")
    weights.surprised = _score(blend_shapes, "browInnerUp")
    weights.angry = _score(blend_shapes, "browDownLeft") + _score(blend_shapes, "browDownRight")
    return weights


def fuse_look_target(blend_shapes: Mapping[str, float]) -> LookTarget:
    # Vertical gaze reads only the left eye's up/down channels.
    x = (_score(blend_shapes, "eyeLookInRight") - _score(blend_shapes, "eyeLookInLeft")) * LOOK_GAIN
    y = (_score(blend_shapes, "eyeLookUpLeft") - _score(blend_shapes, "eyeLookDownLeft")) * LOOK_GAIN
    return LookTarget(x, y)


def fuse_signals(
    blend_shapes: Mapping[str, float], mic_level: float, settings: Settings
) -> Tuple[ExpressionWeights, LookTarget]:
    return fuse_expressions(blend_shapes, mic_level, settings), fuse_look_target(blend_shapes)
