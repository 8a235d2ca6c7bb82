"""Per-tick update: sample + previous state -> new state and rig targets.

Everything here is pure. The scheduler owns the one ``TrackingState`` and
threads it through ``advance`` once per tick.
"""

from dataclasses import dataclass, field
from typing import Optional

from feature_extraction import extract_frame
from idle_behavior import apply_auto_blink, breathing_offset
from settings import Settings
from signal_fusion import ExpressionWeights, LookTarget, fuse_signals
from smoothing import smooth_rotation
from tracking_types import DetectionStatus, FrameSample, TrackingFrame


@dataclass
class TrackingState:
    frame: TrackingFrame = field(default_factory=TrackingFrame)
    status: DetectionStatus = field(default_factory=DetectionStatus)
    tick_count: int = 0


@dataclass
class TickResult:
    state: TrackingState
    expressions: ExpressionWeights
    look_target: LookTarget
    breathing: Optional[float]


def advance(
    state: TrackingState, sample: FrameSample, settings: Settings, mic_level: float, now: float
) -> TickResult:
    frame, status = extract_frame(sample, state.frame, settings)

    if status.face_detected:
        frame.rotation = smooth_rotation(state.frame.rotation, frame.rotation, settings.tracking_smoothing)
    else:
        frame.rotation = state.frame.rotation

    expressions, look = fuse_signals(frame.blend_shapes, mic_level, settings)
    expressions = apply_auto_blink(expressions, frame.blend_shapes, now, settings)
    breathing = breathing_offset(now) if settings.idle_animation_enabled else None

    new_state = TrackingState(frame=frame, status=status, tick_count=state.tick_count + 1)
    return TickResult(new_state, expressions, look, breathing)
