"""Rig capability interface and an in-memory humanoid rig.

Bones hold Euler rotations in radians. Expression weights are clamped to
[0, 1]. Names the rig does not carry are ignored silently on write so the
pipeline never needs to check for them per tick.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from geometry import clamp

logger = logging.getLogger(__name__)

BONE_NAMES = (
    "head",
    "chest",
    "leftUpperArm",
    "rightUpperArm",
    "leftLowerArm",
    "rightLowerArm",
    "leftHand",
    "rightHand",
)

EXPRESSION_NAMES = ("blink", "blinkLeft", "blinkRight", "aa", "happy", "surprised", "angry")


@dataclass
class Euler:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class BoneNode:
    name: str
    rotation: Euler = field(default_factory=Euler)

    def set_rotation(self, x: Optional[float] = None, y: Optional[float] = None, z: Optional[float] = None) -> None:
        # Non-finite values are dropped so the bone keeps its last good angle.
        for axis, value in (("x", x), ("y", y), ("z", z)):
            if value is not None and math.isfinite(value):
                setattr(self.rotation, axis, float(value))


@dataclass
class RootTransform:
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: float = 1.0
    rotation_y: float = 0.0  # radians


class RigTarget(Protocol):
    def get_bone(self, name: str) -> Optional[BoneNode]:
        ...

    def set_expression(self, name: str, weight: float) -> None:
        ...

    def set_look_target(self, x: float, y: float) -> None:
        ...

    def set_root_transform(self, position: Tuple[float, float, float], scale: float, rotation_y: float) -> None:
        ...


class HumanoidRig:
    def __init__(self, bones: Iterable[str] = BONE_NAMES, expressions: Iterable[str] = EXPRESSION_NAMES):
        self.bones: Dict[str, BoneNode] = {name: BoneNode(name) for name in bones}
        self.expressions: Dict[str, float] = {name: 0.0 for name in expressions}
        self.look_target: Tuple[float, float] = (0.0, 0.0)
        self.root = RootTransform()

    def get_bone(self, name: str) -> Optional[BoneNode]:
        return self.bones.get(name)

    def set_expression(self, name: str, weight: float) -> None:
        if name not in self.expressions or not math.isfinite(weight):
            return
        self.expressions[name] = clamp(float(weight))

    def set_look_target(self, x: float, y: float) -> None:
        if math.isfinite(x) and math.isfinite(y):
            self.look_target = (float(x), float(y))

    def set_root_transform(self, position: Tuple[float, float, float], scale: float, rotation_y: float) -> None:
        self.root = RootTransform(tuple(float(v) for v in position), float(scale), float(rotation_y))

    def missing_bindings(self) -> List[str]:
        missing = [name for name in BONE_NAMES if name not in self.bones]
        missing += [name for name in EXPRESSION_NAMES if name not in self.expressions]
        return missing

    def log_missing_bindings(self) -> None:
        # Called once after loading; per-tick writes to absent names stay silent.
        missing = self.missing_bindings()
        if missing:
            logger.info("Rig lacks bindings: %s", ", ".join(missing))
