import math
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from errors import SettingsError

MIN_MODEL_SCALE = 0.1
MAX_MODEL_SCALE = 3.0


def _snake_case(key: str) -> str:
    # Accept the camelCase names used by the browser app as well.
    # Capital runs stay together, so showFPS becomes show_fps.
    key = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", key)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key).lower()


def _check_types(instance) -> None:
    for f in fields(instance):
        value = getattr(instance, f.name)
        if f.type is bool and not isinstance(value, bool):
            raise SettingsError(f"{f.name} must be true or false, got {value!r}")
        if f.type is float and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise SettingsError(f"{f.name} must be a number, got {value!r}")


@dataclass(frozen=True)
class Settings:
    tracking_smoothing: float = 0.5
    tracking_speed: float = 1.0
    face_tracking_enabled: bool = True
    body_tracking_enabled: bool = True
    hand_tracking_enabled: bool = True
    lip_sync_enabled: bool = True
    lip_sync_sensitivity: float = 0.7
    blink_enabled: bool = True
    blink_interval: float = 4.0
    idle_animation_enabled: bool = True
    mirror_mode: bool = True
    pose_visibility_threshold: float = 0.5
    debug_mode: bool = False
    show_fps: bool = True

    def __post_init__(self):
        _check_types(self)
        if not 0.0 <= self.tracking_smoothing < 1.0:
            raise SettingsError(f"tracking_smoothing must be in [0, 1), got {self.tracking_smoothing}")
        if not math.isfinite(self.tracking_speed):
            raise SettingsError("tracking_speed must be finite")
        if not 0.0 <= self.lip_sync_sensitivity <= 1.0:
            raise SettingsError(f"lip_sync_sensitivity must be in [0, 1], got {self.lip_sync_sensitivity}")
        if not self.blink_interval > 0:
            raise SettingsError(f"blink_interval must be > 0, got {self.blink_interval}")
        if not 0.0 <= self.pose_visibility_threshold <= 1.0:
            raise SettingsError("pose_visibility_threshold must be in [0, 1]")

    def replace(self, **changes) -> "Settings":
        return replace(self, **changes)

    def toggled(self, name: str) -> "Settings":
        value = getattr(self, name)
        if not isinstance(value, bool):
            raise SettingsError(f"{name} is not a toggle")
        return replace(self, **{name: not value})

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "Settings":
        return cls(**_normalize_keys(cls, data))


@dataclass(frozen=True)
class ModelTransform:
    position: Tuple[float, float, float] = (0.0, -0.5, 0.0)
    scale: float = 1.0
    rotation_y: float = 0.0  # degrees

    def __post_init__(self):
        _check_types(self)
        if len(self.position) != 3:
            raise SettingsError("position must have three components")
        if not MIN_MODEL_SCALE <= self.scale <= MAX_MODEL_SCALE:
            raise SettingsError(f"scale must be in [{MIN_MODEL_SCALE}, {MAX_MODEL_SCALE}], got {self.scale}")

    def moved(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "ModelTransform":
        x, y, z = self.position
        return replace(self, position=(x + dx, y + dy, z + dz))

    def rescaled(self, delta: float) -> "ModelTransform":
        scale = max(MIN_MODEL_SCALE, min(MAX_MODEL_SCALE, self.scale + delta))
        return replace(self, scale=scale)

    def rotated(self, degrees: float) -> "ModelTransform":
        return replace(self, rotation_y=self.rotation_y + degrees)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ModelTransform":
        values = _normalize_keys(cls, data)
        if "position" in values:
            pos = values["position"]
            if isinstance(pos, dict):
                pos = (pos.get("x", 0.0), pos.get("y", 0.0), pos.get("z", 0.0))
            values["position"] = tuple(float(v) for v in pos)
        return cls(**values)


def _normalize_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = _snake_case(key)
        if name not in known:
            raise SettingsError(f"Unknown {cls.__name__} key: {key}")
        values[name] = value
    return values


@dataclass(frozen=True)
class AppConfig:
    settings: Settings = field(default_factory=Settings)
    transform: ModelTransform = field(default_factory=ModelTransform)
    camera_index: int = 0
    vmc_host: str = "127.0.0.1"
    vmc_port: int = 39539


def load_settings(path: Union[str, Path]) -> AppConfig:
    """Load an AppConfig from YAML.

    The file may hold ``settings`` and ``transform`` sections plus
    ``camera_index``, ``vmc_host`` and ``vmc_port``. Missing sections keep
    their defaults.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a mapping")

    data = {_snake_case(k): v for k, v in data.items()}
    unknown = set(data) - {"settings", "transform", "camera_index", "vmc_host", "vmc_port"}
    if unknown:
        raise SettingsError(f"Unknown config sections: {sorted(unknown)}")

    return AppConfig(
        settings=Settings.from_mapping(data.get("settings") or {}),
        transform=ModelTransform.from_mapping(data.get("transform") or {}),
        camera_index=int(data.get("camera_index", 0)),
        vmc_host=str(data.get("vmc_host", "127.0.0.1")),
        vmc_port=int(data.get("vmc_port", 39539)),
    )
