import pytest

from settings import Settings
from signal_fusion import fuse_expressions, fuse_look_target, fuse_mouth_open, fuse_signals


def test_mouth_open_uses_louder_signal():
    assert fuse_mouth_open(0.2, 0.6, 0.7) == pytest.approx(0.42)
    assert fuse_mouth_open(0.8, 0.1, 0.5) == pytest.approx(0.4)


def test_mouth_open_is_monotonic():
    levels = [0.0, 0.1, 0.25, 0.5, 0.75, 1.0]
    outputs = [fuse_mouth_open(0.05, level, 0.7) for level in levels]
    assert outputs == sorted(outputs)


def test_lip_sync_through_settings():
    weights = fuse_expressions({"jawOpen": 0.2}, 0.6, Settings(lip_sync_sensitivity=0.7))
    assert weights.aa == pytest.approx(0.42)


def test_lip_sync_disabled_leaves_mouth_unwritten():
    weights = fuse_expressions({"jawOpen": 0.9}, 1.0, Settings(lip_sync_enabled=False))
    assert weights.aa is None
    assert "aa" not in weights.as_rig_map()


def test_blink_channels_and_average():
    weights = fuse_expressions({"eyeBlinkLeft": 0.8, "eyeBlinkRight": 0.4}, 0.0, Settings())
    assert weights.blink_left == 0.8
    assert weights.blink_right == 0.4
    assert weights.blink == pytest.approx(0.6)


def test_blink_disabled():
    weights = fuse_expressions({"eyeBlinkLeft": 1.0}, 0.0, Settings(blink_enabled=False))
    assert weights.blink is None and weights.blink_left is None and weights.blink_right is None


def test_smile_and_brows_are_summed_without_clamping():
    shapes = {
        "mouthSmileLeft": 0.7,
        "mouthSmileRight": 0.5,
        "browInnerUp": 0.3,
        "browDownLeft": 0.2,
        "browDownRight": 0.25,
    }
    weights = fuse_expressions(shapes, 0.0, Settings())
    assert weights.happy == pytest.approx(1.2)
    assert weights.surprised == pytest.approx(0.3)
    assert weights.angry == pytest.approx(0.45)


def test_missing_channels_default_to_zero():
    weights = fuse_expressions({}, 0.0, Settings())
    assert weights.as_rig_map() == {
        "blinkLeft": 0.0,
        "blinkRight": 0.0,
        "blink": 0.0,
        "aa": 0.0,
        "happy": 0.0,
        "surprised": 0.0,
        "angry": 0.0,
    }


def test_look_target_uses_left_eye_vertical_channels():
    look = fuse_look_target(
        {"eyeLookInRight": 0.4, "eyeLookInLeft": 0.1, "eyeLookUpLeft": 0.3, "eyeLookDownLeft": 0.05, "eyeLookUpRight": 0.9}
    )
    assert look.x == pytest.approx(0.6)
    assert look.y == pytest.approx(0.5)


def test_fuse_signals_with_no_face_defaults_to_zero():
    weights, look = fuse_signals({}, 0.0, Settings())
    assert weights.aa == 0.0
    assert weights.happy == 0.0
    assert (look.x, look.y) == (0.0, 0.0)
