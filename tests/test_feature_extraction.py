import pytest

from conftest import make_face, make_hand, make_pose
from feature_extraction import estimate_head_rotation, extract_frame, extract_hands, normalize_handedness
from settings import Settings
from tracking_types import FrameSample, HandFeatures, HeadRotation, LandmarkPoint, TrackingFrame


def _rotation(face, mirror):
    return estimate_head_rotation(face.points[1], face.points[33], face.points[263], mirror)


def test_centered_face_has_zero_rotation():
    rotation = estimate_head_rotation(
        LandmarkPoint(0.5, 0.5, 0.0), LandmarkPoint(0.45, 0.5, 0.0), LandmarkPoint(0.55, 0.5, 0.0), mirror=False
    )
    assert rotation == HeadRotation(0.0, 0.0, 0.0)


def test_yaw_pitch_and_roll_scaling():
    face = make_face(nose=(0.6, 0.55), left_eye=(0.45, 0.45), right_eye=(0.55, 0.55))
    rotation = _rotation(face, mirror=False)
    assert rotation.y == pytest.approx(6.0)
    assert rotation.x == pytest.approx(3.0)
    assert rotation.z == pytest.approx(45.0)


def test_mirroring_is_an_involution():
    face = make_face(nose=(0.58, 0.47), left_eye=(0.41, 0.44), right_eye=(0.57, 0.49))
    plain = _rotation(face, mirror=False)
    mirrored = _rotation(face, mirror=True)
    assert mirrored.negated() == plain


def test_missing_face_holds_previous_rotation():
    previous = TrackingFrame(rotation=HeadRotation(4.0, -2.5, 1.0), blend_shapes={"jawOpen": 0.4})
    frame, status = extract_frame(FrameSample(timestamp=0.0), previous, Settings(mirror_mode=False))
    assert frame.rotation == previous.rotation
    assert frame.blend_shapes == {}
    assert not status.face_detected


def test_truncated_face_is_not_detected():
    previous = TrackingFrame(rotation=HeadRotation(1.0, 2.0, 3.0))
    sample = FrameSample(timestamp=0.0, face=make_face(count=100))
    frame, status = extract_frame(sample, previous, Settings())
    assert not status.face_detected
    assert frame.rotation == previous.rotation


def test_blend_shapes_are_copied_verbatim():
    face = make_face(blend_shapes={"jawOpen": 0.3, "eyeBlinkLeft": 0.9})
    frame, status = extract_frame(FrameSample(0.0, face=face), TrackingFrame(), Settings())
    assert status.face_detected
    assert frame.blend_shapes == {"jawOpen": 0.3, "eyeBlinkLeft": 0.9}
    face.blend_shapes["jawOpen"] = 1.0
    assert frame.blend_shapes["jawOpen"] == 0.3


def test_face_tracking_disabled_skips_face():
    sample = FrameSample(0.0, face=make_face(nose=(0.9, 0.5)))
    frame, status = extract_frame(sample, TrackingFrame(), Settings(face_tracking_enabled=False))
    assert not status.face_detected
    assert frame.rotation == HeadRotation()


def test_pose_positions_pass_through(pose):
    frame, status = extract_frame(FrameSample(0.0, pose=pose), TrackingFrame(), Settings())
    assert status.pose_detected
    assert frame.pose.shoulders["left"] == pytest.approx((0.6, 0.4))
    assert frame.pose.wrists["right"] == pytest.approx((0.3, 0.3))
    assert frame.pose.detected == {"left": True, "right": True}


def test_low_visibility_pose_side_is_not_detected():
    previous = TrackingFrame()
    previous.pose.shoulders["left"] = (0.1, 0.2)
    sample = FrameSample(0.0, pose=make_pose(visibility=0.2))
    frame, status = extract_frame(sample, previous, Settings(pose_visibility_threshold=0.5))
    assert not status.pose_detected
    assert frame.pose.shoulders["left"] == (0.1, 0.2)


@pytest.mark.parametrize("label,expected", [("Left", "left"), ("RIGHT", "right"), (" left ", "left"), ("both", None)])
def test_normalize_handedness(label, expected):
    assert normalize_handedness(label) == expected


def test_unreported_hand_is_empty_not_stale():
    previous = TrackingFrame()
    previous.hands["right"] = HandFeatures(landmarks=make_hand("Right").points, detected=True)
    sample = FrameSample(0.0, hands=[make_hand("Left")])
    frame, status = extract_frame(sample, previous, Settings())
    assert status.hands_detected == {"left": True, "right": False}
    assert frame.hands["right"].landmarks == []
    assert not frame.hands["right"].detected


def test_short_hand_landmark_set_is_ignored():
    hand = make_hand("Left")
    hand.points = hand.points[:5]
    assert not extract_hands([hand])["left"].detected
