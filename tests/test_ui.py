from history import DebugStats
from pipeline import TrackingState, advance
from settings import Settings
from tracking_types import DetectionStatus, FrameSample
from ui import status_lines


def test_status_lines_basic():
    stats = DebugStats()
    stats.record_tick(DetectionStatus(face_detected=True), now=0.0)
    lines = status_lines(stats, Settings(show_fps=True), True, 0.5)
    assert lines[0] == "Tracking: running"
    assert "Face: yes" in lines[1]
    assert "FPS: 0" in lines
    assert "Mic: 0.50" in lines


def test_debug_lines_include_rotation_and_weights():
    result = advance(TrackingState(), FrameSample(0.0), Settings(), 0.0, 101.5)
    lines = status_lines(DebugStats(), Settings(debug_mode=True, show_fps=False), False, None, result)
    assert any(line.startswith("Head:") for line in lines)
    assert any("aa=0.00" in line for line in lines)
