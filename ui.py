from typing import List, Optional

import cv2

from history import DebugStats, EventLog
from pipeline import TickResult
from settings import Settings


def _flag(value: bool) -> str:
    return "yes" if value else "no"


def status_lines(
    stats: DebugStats,
    settings: Settings,
    tracking: bool,
    mic_level: Optional[float],
    result: Optional[TickResult] = None,
) -> List[str]:
    status = stats.last_status
    lines = [
        f"Tracking: {'running' if tracking else 'stopped'}",
        f"Face: {_flag(status.face_detected)}  Pose: {_flag(status.pose_detected)}",
        f"Hands: L {_flag(status.hands_detected['left'])}  R {_flag(status.hands_detected['right'])}",
    ]
    if settings.show_fps:
        lines.append(f"FPS: {stats.fps}")
    if mic_level is not None:
        lines.append(f"Mic: {mic_level:.2f}")
    if settings.debug_mode and result is not None:
        rot = result.state.frame.rotation
        lines.append(f"Head: p {rot.x:+.1f} y {rot.y:+.1f} r {rot.z:+.1f}")
        weights = result.expressions.as_rig_map()
        lines.append(" ".join(f"{k}={v:.2f}" for k, v in sorted(weights.items())))
        lines.append(f"Frames: {stats.frame_count}")
    if stats.last_error:
        lines.append(f"Error: {stats.last_error}")
    return lines


def log_lines(log: EventLog, count: int = 5) -> List[str]:
    return [f"[{entry.level}] {entry.message}" for entry in log.recent(count)]


def draw_status_panel(frame, lines, origin=(10, 30)) -> None:
    x, y = origin
    for line in lines:
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)
        y += 24
