import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from tracking_types import DetectionStatus


@dataclass
class LogEntry:
    timestamp: float
    level: str
    message: str


class EventLog(logging.Handler):
    """Keeps the most recent log records for the debug overlay."""

    def __init__(self, maxlen: int = 50):
        super().__init__()
        self._buffer: Deque[LogEntry] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        self._buffer.append(LogEntry(record.created, record.levelname, record.getMessage()))

    def recent(self, count: int) -> List[LogEntry]:
        if count <= 0:
            return []
        return list(self._buffer)[-count:]

    def clear(self) -> None:
        self._buffer.clear()


@dataclass
class DebugStats:
    fps: int = 0
    frame_count: int = 0
    last_error: Optional[str] = None
    last_status: DetectionStatus = field(default_factory=DetectionStatus)
    _window_frames: int = 0
    _window_start: Optional[float] = None

    def record_tick(self, status: Optional[DetectionStatus], now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        if self._window_start is None:
            self._window_start = now
        self._window_frames += 1
        if now - self._window_start >= 1.0:
            self.fps = self._window_frames
            self.frame_count += self._window_frames
            self._window_frames = 0
            self._window_start = now
        # Last known status is for display only; the pipeline never reads it.
        if status is not None:
            self.last_status = status

    def record_error(self, message: str) -> None:
        self.last_error = message

    def reset(self) -> None:
        self.fps = 0
        self.frame_count = 0
        self.last_error = None
        self.last_status = DetectionStatus()
        self._window_frames = 0
        self._window_start = None
