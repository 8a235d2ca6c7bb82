"""Frame scheduler: owns the tracking loop and the carried-over state.

One tick runs to completion before the next starts: read a camera frame,
run the enabled detectors, advance the pure pipeline, write the rig.
"""

import logging
import time
from typing import Callable, Dict, Optional, Set

from errors import DetectionFailure
from history import DebugStats
from pipeline import TickResult, TrackingState, advance
from retarget import apply_retarget
from rig import RigTarget
from settings import ModelTransform, Settings
from tracking_types import FrameSample

logger = logging.getLogger(__name__)

STOPPED = "STOPPED"
RUNNING = "RUNNING"

MODALITY_SETTINGS = {
    "face": "face_tracking_enabled",
    "pose": "body_tracking_enabled",
    "hand": "hand_tracking_enabled",
}


class FrameScheduler:
    def __init__(
        self,
        source,
        rig: RigTarget,
        detectors: Dict[str, object],
        settings: Optional[Settings] = None,
        transform: Optional[ModelTransform] = None,
        mic=None,
        stats: Optional[DebugStats] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.rig = rig
        self.detectors = detectors
        self.settings = settings or Settings()
        self.transform = transform or ModelTransform()
        self.mic = mic
        self.stats = stats or DebugStats()
        self.state = TrackingState()
        self.phase = STOPPED
        self._clock = clock
        self._monotonic = monotonic
        self._last_timestamp_ms = -1
        self._failing: Set[str] = set()
        self.last_image = None

    @property
    def running(self) -> bool:
        return self.phase == RUNNING

    def start(self) -> bool:
        if self.phase == RUNNING:
            return True
        if self.source is None or not self.source.is_opened():
            logger.warning("Cannot start tracking: no frame source")
            return False
        try:
            for detector in self.detectors.values():
                detector.open()
        except Exception:
            self._close_detectors()
            raise
        self.phase = RUNNING
        logger.info("Tracking started")
        return True

    def stop(self) -> None:
        if self.phase == STOPPED:
            return
        self.phase = STOPPED
        self._close_detectors()
        self._failing.clear()
        logger.info("Tracking stopped")

    def toggle(self) -> bool:
        if self.running:
            self.stop()
            return False
        return self.start()

    def update_settings(self, settings: Settings) -> None:
        # Snapshots are swapped between ticks only.
        self.settings = settings

    def update_transform(self, transform: ModelTransform) -> None:
        self.transform = transform

    def tick(self) -> Optional[TickResult]:
        if self.phase != RUNNING:
            return None
        frame = self.source.read()
        if not frame.ok:
            return None
        self.last_image = frame.frame

        settings = self.settings
        sample = self._detect(frame.frame, frame.timestamp, settings)
        mic_level = self.mic.level if self.mic is not None else 0.0
        result = advance(self.state, sample, settings, mic_level, self._clock())
        self.state = result.state

        tracked = result.state.frame
        apply_retarget(
            self.rig,
            tracked.rotation,
            result.expressions,
            result.look_target,
            tracked.pose,
            tracked.hands,
            result.breathing,
            settings,
            self.transform,
        )
        flush = getattr(self.rig, "flush", None)
        if flush is not None:
            flush()
        self.stats.record_tick(result.state.status, self._monotonic())
        return result

    def run(self, refresh_hz: float = 60.0, max_ticks: Optional[int] = None, sleep: Callable[[float], None] = time.sleep) -> int:
        interval = 1.0 / refresh_hz
        ticks = 0
        # The running flag is checked at every iteration boundary.
        while self.phase == RUNNING:
            started = self._monotonic()
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            remaining = interval - (self._monotonic() - started)
            if remaining > 0:
                sleep(remaining)
        return ticks

    def _detect(self, frame, timestamp: float, settings: Settings) -> FrameSample:
        # VIDEO-mode detectors need strictly increasing timestamps.
        timestamp_ms = max(int(timestamp * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        sample = FrameSample(timestamp=timestamp)
        for modality, setting in MODALITY_SETTINGS.items():
            detector = self.detectors.get(modality)
            if detector is None or not getattr(settings, setting):
                continue
            try:
                result = detector.detect(frame, timestamp_ms)
            except DetectionFailure as exc:
                self._report_failure(modality, exc)
                continue
            if modality in self._failing:
                self._failing.discard(modality)
                logger.info("%s detector recovered", modality)
            if modality == "face":
                sample.face = result
            elif modality == "pose":
                sample.pose = result
            else:
                sample.hands = result or []
        return sample

    def _report_failure(self, modality: str, exc: DetectionFailure) -> None:
        self.stats.record_error(str(exc))
        if modality not in self._failing:
            self._failing.add(modality)
            logger.warning("%s", exc)

    def _close_detectors(self) -> None:
        for detector in self.detectors.values():
            detector.close()
