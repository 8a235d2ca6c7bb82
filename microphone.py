"""Microphone amplitude sampler.

Runs on the PortAudio callback thread and publishes one float in [0, 1].
The tracking loop reads ``level`` without waiting; a stopped or missing
device simply reads as 0.
"""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

logger = logging.getLogger(__name__)


def block_level(block: np.ndarray, gain: float = 4.0) -> float:
    if block.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(np.square(block, dtype=np.float64))))
    return max(0.0, min(1.0, rms * gain))


class MicrophoneLevel:
    def __init__(self, samplerate: int = 16000, block_duration: float = 0.03, gain: float = 4.0, device=None):
        self.samplerate = samplerate
        self.block_duration = block_duration
        self.gain = gain
        self.device = device
        self._stream: Optional[sd.InputStream] = None
        self._running = False
        self._level = 0.0

    @property
    def level(self) -> float:
        return self._level if self._running else 0.0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        if self._stream is not None:
            return True
        blocksize = max(64, int(self.samplerate * self.block_duration))
        try:
            self._stream = sd.InputStream(
                samplerate=self.samplerate,
                channels=1,
                dtype="float32",
                blocksize=blocksize,
                device=self.device,
                callback=self._callback,
            )
            self._running = True
            self._stream.start()
        except sd.PortAudioError as exc:
            logger.error("Microphone unavailable: %s", exc)
            self._running = False
            self._stream = None
            return False
        logger.info("Microphone sampling started")
        return True

    def stop(self) -> None:
        self._running = False
        if self._stream is None:
            return
        self._stream.stop()
        self._stream.close()
        self._stream = None
        self._level = 0.0
        logger.info("Microphone sampling stopped")

    def toggle(self) -> bool:
        if self._running:
            self.stop()
            return False
        return self.start()

    def _callback(self, indata, frames, time_info, status):
        if not self._running:
            raise sd.CallbackStop
        if status:
            logger.warning("Audio status: %s", status)
        self._level = block_level(indata, self.gain)
