import argparse
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from camera import CameraStream
from detectors import FaceDetector, HandDetector, PoseDetector
from history import DebugStats, EventLog
from microphone import MicrophoneLevel
from retarget import apply_model_transform
from scheduler import FrameScheduler
from settings import AppConfig, load_settings
from ui import draw_status_panel, log_lines, status_lines
from visualization import draw_tracking
from vmc_rig import VmcRig

logger = logging.getLogger(__name__)

# cv2.waitKeyEx codes for arrow keys (Windows, then X11).
KEY_UP = (2490368, 65362)
KEY_DOWN = (2621440, 65364)
KEY_LEFT = (2424832, 65361)
KEY_RIGHT = (2555904, 65363)

# GTK and Qt HighGUI backends report Shift in bit 16 of the X11 keysym.
SHIFT_FLAG = 0x10000

MOVE_STEP = 0.02
MOVE_STEP_LARGE = 0.1
SCALE_STEP = 0.05
SCALE_STEP_LARGE = 0.2
ROTATE_STEP = 10.0

MOVE_DIRECTIONS = (
    (KEY_UP, 0, 1),
    (KEY_DOWN, 0, -1),
    (KEY_LEFT, -1, 0),
    (KEY_RIGHT, 1, 0),
)


def arrow_move(key: int) -> Optional[Tuple[float, float]]:
    """Return the (dx, dy) nudge for an arrow key, or None."""
    for codes, dx, dy in MOVE_DIRECTIONS:
        if key in codes:
            return dx * MOVE_STEP, dy * MOVE_STEP
        # Windows codes already use the high bits, so only X11 keysyms carry the flag.
        if any(code < SHIFT_FLAG and key == code | SHIFT_FLAG for code in codes):
            return dx * MOVE_STEP_LARGE, dy * MOVE_STEP_LARGE
    return None


def handle_key(key: int, scheduler: FrameScheduler, mic: MicrophoneLevel) -> bool:
    """Apply one keyboard shortcut. Returns False when the user quits."""
    if key < 0:
        return True
    char = key & 0xFF
    transform = scheduler.transform
    if char == ord("q"):
        return False
    move = arrow_move(key)
    if move is not None:
        transform = transform.moved(dx=move[0], dy=move[1])
    # "+" and "_" are the shifted keys, so they take the larger step.
    elif char == ord("="):
        transform = transform.rescaled(SCALE_STEP)
    elif char == ord("+"):
        transform = transform.rescaled(SCALE_STEP_LARGE)
    elif char == ord("-"):
        transform = transform.rescaled(-SCALE_STEP)
    elif char == ord("_"):
        transform = transform.rescaled(-SCALE_STEP_LARGE)
    elif char == ord("r"):
        transform = transform.rotated(ROTATE_STEP)
    elif char == ord("R"):
        transform = transform.rotated(-ROTATE_STEP)
    elif char in (ord("t"), ord("T")):
        scheduler.toggle()
    elif char in (ord("m"), ord("M")):
        mic.toggle()
    elif char in (ord("d"), ord("D")):
        scheduler.update_settings(scheduler.settings.toggled("debug_mode"))
    scheduler.update_transform(transform)
    return True


def main():
    parser = argparse.ArgumentParser(description="Drive a VMC avatar from the webcam and microphone.")
    parser.add_argument("--config", help="YAML settings file")
    parser.add_argument("--camera", type=int, help="Camera index (overrides config)")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    event_log = EventLog()
    logging.getLogger().addHandler(event_log)

    config = load_settings(args.config) if args.config else AppConfig()
    camera_index = args.camera if args.camera is not None else config.camera_index

    window_name = "Avatar Retarget"
    camera = CameraStream(camera_index=camera_index)
    if not camera.open():
        return

    rig = VmcRig(config.vmc_host, config.vmc_port)
    mic = MicrophoneLevel()
    stats = DebugStats()
    scheduler = FrameScheduler(
        camera,
        rig,
        {"face": FaceDetector(), "pose": PoseDetector(), "hand": HandDetector()},
        settings=config.settings,
        transform=config.transform,
        mic=mic,
        stats=stats,
    )
    try:
        scheduler.start()
        cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
        while True:
            if cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1:
                break
            result = None
            if scheduler.running:
                result = scheduler.tick()
                image = scheduler.last_image
            else:
                # Root transform still follows the shortcuts while tracking is off.
                apply_model_transform(rig, scheduler.transform)
                rig.flush()
                cam_frame = camera.read()
                image = cam_frame.frame if cam_frame.ok else None

            if image is None:
                image = np.zeros((480, 640, 3), dtype=np.uint8)
            else:
                image = image.copy()
                if scheduler.settings.debug_mode:
                    draw_tracking(image, result)
                if scheduler.settings.mirror_mode:
                    image = cv2.flip(image, 1)

            mic_level = mic.level if mic.running else None
            lines = status_lines(stats, scheduler.settings, scheduler.running, mic_level, result)
            if scheduler.settings.debug_mode:
                lines += log_lines(event_log)
            draw_status_panel(image, lines)
            cv2.imshow(window_name, image)

            if not handle_key(cv2.waitKeyEx(1), scheduler, mic):
                break
    finally:
        scheduler.stop()
        mic.stop()
        camera.release()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
