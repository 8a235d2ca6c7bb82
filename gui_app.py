import logging
import sys
from typing import Optional

import cv2
from PySide6 import QtCore, QtGui, QtWidgets

from camera import CameraStream
from detectors import FaceDetector, HandDetector, PoseDetector
from history import DebugStats
from microphone import MicrophoneLevel
from retarget import apply_model_transform
from scheduler import FrameScheduler
from settings import AppConfig
from ui import status_lines
from visualization import draw_tracking
from vmc_rig import VmcRig

TOGGLES = [
    ("face_tracking_enabled", "Face tracking"),
    ("body_tracking_enabled", "Body tracking"),
    ("hand_tracking_enabled", "Hand tracking"),
    ("lip_sync_enabled", "Lip sync"),
    ("blink_enabled", "Auto blink"),
    ("idle_animation_enabled", "Idle breathing"),
    ("mirror_mode", "Mirror"),
    ("debug_mode", "Debug overlay"),
]


class TrackingPage(QtWidgets.QWidget):
    def __init__(self, config: AppConfig, parent=None):
        super().__init__(parent)
        self._config = config
        self._setup_ui()
        self._setup_runtime()

    def _setup_ui(self):
        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        self.video_label = QtWidgets.QLabel("Camera feed")
        self.video_label.setAlignment(QtCore.Qt.AlignCenter)
        self.video_label.setMinimumSize(720, 480)
        self.video_label.setStyleSheet("background:#101214; border-radius:12px;")

        panel = QtWidgets.QVBoxLayout()
        panel.setSpacing(10)

        self.track_button = QtWidgets.QPushButton("Start tracking")
        self.track_button.clicked.connect(self._toggle_tracking)
        self.mic_button = QtWidgets.QPushButton("Enable microphone")
        self.mic_button.clicked.connect(self._toggle_mic)
        panel.addWidget(self.track_button)
        panel.addWidget(self.mic_button)

        self.checkboxes = {}
        for name, label in TOGGLES:
            box = QtWidgets.QCheckBox(label)
            box.setChecked(getattr(self._config.settings, name))
            box.toggled.connect(lambda checked, n=name: self._set_flag(n, checked))
            panel.addWidget(box)
            self.checkboxes[name] = box

        self.smoothing_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.smoothing_slider.setRange(0, 95)
        self.smoothing_slider.setValue(int(self._config.settings.tracking_smoothing * 100))
        self.smoothing_slider.valueChanged.connect(self._set_smoothing)
        panel.addWidget(QtWidgets.QLabel("Smoothing"))
        panel.addWidget(self.smoothing_slider)

        self.status_label = QtWidgets.QLabel("")
        self.status_label.setStyleSheet("font-size:13px;color:#e6e6e6;")
        panel.addWidget(self.status_label)
        panel.addStretch(1)

        layout.addWidget(self.video_label, 1)
        layout.addLayout(panel)

    def _setup_runtime(self):
        self.camera: Optional[CameraStream] = None
        self.mic = MicrophoneLevel()
        self.stats = DebugStats()
        self.rig = VmcRig(self._config.vmc_host, self._config.vmc_port)
        self.scheduler = FrameScheduler(
            None,
            self.rig,
            {"face": FaceDetector(), "pose": PoseDetector(), "hand": HandDetector()},
            settings=self._config.settings,
            transform=self._config.transform,
            mic=self.mic,
            stats=self.stats,
        )

        # One tick per refresh of the widget.
        self.timer = QtCore.QTimer(self)
        self.timer.timeout.connect(self._update_frame)
        self.timer.start(16)

    def _set_flag(self, name: str, checked: bool):
        self.scheduler.update_settings(self.scheduler.settings.replace(**{name: checked}))

    def _set_smoothing(self, value: int):
        self.scheduler.update_settings(self.scheduler.settings.replace(tracking_smoothing=value / 100.0))

    def _toggle_tracking(self):
        if self.scheduler.running:
            self.stop_tracking()
            return
        if self.camera is None:
            self.camera = CameraStream(camera_index=self._config.camera_index)
            if not self.camera.open():
                self.camera = None
                self.status_label.setText("Camera error")
                return
        self.scheduler.source = self.camera
        if self.scheduler.start():
            self.track_button.setText("Stop tracking")

    def stop_tracking(self):
        self.scheduler.stop()
        if self.camera is not None:
            self.camera.release()
            self.camera = None
        self.scheduler.source = None
        self.track_button.setText("Start tracking")

    def _toggle_mic(self):
        enabled = self.mic.toggle()
        self.mic_button.setText("Disable microphone" if enabled else "Enable microphone")

    def _update_frame(self):
        result = self.scheduler.tick()
        if not self.scheduler.running:
            apply_model_transform(self.rig, self.scheduler.transform)
            self.rig.flush()
        mic_level = self.mic.level if self.mic.running else None
        lines = status_lines(self.stats, self.scheduler.settings, self.scheduler.running, mic_level, result)
        self.status_label.setText("\n".join(lines))
        if result is None or self.scheduler.last_image is None:
            return

        frame = self.scheduler.last_image.copy()
        if self.scheduler.settings.debug_mode:
            draw_tracking(frame, result)
        if self.scheduler.settings.mirror_mode:
            frame = cv2.flip(frame, 1)

        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        h, w, ch = frame_rgb.shape
        image = QtGui.QImage(frame_rgb.data, w, h, ch * w, QtGui.QImage.Format_RGB888)
        pixmap = QtGui.QPixmap.fromImage(image)
        self.video_label.setPixmap(pixmap.scaled(self.video_label.size(), QtCore.Qt.KeepAspectRatio))

    def shutdown(self):
        self.timer.stop()
        self.stop_tracking()
        self.mic.stop()


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config: AppConfig):
        super().__init__()
        self.setWindowTitle("Avatar Retarget")
        self.resize(1280, 720)
        self.setStyleSheet("QMainWindow{background:#0f1113;} QCheckBox,QLabel{color:#e6e6e6;}")
        self.page = TrackingPage(config)
        self.setCentralWidget(self.page)

    def closeEvent(self, event):
        self.page.shutdown()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QtWidgets.QApplication(sys.argv)
    window = MainWindow(AppConfig())
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
