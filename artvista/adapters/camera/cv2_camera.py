"""
OpenCV webcam capture adapter.
CAMERA_INDEX env var (default 0) selects the webcam device.
"""
import threading
import cv2
from artvista.adapters.camera.base import CameraAdapter
from artvista.orchestrator.contracts import Frame

class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int = 0):
        self.status = status_store
        self._index = index
        self._cap = None
        self._lock = threading.Lock()

    def _open(self):
        if self._cap is None or not self._cap.isOpened():
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.log(f"cv2_camera: failed to open device {self._index}")

    def capture_frame(self) -> Frame | None:
        with self._lock:
            self._open()
            if self._cap is None or not self._cap.isOpened():
                return None
            ret, bgr = self._cap.read()
        if not ret or bgr is None:
            self.status.log("cv2_camera: frame capture failed")
            return None
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    def release(self):
        with self._lock:
            if self._cap and self._cap.isOpened():
                self._cap.release()
            self._cap = None
