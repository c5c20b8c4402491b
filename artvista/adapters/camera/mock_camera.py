"""Mock camera: serves a random sample image from the samples dir for testing."""
import random
from pathlib import Path
from artvista.adapters.camera.base import CameraAdapter
from artvista.adapters.camera.frames import decode_image
from artvista.orchestrator.contracts import Frame

_EXTS = ("*.jpg", "*.jpeg", "*.png")

class MockCamera(CameraAdapter):
    def __init__(self, status_store, samples_dir: Path):
        self.status = status_store
        self.samples_dir = Path(samples_dir)

    def capture_frame(self) -> Frame | None:
        images = [p for ext in _EXTS for p in self.samples_dir.glob(ext)]
        if not images:
            self.status.log(f"mock_camera: no sample images in {self.samples_dir}")
            return None
        chosen = random.choice(images)
        self.status.log(f"mock_camera: serving {chosen.name}")
        return decode_image(chosen.read_bytes())
