from abc import ABC, abstractmethod
from artvista.orchestrator.contracts import Frame

class CameraAdapter(ABC):
    @abstractmethod
    def capture_frame(self) -> Frame | None:
        """Capture one RGB frame. Returns None on failure."""
        ...
