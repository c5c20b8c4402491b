from __future__ import annotations

import os
import tempfile

# The service modules read settings at import; point them somewhere harmless.
_TMP = tempfile.mkdtemp(prefix="artvista-tests-")
os.environ["ARTVISTA_ACTIVITY_PATH"] = os.path.join(_TMP, "activity.json")
os.environ["ARTVISTA_MODEL_DIR"] = os.path.join(_TMP, "model")
os.environ["ARTVISTA_SAMPLES_DIR"] = os.path.join(_TMP, "samples")
os.environ["ARTVISTA_AUDIO_DIR"] = os.path.join(_TMP, "audios")
os.environ["ARTVISTA_ONLINE_MODE"] = "offline"
os.environ["CAMERA_ADAPTER"] = "mock"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = os.path.join(_TMP, "missing-credentials.json")

import numpy as np
import pytest

from artvista.adapters.vision.base import VisionAdapter
from artvista.orchestrator.contracts import RankedLabel
from artvista.services.status_store import StatusStore


class FakeClassifier(VisionAdapter):
    def __init__(self, labels: list[RankedLabel] | None = None, error: Exception | None = None):
        self.labels = labels or []
        self.error = error
        self.calls = 0

    def classify(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.labels)


class FakeClock:
    def __init__(self, t: float = 1_700_000_000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture
def frame() -> np.ndarray:
    img = np.zeros((48, 64, 3), dtype=np.uint8)
    img[:, :32] = (200, 40, 40)
    img[:, 32:] = (30, 60, 220)
    return img


@pytest.fixture
def fake_classifier():
    return FakeClassifier


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
