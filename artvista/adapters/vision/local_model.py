"""
Local image-classification model (offline fallback).

Pipeline:
  1. load(): open model.onnx with ONNX Runtime; if that fails, open the same
     file through OpenCV DNN. The first backend that loads is cached.
  2. Resolve a ModelDescriptor once: model_metadata.json, then the backend's
     declared input shape, then 224x224 NHWC.
  3. classify(): resize (bilinear) -> scale to [0, 1] -> batch -> run ->
     softmax -> top-k labels.

No network. The frame and every intermediate array stay local to the call.
"""
import json
from pathlib import Path

import cv2
import numpy as np

from artvista.adapters.vision.base import VisionAdapter, MAX_LABELS
from artvista.orchestrator.contracts import DEFAULT_INPUT_SIZE, Frame, ModelDescriptor, RankedLabel
from artvista.orchestrator.errors import InferenceError, ModelNotLoadedError

METADATA_FILE = "model_metadata.json"


# ── Backends ────────────────────────────────────────────────────────────────

class OnnxRuntimeBackend:
    name = "onnxruntime"

    def __init__(self, model_path: Path):
        import onnxruntime
        self.session = onnxruntime.InferenceSession(str(model_path), providers=["CPUExecutionProvider"])
        self.input_name = self.session.get_inputs()[0].name

    def input_shape(self) -> list | None:
        return list(self.session.get_inputs()[0].shape)

    def run(self, batch: np.ndarray) -> np.ndarray:
        return self.session.run(None, {self.input_name: batch})[0]


class OpenCVDnnBackend:
    name = "opencv-dnn"

    def __init__(self, model_path: Path):
        self.net = cv2.dnn.readNetFromONNX(str(model_path))
        if self.net.empty():
            raise RuntimeError(f"opencv could not parse {model_path}")

    def input_shape(self) -> list | None:
        # cv2.dnn does not expose the graph input shape
        return None

    def run(self, batch: np.ndarray) -> np.ndarray:
        self.net.setInput(batch)
        return self.net.forward()


DEFAULT_BACKENDS = (OnnxRuntimeBackend, OpenCVDnnBackend)


# ── Helpers ─────────────────────────────────────────────────────────────────

def softmax(logits: np.ndarray) -> np.ndarray:
    z = logits.astype(np.float64) - np.max(logits)
    e = np.exp(z)
    return e / e.sum()


def _shape_from_input(shape: list | None) -> tuple[int, int, bool] | None:
    """Read (H, W, channels_first) from [N,H,W,C] or [N,C,H,W]. None if dynamic."""
    if not shape or len(shape) != 4:
        return None
    dims = [d if isinstance(d, int) and d > 0 else None for d in shape[1:]]
    if dims[0] in (1, 3) and dims[1] and dims[2]:
        return dims[1], dims[2], True
    if dims[2] in (1, 3) and dims[0] and dims[1]:
        return dims[0], dims[1], False
    return None


def resolve_descriptor(metadata: dict, input_shape: list | None, fallback_labels: tuple[str, ...]) -> ModelDescriptor:
    classes = metadata.get("classes") or {}
    if isinstance(classes, dict):
        labels = tuple(classes[k] for k in sorted(classes, key=int))
    else:
        labels = tuple(classes)
    labels = labels or tuple(fallback_labels)
    probs = str(metadata.get("activation", "")).lower() == "softmax"

    size = metadata.get("input_size")
    if size and len(size) == 2:
        layout = str(metadata.get("layout", "nhwc")).lower()
        return ModelDescriptor(int(size[0]), int(size[1]), labels, layout == "nchw", probs)

    introspected = _shape_from_input(input_shape)
    if introspected:
        h, w, channels_first = introspected
        return ModelDescriptor(h, w, labels, channels_first, probs)

    return ModelDescriptor(DEFAULT_INPUT_SIZE, DEFAULT_INPUT_SIZE, labels, False, probs)


# ── Classifier ──────────────────────────────────────────────────────────────

class LocalModel(VisionAdapter):
    """
    In-process classifier. Call load() once at startup; classify() raises
    ModelNotLoadedError until a backend has loaded.
    """
    name = "local"

    def __init__(self, status_store, model_path: Path, labels: tuple[str, ...] = (),
                 top_k: int = MAX_LABELS, backends=DEFAULT_BACKENDS):
        self.status = status_store
        self.model_path = Path(model_path)
        self.fallback_labels = tuple(labels)
        self.top_k = top_k
        self._backends = backends
        self._backend = None
        self.descriptor: ModelDescriptor | None = None

    @property
    def loaded(self) -> bool:
        return self._backend is not None

    @property
    def backend_name(self) -> str | None:
        return self._backend.name if self._backend else None

    def load(self) -> ModelDescriptor:
        if self._backend is not None:
            return self.descriptor

        errors = []
        for factory in self._backends:
            try:
                backend = factory(self.model_path)
            except Exception as e:
                self.status.log(f"local_model: {getattr(factory, 'name', factory)} load failed: {e}")
                errors.append(f"{getattr(factory, 'name', factory)}: {e}")
                continue
            self.descriptor = resolve_descriptor(self._read_metadata(), backend.input_shape(), self.fallback_labels)
            self._backend = backend
            d = self.descriptor
            self.status.log(
                f"local_model: ready via {backend.name} input={d.input_height}x{d.input_width} "
                f"{'nchw' if d.channels_first else 'nhwc'} classes={len(d.labels)}"
            )
            return d

        raise ModelNotLoadedError(f"model failed to load from {self.model_path}: {'; '.join(errors)}")

    def _read_metadata(self) -> dict:
        path = self.model_path.parent / METADATA_FILE
        if not path.is_file():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.status.log(f"local_model: ignoring unreadable {METADATA_FILE}: {e}")
            return {}

    def _prepare(self, frame: Frame) -> np.ndarray:
        d = self.descriptor
        resized = cv2.resize(frame, (d.input_width, d.input_height), interpolation=cv2.INTER_LINEAR)
        x = resized.astype(np.float32) / 255.0
        if d.channels_first:
            x = np.transpose(x, (2, 0, 1))
        return np.ascontiguousarray(x[np.newaxis, ...])

    def classify(self, frame: Frame) -> list[RankedLabel]:
        if not self.loaded:
            raise ModelNotLoadedError("Model not loaded yet!")

        try:
            batch = self._prepare(frame)
            out = self._backend.run(batch)
            if isinstance(out, (list, tuple)):
                out = out[0] if out else None
            if out is None:
                raise InferenceError("Model returned no output")
            logits = np.asarray(out, dtype=np.float64).reshape(-1)
            if logits.size == 0 or not np.all(np.isfinite(logits)):
                raise InferenceError("Unexpected model output format")
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"local inference failed: {e}") from e

        if self.descriptor.outputs_probabilities:
            probs = np.clip(logits, 0.0, 1.0)
        else:
            probs = softmax(logits)

        order = np.argsort(-probs, kind="stable")[: self.top_k]
        ranked = [
            RankedLabel(description=self.descriptor.label_for(int(i)), score=float(probs[i]), kind="label")
            for i in order
        ]
        self.status.log(f"local_model: top={ranked[0].description} ({ranked[0].score:.2f})")
        return ranked
