from dataclasses import dataclass
from typing import Literal, Optional, Union

import numpy as np

from artvista.orchestrator.errors import ClassifierError

# HxWx3 uint8 RGB pixel buffer, owned by the capture that produced it
Frame = np.ndarray

SourceName = Literal["remote", "local"]
KindName = Literal["label", "object"]

DEFAULT_INPUT_SIZE = 224


@dataclass
class RankedLabel:
    description: str
    score: float               # [0, 1]
    kind: KindName = "label"


@dataclass(frozen=True)
class Prediction:
    label: str
    score: float
    source: SourceName


@dataclass(frozen=True)
class ModelDescriptor:
    input_height: int = DEFAULT_INPUT_SIZE
    input_width: int = DEFAULT_INPUT_SIZE
    labels: tuple[str, ...] = ()
    channels_first: bool = False
    # When the graph already ends in a softmax we must not apply a second one
    outputs_probabilities: bool = False

    def label_for(self, index: int) -> str:
        if 0 <= index < len(self.labels):
            return self.labels[index]
        return f"class-{index}"


@dataclass(frozen=True)
class Ok:
    labels: list[RankedLabel]


@dataclass(frozen=True)
class Err:
    error: ClassifierError


ClassifyResult = Union[Ok, Err]


@dataclass
class CaptureOutcome:
    ok: bool
    prediction: Optional[Prediction] = None
    description: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    stale: bool = False
