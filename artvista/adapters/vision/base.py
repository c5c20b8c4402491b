from artvista.orchestrator.contracts import ClassifyResult, Err, Frame, Ok, RankedLabel
from artvista.orchestrator.errors import ClassifierError

MAX_LABELS = 10


class VisionAdapter:
    name = "vision"

    def classify(self, frame: Frame) -> list[RankedLabel]:
        """Return labels ranked by descending score, at most MAX_LABELS of them."""
        raise NotImplementedError

    def try_classify(self, frame: Frame) -> ClassifyResult:
        """Tagged variant of classify() used by the orchestrator's fallback branch."""
        try:
            return Ok(self.classify(frame))
        except ClassifierError as e:
            return Err(e)


def rank(labels: list[RankedLabel], limit: int = MAX_LABELS) -> list[RankedLabel]:
    return sorted(labels, key=lambda l: l.score, reverse=True)[:limit]
