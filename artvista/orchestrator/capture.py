import threading
from artvista.orchestrator.contracts import CaptureOutcome, Frame
from artvista.orchestrator.errors import PredictionUnavailableError


class CaptureFlow:
    """
    One capture, end to end:
      predict -> tracker.start_viewing(label) -> describe(label)

    Every capture takes a new generation number. If a newer capture started
    while this one was predicting, the result is returned stale=True and
    neither the tracker nor the latest result is touched (last write wins).
    """

    def __init__(self, orchestrator, tracker, describer, status_store):
        self.orchestrator = orchestrator
        self.tracker = tracker
        self.describer = describer
        self.status = status_store
        self._lock = threading.Lock()
        self._generation = 0
        self.latest: CaptureOutcome | None = None

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, gen: int) -> bool:
        return gen == self._generation

    def capture(self, frame: Frame, is_online: bool) -> CaptureOutcome:
        gen = self._begin()
        self.status.set_busy(True)
        try:
            try:
                prediction = self.orchestrator.predict(frame, is_online)
            except PredictionUnavailableError as e:
                msg = str(e) or "Unknown prediction error"
                outcome = CaptureOutcome(ok=False, description=f"Prediction failed: {msg}",
                                         error=msg, error_code=e.code)
                with self._lock:
                    if not self._is_current(gen):
                        outcome.stale = True
                        return outcome
                    self._commit(outcome)
                return outcome

            with self._lock:
                if not self._is_current(gen):
                    self.status.log(f"capture: discarding stale result {prediction.label}")
                    return CaptureOutcome(ok=True, prediction=prediction, stale=True)
                self.tracker.start_viewing(prediction.label)

            description = self.describer.describe(prediction.label, is_online)
            outcome = CaptureOutcome(ok=True, prediction=prediction, description=description)
            with self._lock:
                if not self._is_current(gen):
                    outcome.stale = True
                    return outcome
                self._commit(outcome)
            return outcome
        finally:
            self.status.set_busy(False)

    def _commit(self, outcome: CaptureOutcome):
        self.latest = outcome
        self.status.last_prediction = outcome.prediction
        self.status.last_description = outcome.description
        self.status.last_error = outcome.error
