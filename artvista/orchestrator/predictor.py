import time
from artvista.orchestrator.contracts import Err, Frame, Ok, Prediction
from artvista.orchestrator.errors import PredictionUnavailableError
from artvista.orchestrator.reweight import reweight


class Orchestrator:
    """
    Chooses between the remote and the local classifier for one frame.

      online:  remote -> artwork re-weighting -> top label   (source="remote")
               any remote failure -> local                    (source="local")
      offline: local                                          (source="local")
      local fails too -> PredictionUnavailableError

    Starting a tracker session for the result is the caller's job.
    """

    def __init__(self, remote, local, status_store):
        self.remote = remote
        self.local = local
        self.status = status_store

    def predict(self, frame: Frame, is_online: bool) -> Prediction:
        t0 = time.time()

        if is_online:
            result = self.remote.try_classify(frame)
            if isinstance(result, Ok) and result.labels:
                ranked = reweight(result.labels)
                top = ranked[0]
                dt = int((time.time() - t0) * 1000)
                self.status.log(f"predict: remote → {top.description} ({top.score:.2f}) dt={dt}ms")
                return Prediction(label=top.description, score=top.score, source="remote")
            reason = f"{type(result.error).__name__}: {result.error}" if isinstance(result, Err) else "no labels"
            self.status.log(f"predict: remote failed ({reason}), falling back to local")
        else:
            self.status.log("predict: offline, using local model")

        result = self.local.try_classify(frame)
        if isinstance(result, Err):
            self.status.log(f"predict: local failed ({type(result.error).__name__}: {result.error})")
            raise PredictionUnavailableError(str(result.error)) from result.error

        if not result.labels:
            raise PredictionUnavailableError("No labels returned from local model")

        top = result.labels[0]
        dt = int((time.time() - t0) * 1000)
        self.status.log(f"predict: local → {top.description} ({top.score:.2f}) dt={dt}ms")
        return Prediction(label=top.description, score=top.score, source="local")
