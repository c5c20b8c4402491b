from __future__ import annotations

import pytest

from artvista.orchestrator.capture import CaptureFlow
from artvista.orchestrator.contracts import Prediction, RankedLabel
from artvista.orchestrator.errors import (
    AuthError, EmptyResultError, InferenceError, ModelNotLoadedError,
    PredictionUnavailableError, RemoteError,
)
from artvista.orchestrator.predictor import Orchestrator
from artvista.services.activity_store import ActivityStore
from artvista.services.description import DEFAULT_DESCRIPTION, DescriptionResolver
from artvista.services.tracker import UsageTracker

LOCAL_LABELS = [RankedLabel("Mona Lisa", 0.7), RankedLabel("Starry Night", 0.2), RankedLabel("The Scream", 0.1)]


def test_online_uses_remote_with_reweighting(status, frame, fake_classifier) -> None:
    remote = fake_classifier([RankedLabel("painting", 0.9), RankedLabel("cat", 0.95)])
    local = fake_classifier(LOCAL_LABELS)
    p = Orchestrator(remote, local, status).predict(frame, is_online=True)
    assert p == Prediction(label="painting", score=1.0, source="remote")
    assert local.calls == 0


def test_remote_score_is_post_reweight_top(status, frame, fake_classifier) -> None:
    remote = fake_classifier([RankedLabel("Dog", 0.8), RankedLabel("Portrait", 0.7)])
    p = Orchestrator(remote, fake_classifier(LOCAL_LABELS), status).predict(frame, True)
    assert p.label == "Portrait"
    assert p.score == pytest.approx(0.84)


@pytest.mark.parametrize("error", [
    AuthError("Authentication failed: bad key"),
    RemoteError("Vision AI API request failed: HTTP 502"),
    EmptyResultError("No labels returned from Vision AI"),
])
def test_remote_failure_falls_back_to_local(status, frame, fake_classifier, error) -> None:
    remote = fake_classifier(error=error)
    local = fake_classifier(LOCAL_LABELS)
    p = Orchestrator(remote, local, status).predict(frame, True)
    assert p == Prediction(label="Mona Lisa", score=0.7, source="local")
    assert remote.calls == 1 and local.calls == 1


def test_remote_returning_nothing_falls_back(status, frame, fake_classifier) -> None:
    p = Orchestrator(fake_classifier([]), fake_classifier(LOCAL_LABELS), status).predict(frame, True)
    assert p.source == "local"


def test_offline_skips_remote(status, frame, fake_classifier) -> None:
    remote = fake_classifier([RankedLabel("painting", 0.99)])
    p = Orchestrator(remote, fake_classifier(LOCAL_LABELS), status).predict(frame, is_online=False)
    assert p.source == "local"
    assert remote.calls == 0


def test_both_failing_raises_with_local_message(status, frame, fake_classifier) -> None:
    remote = fake_classifier(error=RemoteError("upstream down"))
    local = fake_classifier(error=ModelNotLoadedError("Model not loaded yet!"))
    with pytest.raises(PredictionUnavailableError, match="Model not loaded yet!") as exc:
        Orchestrator(remote, local, status).predict(frame, True)
    assert isinstance(exc.value.__cause__, ModelNotLoadedError)


def test_orchestrator_recovers_after_failure(status, frame, fake_classifier) -> None:
    local = fake_classifier(error=InferenceError("boom"))
    orch = Orchestrator(fake_classifier(error=RemoteError("x")), local, status)
    with pytest.raises(PredictionUnavailableError):
        orch.predict(frame, True)
    local.error = None
    local.labels = LOCAL_LABELS
    assert orch.predict(frame, True).label == "Mona Lisa"


# ── CaptureFlow ────────────────────────────────────────────────────────────

@pytest.fixture
def stories(tmp_path):
    d = tmp_path / "stories"
    d.mkdir()
    (d / "mona_lisa.txt").write_text("Leonardo's portrait.", encoding="utf-8")
    return d


@pytest.fixture
def tracker(tmp_path, status, clock):
    return UsageTracker(ActivityStore(status, tmp_path / "activity.json"), status, clock=clock)


def test_capture_starts_tracking_and_describes(status, frame, fake_classifier, tracker, stories) -> None:
    orch = Orchestrator(fake_classifier(error=RemoteError("x")), fake_classifier(LOCAL_LABELS), status)
    flow = CaptureFlow(orch, tracker, DescriptionResolver(status, stories), status)

    outcome = flow.capture(frame, is_online=False)

    assert outcome.ok and not outcome.stale
    assert outcome.prediction == Prediction("Mona Lisa", 0.7, "local")
    assert outcome.description == "Leonardo's portrait."
    assert tracker.active.item == "Mona Lisa"
    assert flow.latest is outcome
    assert status.last_prediction == outcome.prediction
    assert not status.busy


def test_failed_capture_starts_no_session(status, frame, fake_classifier, tracker, stories) -> None:
    orch = Orchestrator(fake_classifier(error=AuthError("a")), fake_classifier(error=InferenceError("resize failed")), status)
    flow = CaptureFlow(orch, tracker, DescriptionResolver(status, stories), status)

    outcome = flow.capture(frame, is_online=True)

    assert not outcome.ok
    assert outcome.error == "resize failed"
    assert outcome.error_code == PredictionUnavailableError.code
    assert outcome.description == "Prediction failed: resize failed"
    assert tracker.active is None
    assert tracker.get_activity().activities == {}
    assert status.last_error == "resize failed"


def test_capture_after_failure_works(status, frame, fake_classifier, tracker, stories) -> None:
    local = fake_classifier(error=InferenceError("boom"))
    flow = CaptureFlow(Orchestrator(fake_classifier(), local, status), tracker,
                       DescriptionResolver(status, stories), status)
    assert not flow.capture(frame, False).ok
    local.error = None
    local.labels = [RankedLabel("Unknown Work", 0.6)]
    outcome = flow.capture(frame, False)
    assert outcome.ok
    assert outcome.description == DEFAULT_DESCRIPTION
    assert status.last_error is None


def test_stale_capture_is_discarded(status, frame, fake_classifier, tracker, stories) -> None:
    describer = DescriptionResolver(status, stories)

    class SlowThenFast:
        """First predict starts a second capture before returning."""
        def __init__(self):
            self.flow = None
            self.calls = 0

        def predict(self, frame, is_online):
            self.calls += 1
            if self.calls == 1:
                self.flow.capture(frame, is_online)
                return Prediction("The Scream", 0.5, "local")
            return Prediction("Mona Lisa", 0.9, "local")

    orch = SlowThenFast()
    flow = CaptureFlow(orch, tracker, describer, status)
    orch.flow = flow

    outcome = flow.capture(frame, False)

    assert outcome.stale
    assert outcome.prediction.label == "The Scream"
    assert flow.latest.prediction.label == "Mona Lisa"
    assert tracker.active.item == "Mona Lisa"
    assert "The Scream" not in tracker.get_activity().activities
