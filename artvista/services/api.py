"""
Explorer API: the single-user capture pipeline.

  POST /capture          frame (upload or server camera) -> prediction + description
  POST /narrate          narrate the latest description (toggle)
  POST /narrate/stop
  GET  /status
  GET  /health
  GET  /admin/activity   viewing analytics (X-Admin-Password)
  POST /admin/activity/reset

Run: uvicorn artvista.services.api:app --port 8000
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from artvista.adapters.camera.frames import frame_from_base64
from artvista.adapters.network.connectivity import Connectivity
from artvista.adapters.text.gemini_text import GeminiText
from artvista.adapters.tts.player_local import LocalNarrator
from artvista.adapters.vision.local_model import LocalModel
from artvista.adapters.vision.remote_vision import RemoteVision
from artvista.config import settings_from_env
from artvista.orchestrator import errors
from artvista.orchestrator.capture import CaptureFlow
from artvista.orchestrator.contracts import Prediction
from artvista.orchestrator.predictor import Orchestrator
from artvista.services.activity_store import ActivityStore
from artvista.services.description import DescriptionResolver
from artvista.services.models import (
    ActivityItem, ActivityResponse, CaptureRequest, CaptureResponse, LastViewedOut,
    NarrateRequest, NarrateResponse, PredictionOut, StatusResponse,
)
from artvista.services.status_store import StatusStore
from artvista.services.tracker import UsageTracker, format_seconds

load_dotenv(override=False)

settings = settings_from_env()
status = StatusStore()

remote = RemoteVision(status, proxy_url=settings.proxy_url, timeout=settings.vision_timeout_s,
                      max_labels=settings.max_labels)
local = LocalModel(status, settings.model_path, labels=settings.labels, top_k=settings.max_labels)
orch = Orchestrator(remote=remote, local=local, status_store=status)

tracker = UsageTracker(ActivityStore(status, settings.activity_path), status)
describer = DescriptionResolver(
    status, settings.stories_dir,
    text_service=GeminiText(status, settings.gemini_api_key, settings.gemini_model, settings.gemini_timeout_s),
)
flow = CaptureFlow(orch, tracker, describer, status)
narrator = LocalNarrator(status, settings.audio_dir, voice=settings.tts_voice)
connectivity = Connectivity(status, settings.proxy_url, mode=settings.online_mode)

# Camera: CAMERA_ADAPTER=cv2 (default) | mock
if settings.camera_adapter == "mock":
    from artvista.adapters.camera.mock_camera import MockCamera
    camera = MockCamera(status, settings.samples_dir)
else:
    from artvista.adapters.camera.cv2_camera import CV2Camera
    camera = CV2Camera(status, index=settings.camera_index)
status.log(f"camera: {type(camera).__name__}")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    try:
        local.load()
    except errors.ModelNotLoadedError as e:
        status.log(f"startup: {e}")
    yield
    tracker.stop_viewing()
    narrator.stop()
    if hasattr(camera, "release"):
        camera.release()


app = FastAPI(title="artvista explorer", lifespan=lifespan)


def _prediction_out(p: Optional[Prediction]) -> Optional[PredictionOut]:
    return PredictionOut(label=p.label, score=p.score, source=p.source) if p else None


def _is_online(override: Optional[bool]) -> bool:
    if override is not None:
        status.online = override
        return override
    return connectivity.is_online()


def _admin_ok(password: Optional[str]) -> bool:
    return bool(settings.admin_password) and password == settings.admin_password


@app.get("/status", response_model=StatusResponse)
def get_status():
    current = narrator.current
    return StatusResponse(
        busy=status.busy,
        online=status.online,
        prediction=_prediction_out(status.last_prediction),
        description=status.last_description,
        last_error=status.last_error,
        narrating=bool(current and current.playing),
        model_loaded=local.loaded,
        logs=status.logs,
    )


@app.get("/health")
def health():
    return {
        "api": True,
        "online": connectivity.is_online(),
        "model_loaded": local.loaded,
        "model_backend": local.backend_name,
        "camera": type(camera).__name__,
        "gemini_configured": describer.text_service.configured,
        "stories_dir": settings.stories_dir.is_dir(),
    }


@app.post("/capture", response_model=CaptureResponse)
def capture(req: CaptureRequest):
    if req.image:
        frame = frame_from_base64(req.image)
        if frame is None:
            status.log("CAPTURE: image decode failed")
            return JSONResponse(status_code=400, content={"ok": False, "error": "image decode failed",
                                                          "error_code": errors.ERR_NO_FRAME})
    else:
        frame = camera.capture_frame()
        if frame is None:
            status.log("CAPTURE: camera capture failed")
            return CaptureResponse(ok=False, error="camera capture failed", error_code=errors.ERR_NO_FRAME)

    online = _is_online(req.online)
    status.log(f"CAPTURE: {frame.shape[1]}x{frame.shape[0]} online={online}")
    outcome = flow.capture(frame, online)
    return CaptureResponse(
        ok=outcome.ok,
        prediction=_prediction_out(outcome.prediction),
        description=outcome.description,
        error=outcome.error,
        error_code=outcome.error_code,
        stale=outcome.stale,
    )


@app.post("/narrate", response_model=NarrateResponse)
def narrate(req: NarrateRequest):
    current = narrator.current
    if current is not None and current.playing:
        narrator.stop()
        status.log("NARRATE: stopped")
        return NarrateResponse(ok=True, playing=False, label=current.label)

    latest = flow.latest
    if latest is None or latest.prediction is None or not latest.description:
        return NarrateResponse(ok=False, playing=False, error="nothing to narrate")

    online = _is_online(req.online)
    handle = narrator.narrate(latest.prediction.label, latest.description, online)
    status.log(f"NARRATE: {handle.mode} for {handle.label}")
    return NarrateResponse(ok=True, playing=True, label=handle.label, mode=handle.mode)


@app.post("/narrate/stop", response_model=NarrateResponse)
def narrate_stop():
    narrator.stop()
    return NarrateResponse(ok=True, playing=False)


@app.get("/admin/activity", response_model=ActivityResponse)
def admin_activity(x_admin_password: Optional[str] = Header(default=None)):
    if not _admin_ok(x_admin_password):
        return JSONResponse(status_code=401, content={"error": "Incorrect password"})

    snap = tracker.get_activity()
    items = [
        ActivityItem(
            title=title,
            total_seconds=rec.total_seconds,
            total_formatted=format_seconds(rec.total_seconds),
            last_ts=rec.last_ts,
            views=rec.views,
        )
        for title, rec in snap.activities.items()
    ]
    items.sort(key=lambda i: i.total_seconds, reverse=True)
    lv = snap.last_viewed
    active = tracker.active
    return ActivityResponse(
        last_viewed=LastViewedOut(title=lv.item, ts=lv.ts) if lv else None,
        total_seconds=snap.total_seconds,
        total_formatted=format_seconds(snap.total_seconds),
        active=active.item if active else None,
        activities=items,
    )


@app.post("/admin/activity/reset")
def admin_reset(x_admin_password: Optional[str] = Header(default=None)):
    if not _admin_ok(x_admin_password):
        return JSONResponse(status_code=401, content={"error": "Incorrect password"})
    tracker.reset()
    return {"ok": True}
