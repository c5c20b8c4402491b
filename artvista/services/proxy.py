"""
Stateless backend proxy.

  POST /vision-ai   frame -> Cloud Vision labels + objects (service-account auth)
  POST /gemini      title -> local story text
  GET  /health
  /audios/*         pre-recorded narration audio (read-only)

Run: uvicorn artvista.services.proxy:app --port 3000
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

from artvista.adapters.camera.frames import strip_data_url
from artvista.adapters.vision.cloud_vision import CloudVision, MAX_RESULTS
from artvista.config import settings_from_env
from artvista.orchestrator.errors import AuthError, RemoteError
from artvista.services.description import STORY_NOT_FOUND, read_story
from artvista.services.google_auth import ServiceAccountTokenProvider
from artvista.services.models import StoryRequest, StoryResponse, VisionRequest, VisionResponse
from artvista.services.status_store import StatusStore

load_dotenv(override=False)

settings = settings_from_env()
status = StatusStore()

token_provider = ServiceAccountTokenProvider(status, settings.credentials_path, cache=settings.cache_tokens)
vision = CloudVision(status, timeout=settings.vision_timeout_s)

app = FastAPI(title="artvista proxy")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/health")
def health():
    return {"ok": True, "credentials": settings.credentials_path.is_file(), "logs": status.logs[-20:]}


@app.post("/vision-ai", response_model=VisionResponse)
def vision_ai(req: VisionRequest):
    status.log("VISION_AI request")
    if not req.image:
        status.log("VISION_AI: no image provided")
        return _error(400, "No image provided")

    try:
        token = token_provider.token()
    except AuthError as e:
        status.log(f"VISION_AI: auth error: {e}")
        return _error(401, f"Authentication failed: {e}")

    try:
        labels = vision.annotate(strip_data_url(req.image), token)
    except RemoteError as e:
        status.log(f"VISION_AI: upstream error: {e}")
        return _error(502, str(e))

    labels.sort(key=lambda l: l["score"], reverse=True)
    labels = labels[:MAX_RESULTS]
    if labels:
        status.log(f"VISION_AI: top={labels[0]['description']} ({labels[0]['score']:.2f}) n={len(labels)}")
    return {"labels": labels}


@app.post("/gemini", response_model=StoryResponse)
def gemini(req: StoryRequest):
    if not req.title:
        return _error(400, "No title provided")
    try:
        text = read_story(settings.stories_dir, req.title)
    except (OSError, UnicodeDecodeError) as e:
        status.log(f"GEMINI: story read error: {e}")
        return _error(500, str(e))
    return {"text": text or STORY_NOT_FOUND}


app.mount("/audios", StaticFiles(directory=str(settings.audio_dir), check_dir=False), name="audios")
