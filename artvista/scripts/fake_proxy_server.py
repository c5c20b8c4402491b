"""
Fake proxy for developing the Explorer API without Google credentials.

Serves canned /vision-ai labels and local stories on port 3000.
FAKE_VISION_MODE=ok (default) | empty | auth | error picks the /vision-ai reply,
so every fallback branch can be exercised by hand.

Usage:
    python -m artvista.scripts.fake_proxy_server
"""

import os
import random
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from artvista.config import settings_from_env
from artvista.services.description import STORY_NOT_FOUND, read_story

app = FastAPI(title="fake-artvista-proxy")
settings = settings_from_env()

_CANNED = [
    {"description": "Painting", "score": 0.91, "type": "label"},
    {"description": "Mona Lisa", "score": 0.84, "type": "label"},
    {"description": "Picture frame", "score": 0.77, "type": "object"},
    {"description": "Visual arts", "score": 0.73, "type": "label"},
    {"description": "Smile", "score": 0.66, "type": "label"},
]


@app.get("/health")
async def health():
    return {"ok": True, "fake": True}


@app.post("/vision-ai")
async def vision_ai(request: Request):
    body = await request.json()
    if not body.get("image"):
        return JSONResponse(status_code=400, content={"error": "No image provided"})

    mode = os.getenv("FAKE_VISION_MODE", "ok").lower()
    print(f"[proxy] vision-ai mode={mode}")
    if mode == "auth":
        return JSONResponse(status_code=401, content={"error": "Authentication failed: fake"})
    if mode == "error":
        return JSONResponse(status_code=502, content={"error": "Google Vision API error: 503 - fake"})
    if mode == "empty":
        return {"labels": []}

    labels = [dict(l, score=round(min(1.0, l["score"] + random.uniform(-0.05, 0.05)), 3)) for l in _CANNED]
    labels.sort(key=lambda l: l["score"], reverse=True)
    return {"labels": labels}


@app.post("/gemini")
async def gemini(request: Request):
    body = await request.json()
    title = body.get("title")
    if not title:
        return JSONResponse(status_code=400, content={"error": "No title provided"})
    return {"text": read_story(settings.stories_dir, title) or STORY_NOT_FOUND}


if __name__ == "__main__":
    print("Fake proxy starting on http://localhost:3000")
    uvicorn.run(app, host="0.0.0.0", port=3000)
