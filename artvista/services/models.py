from pydantic import BaseModel
from typing import Literal, Optional

# ── Proxy ──────────────────────────────────────────────────────────────────

class VisionRequest(BaseModel):
    image: Optional[str] = None  # base64 JPEG/PNG, data URL prefix allowed

class VisionLabel(BaseModel):
    description: str
    score: float
    type: Literal["label", "object"]

class VisionResponse(BaseModel):
    labels: list[VisionLabel]

class StoryRequest(BaseModel):
    title: Optional[str] = None

class StoryResponse(BaseModel):
    text: str

# ── Explorer API ───────────────────────────────────────────────────────────

class PredictionOut(BaseModel):
    label: str
    score: float
    source: Literal["remote", "local"]

class CaptureRequest(BaseModel):
    image: Optional[str] = None    # omit to capture from the server camera
    online: Optional[bool] = None  # omit to use the connectivity probe

class CaptureResponse(BaseModel):
    ok: bool
    prediction: Optional[PredictionOut] = None
    description: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    stale: bool = False

class NarrateRequest(BaseModel):
    online: Optional[bool] = None

class NarrateResponse(BaseModel):
    ok: bool
    playing: bool
    label: Optional[str] = None
    mode: Optional[Literal["speech", "audio"]] = None
    error: Optional[str] = None

class StatusResponse(BaseModel):
    busy: bool
    online: Optional[bool] = None
    prediction: Optional[PredictionOut] = None
    description: Optional[str] = None
    last_error: Optional[str] = None
    narrating: bool = False
    model_loaded: bool = False
    logs: list[str]

class ActivityItem(BaseModel):
    title: str
    total_seconds: int
    total_formatted: str
    last_ts: int
    views: int

class LastViewedOut(BaseModel):
    title: str
    ts: int

class ActivityResponse(BaseModel):
    last_viewed: Optional[LastViewedOut] = None
    total_seconds: int
    total_formatted: str
    active: Optional[str] = None
    activities: list[ActivityItem]
