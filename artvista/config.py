import os
from dataclasses import dataclass
from pathlib import Path

ASSETS_DIR = Path(__file__).resolve().parent / "assets"

DEFAULT_LABELS = ("Mona Lisa", "Starry Night", "The Scream")


def _env_flag(name: str, default: bool = False) -> bool:
    v = os.environ.get(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str, default: str = "") -> str:
    v = os.environ.get(name)
    return v.strip() if v is not None else default


def _env_float(name: str, default: float) -> float:
    v = _env_str(name)
    return float(v) if v else default


def _env_int(name: str, default: int) -> int:
    v = _env_str(name)
    return int(v) if v else default


@dataclass(frozen=True)
class Settings:
    proxy_url: str = "http://127.0.0.1:3000"
    vision_timeout_s: float = 15.0
    max_labels: int = 10

    model_dir: Path = ASSETS_DIR / "model"
    model_file: str = "model.onnx"
    labels: tuple[str, ...] = DEFAULT_LABELS

    stories_dir: Path = ASSETS_DIR / "stories"
    audio_dir: Path = ASSETS_DIR / "audios"
    activity_path: Path = Path.home() / ".artvista" / "activity.json"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout_s: float = 20.0

    online_mode: str = "auto"  # auto | online | offline
    admin_password: str = "artmuseum123"

    credentials_path: Path = Path("google-credentials.json")
    cache_tokens: bool = True

    tts_voice: str = "en-US-AriaNeural"
    camera_adapter: str = "cv2"  # cv2 | mock
    camera_index: int = 0
    samples_dir: Path = ASSETS_DIR / "samples"

    @property
    def model_path(self) -> Path:
        return self.model_dir / self.model_file


def settings_from_env() -> Settings:
    d = Settings()
    labels = _env_str("ARTVISTA_LABELS")
    return Settings(
        proxy_url=_env_str("ARTVISTA_PROXY_URL", d.proxy_url).rstrip("/"),
        vision_timeout_s=_env_float("ARTVISTA_VISION_TIMEOUT", d.vision_timeout_s),
        max_labels=_env_int("ARTVISTA_MAX_LABELS", d.max_labels),
        model_dir=Path(_env_str("ARTVISTA_MODEL_DIR") or d.model_dir),
        model_file=_env_str("ARTVISTA_MODEL_FILE", d.model_file),
        labels=tuple(s.strip() for s in labels.split(",") if s.strip()) if labels else d.labels,
        stories_dir=Path(_env_str("ARTVISTA_STORIES_DIR") or d.stories_dir),
        audio_dir=Path(_env_str("ARTVISTA_AUDIO_DIR") or d.audio_dir),
        activity_path=Path(_env_str("ARTVISTA_ACTIVITY_PATH") or d.activity_path).expanduser(),
        gemini_api_key=_env_str("GEMINI_API_KEY"),
        gemini_model=_env_str("GEMINI_MODEL", d.gemini_model),
        gemini_timeout_s=_env_float("ARTVISTA_GEMINI_TIMEOUT", d.gemini_timeout_s),
        online_mode=_env_str("ARTVISTA_ONLINE_MODE", d.online_mode).lower(),
        admin_password=_env_str("ARTVISTA_ADMIN_PASSWORD", d.admin_password),
        credentials_path=Path(_env_str("GOOGLE_APPLICATION_CREDENTIALS") or d.credentials_path),
        cache_tokens=_env_flag("ARTVISTA_CACHE_TOKENS", d.cache_tokens),
        tts_voice=_env_str("ARTVISTA_TTS_VOICE", d.tts_voice),
        camera_adapter=_env_str("CAMERA_ADAPTER", d.camera_adapter).lower(),
        camera_index=_env_int("CAMERA_INDEX", d.camera_index),
        samples_dir=Path(_env_str("ARTVISTA_SAMPLES_DIR") or d.samples_dir),
    )
