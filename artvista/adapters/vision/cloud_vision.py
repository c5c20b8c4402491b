"""
Google Cloud Vision images:annotate — label detection + object localization.
Used by the proxy only; the client never talks to Google directly.
"""
import httpx
from artvista.orchestrator.errors import RemoteError

VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"
MAX_RESULTS = 10


def build_request(content_b64: str, max_results: int = MAX_RESULTS) -> dict:
    return {
        "requests": [{
            "image": {"content": content_b64},
            "features": [
                {"type": "LABEL_DETECTION", "maxResults": max_results},
                {"type": "OBJECT_LOCALIZATION", "maxResults": max_results},
            ],
        }]
    }


def merge_annotations(response: dict) -> list[dict]:
    """labelAnnotations + localizedObjectAnnotations -> [{description, score, type}]"""
    labels = [
        {"description": a.get("description", ""), "score": float(a.get("score", 0.0)), "type": "label"}
        for a in response.get("labelAnnotations") or []
    ]
    objects = [
        {"description": o.get("name", ""), "score": float(o.get("score", 0.0)), "type": "object"}
        for o in response.get("localizedObjectAnnotations") or []
    ]
    return [l for l in labels + objects if l["description"]]


class CloudVision:
    def __init__(self, status_store, timeout: float = 15.0, client: httpx.Client | None = None,
                 url: str = VISION_API_URL):
        self.status = status_store
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)

    def annotate(self, content_b64: str, token: str) -> list[dict]:
        try:
            resp = self._client.post(
                self.url,
                json=build_request(content_b64),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"Google Vision API request failed: {e}") from e

        if not resp.is_success:
            self.status.log(f"cloud_vision: HTTP {resp.status_code} — {resp.text[:300]}")
            raise RemoteError(f"Google Vision API error: {resp.status_code} - {resp.text[:300]}")

        try:
            first = resp.json()["responses"][0]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RemoteError("Invalid response format from Vision API") from e
        if not isinstance(first, dict):
            raise RemoteError("Invalid response format from Vision API")
        err = first.get("error")
        if err:
            msg = err.get("message", err) if isinstance(err, dict) else err
            raise RemoteError(f"Google Vision API error: {msg}")

        try:
            merged = merge_annotations(first)
        except (TypeError, ValueError, AttributeError) as e:
            raise RemoteError("Invalid annotation format from Vision API") from e
        self.status.log(f"cloud_vision: {len(merged)} annotations")
        return merged
