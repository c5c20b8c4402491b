"""
Remote classifier: Cloud Vision labels + localized objects via the ArtVista proxy.

The frame is JPEG-encoded and posted to POST /vision-ai; the proxy holds the
service-account credentials and answers {labels: [{description, score, type}]}.
"""
import base64
import httpx
from artvista.adapters.camera.frames import encode_jpeg
from artvista.adapters.vision.base import VisionAdapter, MAX_LABELS, rank
from artvista.orchestrator.contracts import Frame, RankedLabel
from artvista.orchestrator.errors import AuthError, EmptyResultError, RemoteError

_KINDS = ("label", "object")


class RemoteVision(VisionAdapter):
    name = "remote"

    def __init__(self, status_store, proxy_url: str = "http://127.0.0.1:3000", timeout: float = 15.0,
                 max_labels: int = MAX_LABELS, client: httpx.Client | None = None):
        self.status = status_store
        self.url = f"{proxy_url.rstrip('/')}/vision-ai"
        self.max_labels = max_labels
        self._client = client or httpx.Client(timeout=timeout)

    def classify(self, frame: Frame) -> list[RankedLabel]:
        try:
            jpeg = encode_jpeg(frame)
        except Exception as e:
            raise RemoteError(f"could not encode frame: {e}") from e
        b64 = base64.standard_b64encode(jpeg).decode("utf-8")

        self.status.log(f"remote_vision: POST {self.url} ({len(jpeg)} bytes)")
        try:
            resp = self._client.post(self.url, json={"image": f"data:image/jpeg;base64,{b64}"})
        except httpx.TimeoutException as e:
            raise RemoteError(f"Vision AI request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise RemoteError(f"Vision AI request failed: {e}") from e

        if resp.status_code == 401:
            raise AuthError(_error_text(resp))
        if not resp.is_success:
            raise RemoteError(f"Vision AI API request failed: HTTP {resp.status_code} {_error_text(resp)}")

        labels = self._parse(resp)
        if not labels:
            raise EmptyResultError("No labels returned from Vision AI")
        ranked = rank(labels, self.max_labels)
        self.status.log(f"remote_vision: top={ranked[0].description} ({ranked[0].score:.2f}) n={len(ranked)}")
        return ranked

    def _parse(self, resp: httpx.Response) -> list[RankedLabel]:
        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteError("malformed Vision AI response (not JSON)") from e
        items = data.get("labels") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise RemoteError("malformed Vision AI response (no labels list)")

        out = []
        for item in items:
            try:
                description = str(item["description"])
                score = float(item["score"])
            except (KeyError, TypeError, ValueError) as e:
                raise RemoteError(f"malformed Vision AI label: {item!r}") from e
            kind = item.get("type", "label")
            out.append(RankedLabel(
                description=description,
                score=min(1.0, max(0.0, score)),
                kind=kind if kind in _KINDS else "label",
            ))
        return out


def _error_text(resp: httpx.Response) -> str:
    try:
        body = resp.json()
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
    except ValueError:
        pass
    return resp.text[:300]
