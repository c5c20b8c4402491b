"""
Gemini generateContent client for artwork narratives.
Requires GEMINI_API_KEY; without it the client reports configured=False.
"""
import httpx
from artvista.orchestrator.errors import DescriptionUnavailableError

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_PROMPT = 'Give a museum-style introduction to "{title}" including artist, year, style, and significance.'


def build_prompt(title: str) -> str:
    return _PROMPT.format(title=title)


class GeminiText:
    def __init__(self, status_store, api_key: str, model: str = "gemini-2.0-flash", timeout: float = 20.0,
                 client: httpx.Client | None = None):
        self.status = status_store
        self._api_key = api_key
        self.model = model
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def generate(self, title: str) -> str:
        if not self.configured:
            raise DescriptionUnavailableError("GEMINI_API_KEY not set")

        payload = {"contents": [{"parts": [{"text": build_prompt(title)}]}]}
        try:
            resp = self._client.post(
                GEMINI_API_URL.format(model=self.model),
                params={"key": self._api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise DescriptionUnavailableError(f"gemini request failed: {e}") from e
        if not resp.is_success:
            raise DescriptionUnavailableError(f"gemini HTTP {resp.status_code}: {resp.text[:300]}")

        try:
            text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise DescriptionUnavailableError("gemini response has no text") from e
        if not isinstance(text, str) or not text.strip():
            raise DescriptionUnavailableError("gemini response has empty text")

        self.status.log(f"gemini_text: {len(text)} chars for '{title}'")
        return text.strip()
