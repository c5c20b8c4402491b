"""
Service-account bearer tokens for Cloud Vision (OAuth2 JWT-bearer grant).

Reads the service-account JSON (client_email, private_key), signs an RS256
assertion and exchanges it at the token endpoint. With cache=True the token is
reused until shortly before it expires; with cache=False every call re-mints.
"""
import json
import math
import threading
import time
from pathlib import Path

import httpx
import jwt

from artvista.orchestrator.errors import AuthError

TOKEN_URL = "https://oauth2.googleapis.com/token"
VISION_SCOPE = "https://www.googleapis.com/auth/cloud-vision"
GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_LIFETIME_S = 3600
REFRESH_MARGIN_S = 60


class ServiceAccountTokenProvider:
    def __init__(self, status_store, credentials_path: Path, scope: str = VISION_SCOPE,
                 token_url: str = TOKEN_URL, cache: bool = True, timeout: float = 10.0,
                 client: httpx.Client | None = None, clock=time.time):
        self.status = status_store
        self.credentials_path = Path(credentials_path)
        self.scope = scope
        self.token_url = token_url
        self.cache = cache
        self._client = client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._credentials: dict | None = None
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def _load_credentials(self) -> dict:
        if self._credentials is None:
            try:
                creds = json.loads(self.credentials_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise AuthError(f"cannot read service account file {self.credentials_path}: {e}") from e
            if not creds.get("client_email") or not creds.get("private_key"):
                raise AuthError("service account file lacks client_email/private_key")
            self._credentials = creds
        return self._credentials

    def _assertion(self, now: int) -> str:
        creds = self._load_credentials()
        claims = {
            "iss": creds["client_email"],
            "scope": self.scope,
            "aud": self.token_url,
            "iat": now,
            "exp": now + TOKEN_LIFETIME_S,
        }
        try:
            return jwt.encode(claims, creds["private_key"], algorithm="RS256")
        except Exception as e:
            raise AuthError(f"could not sign JWT: {e}") from e

    def token(self) -> str:
        with self._lock:
            now = self._clock()
            if self.cache and self._token and now < self._expires_at - REFRESH_MARGIN_S:
                return self._token

            assertion = self._assertion(int(now))
            try:
                resp = self._client.post(
                    self.token_url,
                    data={"grant_type": GRANT_TYPE, "assertion": assertion},
                )
            except httpx.HTTPError as e:
                raise AuthError(f"Token request failed: {e}") from e
            if not resp.is_success:
                raise AuthError(f"Token request failed: {resp.text[:300]}")
            try:
                body = resp.json()
            except ValueError as e:
                raise AuthError("Token response is not JSON") from e
            if not isinstance(body, dict):
                raise AuthError("Token response is not an object")
            access_token = body.get("access_token")
            if not isinstance(access_token, str) or not access_token:
                raise AuthError("No access token in response")

            try:
                lifetime = float(body.get("expires_in", TOKEN_LIFETIME_S))
            except (TypeError, ValueError):
                self.status.log(f"google_auth: bad expires_in {body.get('expires_in')!r}, assuming {TOKEN_LIFETIME_S}s")
                lifetime = TOKEN_LIFETIME_S
            if not math.isfinite(lifetime):
                lifetime = TOKEN_LIFETIME_S

            self._token = access_token
            self._expires_at = now + lifetime
            self.status.log("google_auth: minted access token")
            return access_token
