"""
Online/offline signal.
ARTVISTA_ONLINE_MODE: online | offline force the answer; auto probes the proxy.
"""
import httpx


class Connectivity:
    def __init__(self, status_store, proxy_url: str, mode: str = "auto", timeout: float = 1.0,
                 client: httpx.Client | None = None):
        self.status = status_store
        self.mode = mode
        self.health_url = f"{proxy_url.rstrip('/')}/health"
        self._client = client or httpx.Client(timeout=timeout)
        self._last: bool | None = None

    def is_online(self) -> bool:
        if self.mode == "online":
            online = True
        elif self.mode == "offline":
            online = False
        else:
            try:
                online = self._client.get(self.health_url).is_success
            except httpx.HTTPError:
                online = False
        if online != self._last:
            self.status.log(f"connectivity: {'online' if online else 'offline'} (mode={self.mode})")
            self._last = online
        self.status.online = online
        return online
