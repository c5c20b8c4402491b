import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from artvista.services.activity_store import ActivityRecord, ActivitySnapshot, ActivityStore, LastViewed


@dataclass(frozen=True)
class ActiveSession:
    item: str
    start_ts: int  # ms


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class UsageTracker:
    """
    Idle <-> Active(item, start_ts) timer over an ActivityStore.

    Only completed start/stop pairs add time. start/stop are serialized with a
    lock because FastAPI runs sync endpoints on a thread pool.
    """

    def __init__(self, store: ActivityStore, status_store, clock: Callable[[], float] = time.time):
        self.store = store
        self.status = status_store
        self._clock = clock
        self._lock = threading.RLock()
        self._active: Optional[ActiveSession] = None
        self._subscribers: list[Callable[[ActivitySnapshot], None]] = []

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def active(self) -> Optional[ActiveSession]:
        return self._active

    def subscribe(self, callback: Callable[[ActivitySnapshot], None]):
        self._subscribers.append(callback)

    def start_viewing(self, item: str):
        with self._lock:
            if self._active and self._active.item == item:
                return
            if self._active:
                self.stop_viewing()

            now = self._now_ms()
            self._active = ActiveSession(item=item, start_ts=now)
            s = self.store.read()
            s.last_viewed = LastViewed(item=item, ts=now)
            s.activities.setdefault(item, ActivityRecord(last_ts=now))
            self.store.write(s)
            self.status.log(f"tracker: start {item}")

    def stop_viewing(self):
        with self._lock:
            if self._active is None:
                return
            session, self._active = self._active, None

            now = self._now_ms()
            seconds = max(0, _round_half_up((now - session.start_ts) / 1000))
            s = self.store.read()
            s.total_seconds += seconds
            entry = s.activities.get(session.item) or ActivityRecord(last_ts=now)
            entry.total_seconds += seconds
            entry.last_ts = now
            entry.views += 1
            s.activities[session.item] = entry
            s.last_viewed = LastViewed(item=session.item, ts=now)
            self.store.write(s)
            self.status.log(f"tracker: stop {session.item} +{seconds}s")

        for cb in list(self._subscribers):
            try:
                cb(s)
            except Exception as e:
                self.status.log(f"tracker: subscriber error {type(e).__name__}: {e}")

    def get_activity(self) -> ActivitySnapshot:
        return self.store.read()

    def reset(self):
        with self._lock:
            self._active = None
            self.store.clear()
            self.status.log("tracker: reset")


def format_seconds(sec: int) -> str:
    sec = int(sec or 0)
    h, rem = divmod(sec, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"
