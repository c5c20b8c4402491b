"""
Durable key-value store for viewing statistics.

One JSON document, same shape the admin view has always read:
  {
    "lastViewed":   {"title": str, "ts": ms} | null,
    "totalSeconds": int,
    "activities":   {title: {"totalSeconds": int, "lastTs": ms, "views": int}}
  }

A missing or corrupt document reads as the empty snapshot. Write failures are
logged and swallowed so tracking never blocks capture.
"""
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class ActivityRecord:
    total_seconds: int = 0
    last_ts: int = 0
    views: int = 0

    def to_dict(self) -> dict:
        return {"totalSeconds": self.total_seconds, "lastTs": self.last_ts, "views": self.views}

    @classmethod
    def from_dict(cls, d: dict) -> "ActivityRecord":
        if not isinstance(d, dict):
            raise ValueError(f"activity record must be an object, got {d!r}")
        return cls(
            total_seconds=max(0, int(d.get("totalSeconds") or 0)),
            last_ts=int(d.get("lastTs") or 0),
            views=max(0, int(d.get("views") or 0)),
        )


@dataclass
class LastViewed:
    item: str
    ts: int


@dataclass
class ActivitySnapshot:
    last_viewed: Optional[LastViewed] = None
    total_seconds: int = 0
    activities: dict[str, ActivityRecord] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "lastViewed": {"title": self.last_viewed.item, "ts": self.last_viewed.ts} if self.last_viewed else None,
            "totalSeconds": self.total_seconds,
            "activities": {k: v.to_dict() for k, v in self.activities.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ActivitySnapshot":
        lv = d.get("lastViewed")
        activities = d.get("activities") or {}
        if not isinstance(activities, dict):
            raise ValueError("activities must be an object")
        return cls(
            last_viewed=LastViewed(item=str(lv["title"]), ts=int(lv["ts"])) if lv else None,
            total_seconds=max(0, int(d.get("totalSeconds") or 0)),
            activities={str(k): ActivityRecord.from_dict(v) for k, v in activities.items()},
        )


class ActivityStore:
    def __init__(self, status_store, path: Path):
        self.status = status_store
        self.path = Path(path)

    def read(self) -> ActivitySnapshot:
        if not self.path.is_file():
            return ActivitySnapshot()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("snapshot must be an object")
            return ActivitySnapshot.from_dict(raw)
        except (OSError, ValueError, TypeError, KeyError, AttributeError, OverflowError) as e:
            self.status.log(f"activity_store: read failed, using empty snapshot: {e}")
            return ActivitySnapshot()

    def write(self, snapshot: ActivitySnapshot) -> bool:
        tmp = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".activity-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2, allow_nan=False)
            os.replace(tmp, self.path)
            tmp = None
            return True
        except (OSError, TypeError, ValueError) as e:
            self.status.log(f"activity_store: write failed: {e}")
            return False
        finally:
            if tmp is not None:
                Path(tmp).unlink(missing_ok=True)

    def clear(self):
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            self.status.log(f"activity_store: clear failed: {e}")
