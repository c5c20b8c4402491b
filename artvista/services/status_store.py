import threading
import time
from dataclasses import dataclass, field
from typing import Optional, List
from artvista.orchestrator.contracts import Prediction

MAX_LOG_LINES = 200

@dataclass
class StatusStore:
    busy: bool = False
    online: Optional[bool] = None
    last_prediction: Optional[Prediction] = None
    last_description: Optional[str] = None
    last_error: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_busy(self, v: bool):
        self.busy = v

    def log(self, msg: str):
        line = f"{time.strftime('%H:%M:%S')} {msg}"
        with self._lock:
            self.logs.append(line)
            if len(self.logs) > MAX_LOG_LINES:
                self.logs = self.logs[-MAX_LOG_LINES:]
