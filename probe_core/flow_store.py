"""
In-memory store for pending authorization flows (session id -> state, code_verifier).
Used between GET / and /callback. Keyed per browser session so concurrent sign-ins
do not overwrite each other; TTL to avoid unbounded growth.
"""
import threading
import time
from dataclasses import dataclass, field

# TTL seconds for a pending flow (time for the user to finish signing in)
FLOW_TTL = 600


@dataclass
class PendingFlow:
    state: str
    code_verifier: str | None = None
    created_at: float = field(default_factory=time.monotonic)

    def expired(self) -> bool:
        return (time.monotonic() - self.created_at) > FLOW_TTL


class FlowStore:
    """Thread-safe map of pending flows. Each flow can be taken once."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingFlow] = {}
        self._lock = threading.Lock()

    def put(self, session_id: str, flow: PendingFlow) -> None:
        with self._lock:
            self._clean_expired()
            self._pending[session_id] = flow

    def pop(self, session_id: str | None) -> PendingFlow | None:
        if not session_id:
            return None
        with self._lock:
            flow = self._pending.pop(session_id, None)
        if flow is None or flow.expired():
            return None
        return flow

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _clean_expired(self) -> None:
        expired = [s for s, f in self._pending.items() if f.expired()]
        for s in expired:
            del self._pending[s]
