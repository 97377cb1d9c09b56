import secrets
import threading
import time
from typing import Any


class SessionStore:
    """Server-side session storage keyed by an opaque cookie value.

    Holds the issued token so browser requests without an Authorization header
    can still be authenticated. One instance lives on ``app.state`` and is
    injected into request handling; entries expire after ``ttl_seconds`` and are
    pruned on access.
    """

    def __init__(self, ttl_seconds: int = 86400):
        self.ttl_seconds = int(ttl_seconds)
        self._lock = threading.Lock()
        self._sessions: dict[str, dict[str, Any]] = {}

    def create(self, *, token: str, user_id: int) -> str:
        session_id = secrets.token_urlsafe(32)
        now = time.time()
        with self._lock:
            self._prune(now)
            self._sessions[session_id] = {
                "token": token,
                "user_id": int(user_id),
                "expires_at": now + self.ttl_seconds,
            }
        return session_id

    def get_token(self, session_id: str | None) -> str | None:
        if not session_id:
            return None
        now = time.time()
        with self._lock:
            s = self._sessions.get(session_id)
            if not s:
                return None
            if s["expires_at"] <= now:
                self._sessions.pop(session_id, None)
                return None
            return s["token"]

    def discard(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._prune(time.time())
            return len(self._sessions)

    def _prune(self, now: float) -> None:
        expired = [sid for sid, s in self._sessions.items() if s["expires_at"] <= now]
        for sid in expired:
            del self._sessions[sid]
