import os
import time
import uuid
import logging
import threading
from typing import Callable, Dict, Optional

from bid_server.models import Session

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s %(message)s'
)
logger = logging.getLogger(__name__)


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise RuntimeError(f"{name} must be positive")
    return value

SESSION_TIMEOUT = _positive_int_env("SESSION_TIMEOUT", 10 * 60)   # seconds
CLEANUP_INTERVAL = _positive_int_env("CLEANUP_INTERVAL", 60)      # seconds


class SessionManager:
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._sessions: Dict[str, Session] = {}       # key -> Session
        self._user_sessions: Dict[int, str] = {}      # user_id -> key
        self._lock = threading.Lock()
        self._last_cleanup = clock()
        self._cleanup_lock = threading.Lock()
        self._sweep_thread: Optional[threading.Thread] = None

    def login(self, user_id: int) -> str:
        """
        Start a new session for user_id, replacing any session the user
        already holds. Returns the new session key.
        """
        with self._lock:
            old_key = self._user_sessions.pop(user_id, None)
            if old_key is not None:
                self._sessions.pop(old_key, None)
            key = uuid.uuid4().hex
            while key in self._sessions:
                key = uuid.uuid4().hex
            self._sessions[key] = Session(user_id=user_id,
                                          expires_at=self._clock() + SESSION_TIMEOUT)
            self._user_sessions[user_id] = key
        logger.info(f"User {user_id} logged in (session {key[:6]}..., replaced={old_key is not None})")
        self._schedule_cleanup()
        return key

    def validate(self, key: str) -> Optional[int]:
        """Return the user id for a live session key, None otherwise."""
        with self._lock:
            session = self._sessions.get(key)
            if session is not None and session.expires_at > self._clock():
                return session.user_id
        self._schedule_cleanup()
        return None

    def get_session(self, key: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(key)
            return session.copy() if session is not None else None

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def cleanup_expired(self) -> int:
        """Drop every expired session from both maps. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, s in self._sessions.items() if s.expires_at <= now]
            for key in expired:
                session = self._sessions.pop(key)
                if self._user_sessions.get(session.user_id) == key:
                    del self._user_sessions[session.user_id]
        if expired:
            logger.info(f"Removed {len(expired)} expired sessions")
        return len(expired)

    def _schedule_cleanup(self) -> None:
        # at most one sweep per CLEANUP_INTERVAL, run off the caller's thread
        now = self._clock()
        with self._cleanup_lock:
            if now - self._last_cleanup < CLEANUP_INTERVAL:
                return
            self._last_cleanup = now
        self._sweep_thread = threading.Thread(
            target=self.cleanup_expired,
            name="session-sweep",
            daemon=True
        )
        self._sweep_thread.start()
