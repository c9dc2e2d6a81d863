"""In-memory session store: one media asset, its latest result, and its chat log."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .config import get_config
from .errors import SessionNotFoundError
from .media import MediaAsset
from .models.analysis import AnalysisResult, ChatMessage

logger = logging.getLogger(__name__)


@dataclass
class MediaSession:
    """Working state for a single selected media asset."""

    session_id: str
    asset: MediaAsset
    variant: str
    result: AnalysisResult | None = None
    last_error: dict | None = None
    chat: list[ChatMessage] = field(default_factory=list)
    busy: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    last_active: datetime = field(default_factory=datetime.now)

    @property
    def turn_count(self) -> int:
        return sum(1 for m in self.chat if m.role == "user")

    def touch(self) -> None:
        self.last_active = datetime.now()

    def set_result(self, result: AnalysisResult) -> None:
        """Replace (never merge) the analysis result and clear the last error."""
        self.result = result
        self.last_error = None
        self.touch()

    def set_error(self, error: dict) -> None:
        """Record the latest analysis error, replacing any previous one."""
        self.last_error = error
        self.touch()


class SessionStore:
    """Process-wide session registry with TTL eviction."""

    def __init__(self) -> None:
        self._sessions: dict[str, MediaSession] = {}

    def create(self, asset: MediaAsset, variant: str = "") -> MediaSession:
        """Create a new session, evicting expired ones first."""
        self._evict_expired()
        cfg = get_config()
        if len(self._sessions) >= cfg.max_sessions:
            idle = [sid for sid, s in self._sessions.items() if not s.busy]
            if idle:
                oldest_id = min(idle, key=lambda k: self._sessions[k].last_active)
                del self._sessions[oldest_id]
            else:
                logger.warning("All %d sessions busy, exceeding max_sessions", len(self._sessions))

        session = MediaSession(
            session_id=uuid.uuid4().hex[:12],
            asset=asset,
            variant=variant or cfg.default_variant,
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> MediaSession | None:
        self._evict_expired()
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> MediaSession:
        """Like ``get`` but raises SessionNotFoundError."""
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def replace_media(self, session_id: str, asset: MediaAsset) -> MediaSession:
        """Swap in a new asset; result, last error and chat log start over."""
        session = self.require(session_id)
        session.asset = asset
        session.result = None
        session.last_error = None
        session.chat = []
        session.touch()
        return session

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def _evict_expired(self) -> int:
        """Remove sessions that have exceeded the configured timeout. Returns count evicted."""
        timeout = timedelta(hours=get_config().session_timeout_hours)
        now = datetime.now()
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_active > timeout and not s.busy
        ]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    @property
    def count(self) -> int:
        """Number of active sessions."""
        return len(self._sessions)


session_store = SessionStore()
