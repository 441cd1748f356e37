import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from invoice_analytics.core import schemas
from invoice_analytics.core.config import settings

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChatSessionStore:
    """
    Chat sessions kept in process memory.

    Lost on restart. Sessions idle for longer than max_age are removed by evict_expired().
    """

    def __init__(self, max_age: timedelta = timedelta(hours=24)):
        self.max_age = max_age
        self._sessions: Dict[str, schemas.ChatSession] = {}

    def create(self) -> schemas.ChatSession:
        now = _now()
        session = schemas.ChatSession(
            id=secrets.token_hex(12), history=[], createdAt=now, updatedAt=now
        )
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[schemas.ChatSession]:
        return self._sessions.get(session_id)

    def append(
        self,
        session: schemas.ChatSession,
        role: schemas.ChatRole,
        content: str,
        statistics=None,
    ) -> schemas.ChatHistoryEntry:
        entry = schemas.ChatHistoryEntry(
            role=role, content=content, timestamp=_now(), statistics=statistics
        )
        session.history.append(entry)
        session.updatedAt = entry.timestamp
        return entry

    def clear(self, session: schemas.ChatSession) -> None:
        session.history = []
        session.updatedAt = _now()

    def evict_expired(self, now: Optional[datetime] = None) -> List[str]:
        now = now or _now()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now - session.updatedAt > self.max_age
        ]
        for session_id in expired:
            del self._sessions[session_id]
            logger.info(f"Deleted inactive session: {session_id}")
        return expired

    def __len__(self) -> int:
        return len(self._sessions)


session_store = ChatSessionStore(max_age=timedelta(hours=settings.SESSION_MAX_AGE_HOURS))


def get_session_store() -> ChatSessionStore:
    return session_store
