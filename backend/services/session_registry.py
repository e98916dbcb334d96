"""
Run Session Registry

Holds one CoachingEngine per live run session, in memory only.

The engine's feedback gate is a read-modify-write on its history, so every
call into a session's engine happens under that session's lock.
"""

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from run_coach import (
    CoachingConfig,
    CoachingEngine,
    CoachingOutput,
    FeedbackHistory,
    RunMetrics,
    RunnerProfile,
    create_coaching_engine,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CoachSession:
    """A live run: its profile, its engine and the lock guarding it."""
    session_id: str
    profile: RunnerProfile
    engine: CoachingEngine
    created_at: datetime
    updates_received: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionRegistry:
    """
    In-memory map of session id -> CoachSession.

    When full, the least recently used session is evicted to make room.
    Looking a session up or feeding it metrics counts as use.
    """

    def __init__(
        self,
        config_factory: Callable[[], CoachingConfig] = CoachingConfig,
        max_sessions: int = 1000
    ):
        self.config_factory = config_factory
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, CoachSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self, profile: RunnerProfile) -> CoachSession:
        """Open a new session with a fresh engine."""
        session = CoachSession(
            session_id=str(uuid.uuid4()),
            profile=profile,
            engine=create_coaching_engine(config=self.config_factory(), clock=_utc_now),
            created_at=_utc_now(),
        )

        with self._lock:
            while len(self._sessions) >= self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.warning(f"Session limit {self.max_sessions} reached, evicted {evicted_id}")
            self._sessions[session.session_id] = session

        logger.info(
            f"Opened session {session.session_id} "
            f"({profile.level.value}, {profile.goal.value}, {profile.typical_pace_sec_per_km}s/km)"
        )
        return session

    def get(self, session_id: str) -> Optional[CoachSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def _touch(self, session_id: str):
        with self._lock:
            if session_id in self._sessions:
                self._sessions.move_to_end(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed:
            logger.info(
                f"Closed session {session_id} after {removed.updates_received} updates, "
                f"{removed.engine.feedbacks_given} feedbacks"
            )
        return removed is not None

    def update(self, session: CoachSession, metrics: RunMetrics) -> Optional[CoachingOutput]:
        """Feed one snapshot to the session's engine."""
        self._touch(session.session_id)
        with session.lock:
            session.updates_received += 1
            return session.engine.update(metrics, session.profile)

    def reset(self, session: CoachSession) -> FeedbackHistory:
        with session.lock:
            session.engine.reset()
            return session.engine.get_history()

    def history(self, session: CoachSession) -> FeedbackHistory:
        with session.lock:
            return session.engine.get_history()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"sessions": len(self._sessions), "max_sessions": self.max_sessions}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
