"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Player starts a session -> engine created with a fresh deck
2. During play:
   - flip / reset / set_difficulty go straight to the engine
   - timed transitions fire through the session's scheduler
3. Player ends the session (or it goes stale) -> timers cancelled,
   session removed from memory

PERSISTENCE RULES:
- NO database
- State is session-scoped only
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import time
import uuid

from ..engine_core import (
    GameEngine,
    GameHooks,
    Scheduler,
    VirtualScheduler,
)
from ..engine_core.config import EngineConfig

logger = logging.getLogger(__name__)

SchedulerFactory = Callable[[], Scheduler]
EventListener = Callable[[str, str], None]


class SessionStatus(Enum):
    """Lifecycle status of a session."""
    ACTIVE = "active"
    ENDED = "ended"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An ephemeral game session.

    Resets happen inside the engine; the session outlives them.
    """
    session_id: str
    engine: GameEngine
    created_at: float
    last_active_at: float
    status: SessionStatus = SessionStatus.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def touch(self) -> None:
        self.last_active_at = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions, each with its own engine and scheduler
    - Track active sessions
    - Clean up ended and stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        scheduler_factory: SchedulerFactory = VirtualScheduler,
        listener: EventListener | None = None,
    ):
        self.config = config or EngineConfig()
        self.scheduler_factory = scheduler_factory
        self.listener = listener
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        difficulty: str | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            difficulty: Preset key (default from config)
            seed: Optional shuffle seed for reproducible decks

        Raises:
            InvalidConfig: unknown difficulty
        """
        session_id = str(uuid.uuid4())
        engine = GameEngine(
            self.scheduler_factory(),
            config=self.config,
            hooks=self._hooks_for(session_id),
            difficulty=difficulty,
            seed=seed,
        )
        now = time.time()
        session = Session(
            session_id=session_id,
            engine=engine,
            created_at=now,
            last_active_at=now,
            metadata={"seed": seed},
        )
        self._sessions[session_id] = session
        logger.info("Created session %s (%s)", session_id, engine.difficulty.key)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and clean up.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.engine.close()
        if reason == "completed":
            session.status = SessionStatus.ENDED
        else:
            session.status = SessionStatus.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions idle for longer than max_age_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.last_active_at > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")

        return len(to_remove)

    def _hooks_for(self, session_id: str) -> GameHooks:
        if self.listener is None:
            return GameHooks()

        listener = self.listener
        return GameHooks(
            on_flip=lambda: listener(session_id, "flip"),
            on_match=lambda: listener(session_id, "match"),
            on_win=lambda: listener(session_id, "win"),
        )
