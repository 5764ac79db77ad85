"""In-memory store of live games for the presentation shell."""
import logging
import random
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.level import GameRules
from .engine import GameEngine
from .level_state import Level

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """A live game: the current engine and the notifications it raised."""
    session_id: str
    rules: GameRules
    engine: GameEngine
    seed: Optional[int] = None
    round: int = 1
    events: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = self.engine.snapshot()
        data.update({
            "session_id": self.session_id,
            "round": self.round,
            "seed": self.seed,
            "events": list(self.events),
        })
        return data


class SessionManager:
    """Creates, looks up and restarts game sessions.

    Restarting swaps in a fully built engine with a single assignment, so a
    reader never sees a half-replaced Level.
    """

    def __init__(self, max_sessions: int = 200):
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be at least 1, got {max_sessions}")
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()

    def create(self, rules: GameRules, seed: Optional[int] = None) -> GameSession:
        """Start a new session with a freshly generated level."""
        session_id = uuid.uuid4().hex
        events: List[str] = []
        session = GameSession(
            session_id=session_id,
            rules=rules,
            engine=self._build_engine(rules, seed, events),
            seed=seed,
            events=events,
        )

        self._sessions[session_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.warning("Session store full, evicted %s", evicted_id)

        logger.info("Session %s created (seed=%s)", session_id, seed)
        return session

    def get(self, session_id: str) -> Optional[GameSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def new_game(self, session_id: str, seed: Optional[int] = None) -> Optional[GameSession]:
        """Discard the session's level and replace it with a new one."""
        session = self.get(session_id)
        if session is None:
            return None

        session.events.clear()
        session.engine = self._build_engine(session.rules, seed, session.events)
        session.seed = seed
        session.round += 1
        logger.info("Session %s round %d started", session_id, session.round)
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def _build_engine(
        self, rules: GameRules, seed: Optional[int], events: List[str]
    ) -> GameEngine:
        level = Level(rules=rules, rng=random.Random(seed))
        return GameEngine(
            level,
            on_win=lambda: events.append("win"),
            on_fail=lambda: events.append("fail"),
        )


# Singleton instance
_session_manager = None


def get_session_manager() -> SessionManager:
    """Get or create session manager singleton instance."""
    global _session_manager
    if _session_manager is None:
        from ..config import get_settings
        _session_manager = SessionManager(max_sessions=get_settings().max_sessions)
    return _session_manager
