"""In-memory collection of workshop sessions for one process."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .factories import create_session
from .ids import generate_id
from .io import load_sample_session, parse_session, rebind_session_id
from .types import Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, title: Optional[str] = None, facilitator_name: Optional[str] = None) -> Session:
        return self.add(create_session(title, facilitator_name))

    def add(self, session: Session) -> Session:
        if session.id in self._sessions:
            raise ValueError(f"Session already exists: {session.id}")
        self._sessions[session.id] = session
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def list(self) -> List[Session]:
        return list(self._sessions.values())

    def remove(self, session_id: str) -> Optional[Session]:
        return self._sessions.pop(session_id, None)

    def import_json(self, raw: str | bytes) -> Session:
        """Parse and register an exported session.

        Raises ``SessionImportError`` for malformed input, in which case the
        registry is left untouched.
        """
        session = parse_session(raw)
        if session.id in self._sessions:
            rebind_session_id(session, generate_id("session"))
            session.title = f"{session.title} (imported)"
        self._sessions[session.id] = session
        logger.info("Imported session %s (%d nodes)", session.id, len(session.nodes))
        return session

    def load_sample(self) -> Session:
        return self.add(load_sample_session())

