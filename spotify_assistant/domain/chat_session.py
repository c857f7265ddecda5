"""Chat session state: append-only conversation history.

Owned by the front-end layer and injected there; the interpreter never
sees it. Persisted through a StoragePort under a single key.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

from spotify_assistant.domain.models import ActionResult

if TYPE_CHECKING:
    from spotify_assistant.ports.outbound import StoragePort

STORAGE_KEY = "chat_sessions"
MAX_SESSIONS = 50


@dataclass
class ChatTurn:
    role: str  # "user" | "assistant"
    text: str
    action_results: List[ActionResult] = field(default_factory=list)
    status: str = "final"  # "pending" | "final"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def from_dict(cls, data: Dict) -> "ChatTurn":
        return cls(
            role=data["role"],
            text=data.get("text", ""),
            action_results=[ActionResult(**r) for r in data.get("action_results", [])],
            status=data.get("status", "final"),
            id=data.get("id") or uuid.uuid4().hex[:12],
            created_at=data.get("created_at", ""),
        )


@dataclass
class ChatSession:
    id: str
    title: str
    created_at: str
    turns: List[ChatTurn] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "ChatSession":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            created_at=data.get("created_at", ""),
            turns=[ChatTurn.from_dict(t) for t in data.get("turns", [])],
        )


class SessionNotFound(KeyError):
    pass


class TurnAlreadyFinal(RuntimeError):
    pass


class ChatSessionStore:
    """Sessions and their turns. Turns are appended, never edited, except the
    single pending -> final completion of an assistant turn."""

    def __init__(self, storage: StoragePort, max_sessions: int = MAX_SESSIONS):
        self._storage = storage
        self._max_sessions = max_sessions
        self._sessions: Dict[str, ChatSession] = {}
        for raw in storage.load(STORAGE_KEY):
            try:
                session = ChatSession.from_dict(raw)
            except (KeyError, TypeError):
                continue
            self._sessions[session.id] = session

    def _persist(self):
        self._storage.save(STORAGE_KEY, [asdict(s) for s in self._sessions.values()])

    def create_session(self, title: str = "") -> ChatSession:
        session = ChatSession(
            id=uuid.uuid4().hex[:12],
            title=title.strip() or "New chat",
            created_at=datetime.now().isoformat(),
        )
        self._sessions[session.id] = session
        while len(self._sessions) > self._max_sessions:
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
        self._persist()
        return session

    def list_sessions(self) -> List[ChatSession]:
        """Newest first."""
        return list(reversed(list(self._sessions.values())))

    def get(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def append_user_turn(self, session_id: str, text: str) -> ChatTurn:
        session = self.get(session_id)
        turn = ChatTurn(role="user", text=text)
        session.turns.append(turn)
        if session.title == "New chat":
            session.title = text[:40]
        self._persist()
        return turn

    def begin_assistant_turn(self, session_id: str) -> ChatTurn:
        session = self.get(session_id)
        turn = ChatTurn(role="assistant", text="", status="pending")
        session.turns.append(turn)
        self._persist()
        return turn

    def complete_turn(
        self,
        session_id: str,
        turn_id: str,
        text: str,
        action_results: Optional[List[ActionResult]] = None,
    ) -> ChatTurn:
        session = self.get(session_id)
        for turn in session.turns:
            if turn.id != turn_id:
                continue
            if turn.status == "final":
                raise TurnAlreadyFinal(turn_id)
            turn.text = text
            turn.action_results = list(action_results or [])
            turn.status = "final"
            self._persist()
            return turn
        raise KeyError(turn_id)
