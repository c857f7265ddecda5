"""FastAPI dependencies: wire ports to concrete adapters."""

from typing import Optional

from fastapi import Header, HTTPException

from spotify_assistant.adapters.llm.executor import create_executor
from spotify_assistant.adapters.spotify.client import SpotifyClient
from spotify_assistant.adapters.storage.json_store import JsonStorage
from spotify_assistant.config import CONFIG
from spotify_assistant.domain.chat_session import ChatSessionStore
from spotify_assistant.ports.outbound import LLMPort, PlaybackPort

_llm: Optional[LLMPort] = None
_session_store: Optional[ChatSessionStore] = None


def get_llm() -> LLMPort:
    global _llm
    if _llm is None:
        _llm = create_executor()
    return _llm


def get_session_store() -> ChatSessionStore:
    global _session_store
    if _session_store is None:
        _session_store = ChatSessionStore(JsonStorage())
    return _session_store


def bearer_token(authorization: Optional[str]) -> str:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return ""


def get_gateway(authorization: Optional[str] = Header(default=None)) -> PlaybackPort:
    """One stateless SpotifyClient per request, bound to the caller's token."""
    token = bearer_token(authorization) or CONFIG["spotify_access_token"]
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated with Spotify")
    return SpotifyClient(token)
