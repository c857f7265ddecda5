"""Chat turn and chat session routes."""

import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from spotify_assistant.adapters.web.deps import get_gateway, get_llm, get_session_store
from spotify_assistant.config import DEFAULT_MODEL, MODEL_ALIASES
from spotify_assistant.domain.chat_session import ChatSessionStore, SessionNotFound
from spotify_assistant.domain.errors import ModelUnavailable
from spotify_assistant.domain.interpreter import CommandInterpreter
from spotify_assistant.domain.models import ActionResult
from spotify_assistant.ports.inbound import IncomingMessage
from spotify_assistant.ports.outbound import LLMPort, PlaybackPort

chat_router = APIRouter(tags=["Chat"])


class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = None


class FunctionCallResult(BaseModel):
    name: str
    args: Dict[str, Any]
    result: bool
    error: Optional[str] = None
    reauthRequired: bool = False


class ChatResponse(BaseModel):
    response: str
    functionCalls: Optional[List[FunctionCallResult]] = None
    invalidate: List[str] = []
    sessionId: Optional[str] = None


class SessionCreateRequest(BaseModel):
    title: str = ""


def _to_function_call(result: ActionResult) -> FunctionCallResult:
    return FunctionCallResult(
        name=result.kind,
        args=result.args,
        result=result.succeeded,
        error=result.error,
        reauthRequired=result.reauth_required,
    )


def _session_or_404(store: ChatSessionStore, session_id: str):
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")


def _finish_turn(store: ChatSessionStore, session_id: str, turn_id: str, text: str, actions=None):
    # The session may have been evicted while the model or Spotify was awaited
    try:
        store.complete_turn(session_id, turn_id, text, actions)
    except SessionNotFound:
        print(f"[chat] session {session_id} gone before turn finished", file=sys.stderr)


@chat_router.post("/chat", response_model=ChatResponse)
async def chat(
    req: ChatRequest,
    llm: LLMPort = Depends(get_llm),
    gateway: PlaybackPort = Depends(get_gateway),
    store: ChatSessionStore = Depends(get_session_store),
):
    incoming = IncomingMessage(content=req.message, session_id=req.session_id)
    if incoming.is_blank:
        raise HTTPException(status_code=422, detail="Message must not be empty")
    text = incoming.content.strip()

    pending = None
    if incoming.session_id:
        _session_or_404(store, incoming.session_id)
        store.append_user_turn(incoming.session_id, text)
        pending = store.begin_assistant_turn(incoming.session_id)

    interpreter = CommandInterpreter(llm, gateway, model=MODEL_ALIASES[DEFAULT_MODEL])
    try:
        turn = await interpreter.handle_turn(text)
    except ModelUnavailable as e:
        if pending:
            _finish_turn(store, incoming.session_id, pending.id, e.user_message)
        return JSONResponse(status_code=503, content={"error": e.user_message})

    if pending:
        _finish_turn(store, incoming.session_id, pending.id, turn.narrative, turn.actions)

    return ChatResponse(
        response=turn.narrative,
        functionCalls=[_to_function_call(r) for r in turn.actions] or None,
        invalidate=turn.invalidate,
        sessionId=incoming.session_id,
    )


@chat_router.get("/sessions")
async def list_sessions(store: ChatSessionStore = Depends(get_session_store)):
    return {
        "sessions": [
            {
                "id": s.id,
                "title": s.title,
                "created_at": s.created_at,
                "turn_count": len(s.turns),
            }
            for s in store.list_sessions()
        ]
    }


@chat_router.post("/sessions")
async def create_session(
    req: SessionCreateRequest,
    store: ChatSessionStore = Depends(get_session_store),
):
    return asdict(store.create_session(req.title))


@chat_router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    store: ChatSessionStore = Depends(get_session_store),
):
    return asdict(_session_or_404(store, session_id))
