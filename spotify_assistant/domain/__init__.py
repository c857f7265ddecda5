"""Domain layer — pure Python, no web or HTTP dependencies."""

from spotify_assistant.domain.action_parser import extract, parse_actions, strip_actions
from spotify_assistant.domain.actions import REGISTRY, ActionKind, validate
from spotify_assistant.domain.chat_session import ChatSessionStore, ChatTurn
from spotify_assistant.domain.errors import (
    ArgumentOutOfRange,
    GatewayAuthError,
    GatewayError,
    MissingArgument,
    ModelUnavailable,
    SchemaError,
    UnknownAction,
    WrongType,
)
from spotify_assistant.domain.interpreter import CommandInterpreter
from spotify_assistant.domain.models import ActionRequest, ActionResult, TurnResult

__all__ = [
    "ActionKind",
    "ActionRequest",
    "ActionResult",
    "ArgumentOutOfRange",
    "ChatSessionStore",
    "ChatTurn",
    "CommandInterpreter",
    "GatewayAuthError",
    "GatewayError",
    "MissingArgument",
    "ModelUnavailable",
    "REGISTRY",
    "SchemaError",
    "TurnResult",
    "UnknownAction",
    "WrongType",
    "extract",
    "parse_actions",
    "strip_actions",
    "validate",
]
