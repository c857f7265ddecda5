"""Spotify chat assistant: natural-language playback control."""

from spotify_assistant.config import CONFIG, DEFAULT_MODEL, MODEL_ALIASES, __version__
from spotify_assistant.domain.errors import GatewayAuthError, GatewayError, ModelUnavailable
from spotify_assistant.domain.interpreter import CommandInterpreter
from spotify_assistant.domain.models import ActionRequest, ActionResult, TurnResult

__all__ = [
    "CONFIG",
    "DEFAULT_MODEL",
    "MODEL_ALIASES",
    "__version__",
    "GatewayAuthError",
    "GatewayError",
    "ModelUnavailable",
    "CommandInterpreter",
    "ActionRequest",
    "ActionResult",
    "TurnResult",
]
