"""Port interfaces (Hexagonal Architecture)."""

from spotify_assistant.ports.inbound import IncomingMessage
from spotify_assistant.ports.outbound import LLMPort, PlaybackPort, StoragePort

__all__ = [
    "IncomingMessage",
    "LLMPort",
    "PlaybackPort",
    "StoragePort",
]
