"""Inbound port — transport-agnostic chat message representation."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class IncomingMessage:
    """One user chat message, as received by any front-end."""

    content: str
    session_id: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.content or not self.content.strip()
