"""Domain data models: pure Python dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class ActionRequest:
    """Action extracted from LLM response text. Not yet validated."""

    kind: str  # e.g. "pausePlayback", "createPlaylist"
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionResult:
    """Outcome of one executed ActionRequest."""

    kind: str
    args: Dict[str, Any]
    succeeded: bool
    error: Optional[str] = None
    reauth_required: bool = False


@dataclass
class TurnResult:
    """What one chat turn returns to the caller."""

    narrative: str
    actions: List[ActionResult] = field(default_factory=list)
    invalidate: List[str] = field(default_factory=list)


class TurnPhase(int, Enum):
    COMPOSING = 0
    MODEL_CALLED = 1
    EXTRACTED = 2
    EXECUTING = 3
    COMPLETED = 4


@dataclass
class Track:
    id: str
    uri: str
    name: str = ""
    artists: List[str] = field(default_factory=list)
    album: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Track":
        return cls(
            id=item.get("id", ""),
            uri=item.get("uri", ""),
            name=item.get("name", ""),
            artists=[a.get("name", "") for a in item.get("artists", [])],
            album=(item.get("album") or {}).get("name", ""),
        )


@dataclass
class QueryGroup:
    query: str
    limit: int


@dataclass
class PlaylistBuildPlan:
    """createPlaylist as a plan: create first, then search each group, then append once."""

    name: str
    groups: List[QueryGroup]
    description: str = ""
    public: bool = False
