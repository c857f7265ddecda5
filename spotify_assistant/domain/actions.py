"""Action registry — the closed set of actions the assistant may trigger.

Each ActionKind has exactly one argument model (a tagged variant) and one
ActionSpec. The prompt vocabulary, validation and the interpreter's dispatch
table are all keyed by ActionKind, so adding an action means adding it here
first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic_core import PydanticCustomError

from spotify_assistant.domain.errors import (
    ArgumentOutOfRange,
    MissingArgument,
    SchemaError,
    UnknownAction,
    WrongType,
)
from spotify_assistant.domain.models import PlaylistBuildPlan, QueryGroup


class ActionKind(str, Enum):
    PLAY_TRACK = "playTrack"
    PAUSE_PLAYBACK = "pausePlayback"
    RESUME_PLAYBACK = "resumePlayback"
    SKIP_TO_NEXT = "skipToNext"
    SKIP_TO_PREVIOUS = "skipToPrevious"
    SEARCH_TRACKS_AND_PLAY = "searchTracksAndPlay"
    CREATE_PLAYLIST = "createPlaylist"
    SEEK = "seek"
    SET_VOLUME = "setVolume"
    SHUFFLE = "shuffle"
    REPEAT = "repeat"
    ADD_TO_QUEUE = "addToQueue"


# Spotify's search endpoint caps a page at 50 items
MAX_SEARCH_LIMIT = 50
DEFAULT_PLAYLIST_LIMIT = 10


# ── Argument models (one per kind) ──────────────────────────


class ActionArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _no_bool(value: Any) -> Any:
    # bool is an int subclass; lax mode would turn true into 1
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer, not a boolean")
    return value


Count = Annotated[int, BeforeValidator(_no_bool)]


class NoArgs(ActionArgs):
    pass


class PlayTrackArgs(ActionArgs):
    uri: str = Field(min_length=1)


class SearchTracksAndPlayArgs(ActionArgs):
    query: str = Field(min_length=1)


class QueryGroupArgs(ActionArgs):
    query: str = Field(min_length=1)
    limit: Count = Field(default=DEFAULT_PLAYLIST_LIMIT, ge=1, le=MAX_SEARCH_LIMIT)


class CreatePlaylistArgs(ActionArgs):
    name: str = Field(min_length=1)
    query: Optional[str] = None
    limit: Count = Field(default=DEFAULT_PLAYLIST_LIMIT, ge=1, le=MAX_SEARCH_LIMIT)
    queries: Optional[List[QueryGroupArgs]] = None
    description: str = ""
    public: bool = False

    @model_validator(mode="after")
    def _needs_a_query(self) -> "CreatePlaylistArgs":
        if not self.queries and not self.query:
            raise PydanticCustomError(
                "missing_argument",
                "either 'query' or 'queries' is required",
                {"argument": "queries"},
            )
        return self

    def plan(self) -> PlaylistBuildPlan:
        """Query groups in the order the model listed them; `queries` wins over `query`."""
        if self.queries:
            groups = [QueryGroup(query=g.query, limit=g.limit) for g in self.queries]
        else:
            groups = [QueryGroup(query=self.query, limit=self.limit)]
        return PlaylistBuildPlan(
            name=self.name,
            groups=groups,
            description=self.description,
            public=self.public,
        )


class SeekArgs(ActionArgs):
    position_ms: Count = Field(ge=0)


class SetVolumeArgs(ActionArgs):
    volume_percent: Count = Field(ge=0, le=100)


class ShuffleArgs(ActionArgs):
    state: bool


class RepeatArgs(ActionArgs):
    state: Literal["off", "track", "context"]


class AddToQueueArgs(ActionArgs):
    uri: Optional[str] = None
    query: Optional[str] = None

    @model_validator(mode="after")
    def _needs_a_target(self) -> "AddToQueueArgs":
        if not self.uri and not self.query:
            raise PydanticCustomError(
                "missing_argument",
                "either 'uri' or 'query' is required",
                {"argument": "uri"},
            )
        return self


# ── Registry ──────────────────────────


PLAYER_RESOURCES = ("player-state", "current-track")


@dataclass(frozen=True)
class ActionSpec:
    args_model: Type[ActionArgs]
    signature: str  # how the prompt advertises the action
    description: str  # short human phrase for status messages
    invalidates: Tuple[str, ...] = PLAYER_RESOURCES
    idempotent: bool = True


REGISTRY: Dict[ActionKind, ActionSpec] = {
    ActionKind.PLAY_TRACK: ActionSpec(
        PlayTrackArgs, 'playTrack {"uri": "spotify:track:..."}', "play the track",
    ),
    ActionKind.PAUSE_PLAYBACK: ActionSpec(
        NoArgs, "pausePlayback {}", "pause the music",
    ),
    ActionKind.RESUME_PLAYBACK: ActionSpec(
        NoArgs, "resumePlayback {}", "resume playback",
    ),
    ActionKind.SKIP_TO_NEXT: ActionSpec(
        NoArgs, "skipToNext {}", "skip to the next track",
    ),
    ActionKind.SKIP_TO_PREVIOUS: ActionSpec(
        NoArgs, "skipToPrevious {}", "go back to the previous track",
    ),
    ActionKind.SEARCH_TRACKS_AND_PLAY: ActionSpec(
        SearchTracksAndPlayArgs,
        'searchTracksAndPlay {"query": "artist or song"}',
        "search and play",
    ),
    ActionKind.CREATE_PLAYLIST: ActionSpec(
        CreatePlaylistArgs,
        'createPlaylist {"name": "...", "queries": [{"query": "...", "limit": 5}]}'
        ' (or {"name": "...", "query": "...", "limit": 10})',
        "create a playlist",
        invalidates=("playlists",),
        idempotent=False,
    ),
    ActionKind.SEEK: ActionSpec(
        SeekArgs, 'seek {"position_ms": 30000}', "seek",
    ),
    ActionKind.SET_VOLUME: ActionSpec(
        SetVolumeArgs, 'setVolume {"volume_percent": 0-100}', "set the volume",
    ),
    ActionKind.SHUFFLE: ActionSpec(
        ShuffleArgs, 'shuffle {"state": true|false}', "toggle shuffle",
    ),
    ActionKind.REPEAT: ActionSpec(
        RepeatArgs, 'repeat {"state": "off"|"track"|"context"}', "set repeat mode",
    ),
    ActionKind.ADD_TO_QUEUE: ActionSpec(
        AddToQueueArgs,
        'addToQueue {"query": "artist or song"} (or {"uri": "spotify:track:..."})',
        "add to the queue",
        invalidates=("queue",),
    ),
}


@dataclass
class ValidatedAction:
    kind: ActionKind
    args: ActionArgs

    @property
    def spec(self) -> ActionSpec:
        return REGISTRY[self.kind]


_MISSING_ERRORS = {"missing", "missing_argument", "string_too_short", "too_short"}
_RANGE_ERRORS = {"greater_than", "greater_than_equal", "less_than", "less_than_equal"}


def _schema_error(kind: str, exc: ValidationError) -> SchemaError:
    err = exc.errors()[0]
    ctx = err.get("ctx") or {}
    argument = ".".join(str(p) for p in err["loc"]) or ctx.get("argument", "args")
    if err["type"] in _MISSING_ERRORS:
        return MissingArgument(kind, argument)
    if err["type"] in _RANGE_ERRORS:
        return ArgumentOutOfRange(kind, argument, err["msg"])
    return WrongType(kind, argument, err["msg"])


def validate(kind: str, args: Optional[Dict[str, Any]] = None) -> ValidatedAction:
    """Check a raw action against the registry.

    Raises UnknownAction, MissingArgument or WrongType (ArgumentOutOfRange for
    bounds). Nothing may be dispatched without passing through here.
    """
    try:
        action_kind = ActionKind(kind)
    except ValueError:
        raise UnknownAction(str(kind))

    spec = REGISTRY[action_kind]
    try:
        parsed = spec.args_model.model_validate(args if args is not None else {})
    except ValidationError as e:
        raise _schema_error(action_kind.value, e) from e
    return ValidatedAction(kind=action_kind, args=parsed)


def describe(kind: str) -> str:
    """Human phrase for an action kind, falling back to the raw name."""
    try:
        return REGISTRY[ActionKind(kind)].description
    except ValueError:
        return str(kind)
