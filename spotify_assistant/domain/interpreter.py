"""CommandInterpreter — one chat turn, end to end.

message -> one LLM call -> extract actions -> validate -> execute in order
against the PlaybackPort -> TurnResult. No framework dependencies and no
state carried between turns.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Optional

from spotify_assistant.domain.action_parser import ExtractionResult, extract
from spotify_assistant.domain.actions import (
    REGISTRY,
    ActionKind,
    AddToQueueArgs,
    CreatePlaylistArgs,
    PlayTrackArgs,
    RepeatArgs,
    SearchTracksAndPlayArgs,
    SeekArgs,
    SetVolumeArgs,
    ShuffleArgs,
    describe,
    validate,
)
from spotify_assistant.domain.errors import (
    ActionFailed,
    GatewayAuthError,
    GatewayError,
    ModelUnavailable,
    SchemaError,
)
from spotify_assistant.domain.models import (
    ActionRequest,
    ActionResult,
    PlaylistBuildPlan,
    TurnPhase,
    TurnResult,
)
from spotify_assistant.domain.prompts import SYSTEM_PROMPT

if TYPE_CHECKING:
    from spotify_assistant.ports.outbound import LLMPort, PlaybackPort

FALLBACK_REPLY = "I'm not sure how to respond to that."


def _log(msg: str):
    print(f"[interpreter] {msg}", file=sys.stderr)


# ── Handlers ──────────────────────────


async def _play_track(gateway: PlaybackPort, args: PlayTrackArgs):
    await gateway.play(args.uri)


async def _pause(gateway: PlaybackPort, args):
    await gateway.pause()


async def _resume(gateway: PlaybackPort, args):
    await gateway.play()


async def _next(gateway: PlaybackPort, args):
    await gateway.next()


async def _previous(gateway: PlaybackPort, args):
    await gateway.previous()


async def _search_and_play(gateway: PlaybackPort, args: SearchTracksAndPlayArgs):
    tracks = await gateway.search_tracks(args.query, limit=1)
    if not tracks:
        raise ActionFailed(f"No tracks found for '{args.query}'")
    await gateway.play(tracks[0].uri)


async def _create_playlist(gateway: PlaybackPort, args: CreatePlaylistArgs):
    await build_playlist(gateway, args.plan())


async def _seek(gateway: PlaybackPort, args: SeekArgs):
    await gateway.seek(args.position_ms)


async def _set_volume(gateway: PlaybackPort, args: SetVolumeArgs):
    await gateway.set_volume(args.volume_percent)


async def _shuffle(gateway: PlaybackPort, args: ShuffleArgs):
    await gateway.shuffle(args.state)


async def _repeat(gateway: PlaybackPort, args: RepeatArgs):
    await gateway.repeat(args.state)


async def _add_to_queue(gateway: PlaybackPort, args: AddToQueueArgs):
    uri = args.uri
    if not uri:
        tracks = await gateway.search_tracks(args.query, limit=1)
        if not tracks:
            raise ActionFailed(f"No tracks found for '{args.query}'")
        uri = tracks[0].uri
    await gateway.add_to_queue(uri)


Handler = Callable[..., Awaitable[None]]

HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.PLAY_TRACK: _play_track,
    ActionKind.PAUSE_PLAYBACK: _pause,
    ActionKind.RESUME_PLAYBACK: _resume,
    ActionKind.SKIP_TO_NEXT: _next,
    ActionKind.SKIP_TO_PREVIOUS: _previous,
    ActionKind.SEARCH_TRACKS_AND_PLAY: _search_and_play,
    ActionKind.CREATE_PLAYLIST: _create_playlist,
    ActionKind.SEEK: _seek,
    ActionKind.SET_VOLUME: _set_volume,
    ActionKind.SHUFFLE: _shuffle,
    ActionKind.REPEAT: _repeat,
    ActionKind.ADD_TO_QUEUE: _add_to_queue,
}


async def build_playlist(gateway: PlaybackPort, plan: PlaylistBuildPlan) -> List[str]:
    """Create the playlist, search every group in order, append all hits in one call.

    Creation errors propagate before any search is issued. A failed search
    only drops its own group. Returns the appended URIs.
    """
    playlist_id = await gateway.create_playlist(
        plan.name, description=plan.description, public=plan.public,
    )
    _log(f"created playlist {plan.name!r} ({playlist_id})")

    uris: List[str] = []
    for group in plan.groups:
        try:
            tracks = await gateway.search_tracks(group.query, limit=group.limit)
        except GatewayAuthError:
            raise
        except GatewayError as e:
            _log(f"playlist {playlist_id}: search {group.query!r} failed: {e}")
            continue
        uris.extend(t.uri for t in tracks[: group.limit] if t.uri)

    if not uris:
        raise ActionFailed(f"No tracks found for playlist '{plan.name}'")

    await gateway.add_tracks_to_playlist(playlist_id, uris)
    _log(f"playlist {playlist_id}: appended {len(uris)} track(s)")
    return uris


class TurnProgress:
    """Forward-only phase tracker for one chat turn."""

    def __init__(self):
        self.phase = TurnPhase.COMPOSING

    def advance(self, phase: TurnPhase):
        if phase <= self.phase:
            raise RuntimeError(f"turn cannot move from {self.phase.name} to {phase.name}")
        self.phase = phase


class CommandInterpreter:
    """Runs chat turns against an LLMPort and a PlaybackPort.

    Only a failed model call aborts a turn (ModelUnavailable). Schema and
    gateway errors are contained per action and reported as failed results.
    """

    def __init__(
        self,
        llm: LLMPort,
        gateway: PlaybackPort,
        system_prompt: str = SYSTEM_PROMPT,
        model: Optional[str] = None,
        extractor: Callable[[str], ExtractionResult] = extract,
    ):
        self.llm = llm
        self.gateway = gateway
        self.system_prompt = system_prompt
        self.model = model
        self._extract = extractor

    async def handle_turn(self, message: str) -> TurnResult:
        progress = TurnProgress()
        started = datetime.now()

        try:
            raw = await self.llm.execute(
                message, system_prompt=self.system_prompt, model=self.model,
            )
        except Exception as e:
            _log(f"model call failed: {e}")
            raise ModelUnavailable(str(e)) from e
        progress.advance(TurnPhase.MODEL_CALLED)

        extraction = self._extract(raw)
        progress.advance(TurnPhase.EXTRACTED)
        _log(f"extracted {len(extraction.actions)} action(s)")

        progress.advance(TurnPhase.EXECUTING)
        results: List[ActionResult] = []
        for request in extraction.actions:
            results.append(await self.execute_action(request))
        progress.advance(TurnPhase.COMPLETED)

        narrative = extraction.narrative
        if not narrative and not results:
            narrative = FALLBACK_REPLY

        elapsed = (datetime.now() - started).total_seconds()
        ok = sum(1 for r in results if r.succeeded)
        _log(f"turn completed in {elapsed:.2f}s: {ok}/{len(results)} action(s) succeeded")
        return TurnResult(
            narrative=narrative,
            actions=results,
            invalidate=_invalidated(results),
        )

    async def execute_action(self, request: ActionRequest) -> ActionResult:
        """Validate then dispatch one request. Never raises."""
        args = request.args if isinstance(request.args, dict) else {"value": request.args}
        try:
            action = validate(request.kind, request.args)
        except SchemaError as e:
            _log(f"rejected {request.kind}: {e}")
            return ActionResult(kind=request.kind, args=args, succeeded=False, error=str(e))

        handler = HANDLERS[action.kind]
        try:
            await handler(self.gateway, action.args)
        except GatewayAuthError as e:
            _log(f"{request.kind} needs re-authentication: {e}")
            return ActionResult(
                kind=request.kind, args=args, succeeded=False,
                error=str(e), reauth_required=True,
            )
        except Exception as e:
            _log(f"could not {describe(request.kind)}: {e}")
            return ActionResult(kind=request.kind, args=args, succeeded=False, error=str(e))

        return ActionResult(kind=request.kind, args=args, succeeded=True)


def _invalidated(results: List[ActionResult]) -> List[str]:
    """Resources touched by successful actions, first-seen order."""
    seen: List[str] = []
    for r in results:
        if not r.succeeded:
            continue
        for resource in REGISTRY[ActionKind(r.kind)].invalidates:
            if resource not in seen:
                seen.append(resource)
    return seen
