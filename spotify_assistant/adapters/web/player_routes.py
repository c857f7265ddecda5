"""Spotify player / library proxy routes used by the chat page widgets."""

from dataclasses import asdict
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from spotify_assistant.adapters.web.deps import get_gateway
from spotify_assistant.domain.errors import GatewayAuthError, GatewayError
from spotify_assistant.ports.outbound import PlaybackPort

player_router = APIRouter(prefix="/spotify", tags=["Spotify"])


class PlayRequest(BaseModel):
    uri: Optional[str] = None


class SeekRequest(BaseModel):
    position_ms: int = Field(ge=0)


class VolumeRequest(BaseModel):
    volume_percent: int = Field(ge=0, le=100)


class ShuffleRequest(BaseModel):
    state: bool


class RepeatRequest(BaseModel):
    state: Literal["track", "context", "off"]


class QueueRequest(BaseModel):
    uri: str = Field(min_length=1)


class PlaylistCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    public: bool = False


class PlaylistTracksRequest(BaseModel):
    uris: List[str] = Field(min_length=1)


class ControlResponse(BaseModel):
    success: bool


async def _proxy(call):
    """Await a gateway call, mapping gateway failures onto HTTP statuses."""
    try:
        return await call
    except GatewayAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except GatewayError as e:
        status = e.status if e.status and 400 <= e.status < 500 else 502
        raise HTTPException(status_code=status, detail=str(e))


# -- Playback control --

@player_router.post("/play", response_model=ControlResponse)
async def play(req: PlayRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.play(req.uri))
    return ControlResponse(success=True)


@player_router.post("/pause", response_model=ControlResponse)
async def pause(gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.pause())
    return ControlResponse(success=True)


@player_router.post("/next", response_model=ControlResponse)
async def next_track(gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.next())
    return ControlResponse(success=True)


@player_router.post("/previous", response_model=ControlResponse)
async def previous_track(gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.previous())
    return ControlResponse(success=True)


@player_router.post("/seek", response_model=ControlResponse)
async def seek(req: SeekRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.seek(req.position_ms))
    return ControlResponse(success=True)


@player_router.post("/volume", response_model=ControlResponse)
async def volume(req: VolumeRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.set_volume(req.volume_percent))
    return ControlResponse(success=True)


@player_router.post("/shuffle", response_model=ControlResponse)
async def shuffle(req: ShuffleRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.shuffle(req.state))
    return ControlResponse(success=True)


@player_router.post("/repeat", response_model=ControlResponse)
async def repeat(req: RepeatRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.repeat(req.state))
    return ControlResponse(success=True)


@player_router.post("/queue", response_model=ControlResponse)
async def add_to_queue(req: QueueRequest, gateway: PlaybackPort = Depends(get_gateway)):
    await _proxy(gateway.add_to_queue(req.uri))
    return ControlResponse(success=True)


# -- Snapshots --

@player_router.get("/player")
async def player_state(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_player_state())


@player_router.get("/current-track")
async def current_track(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_current_track())


@player_router.get("/queue")
async def queue(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_queue())


@player_router.get("/top-tracks")
async def top_tracks(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_top_tracks())


@player_router.get("/top-artists")
async def top_artists(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_top_artists())


# -- Search & library --

@player_router.get("/search")
async def search(
    q: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=50),
    gateway: PlaybackPort = Depends(get_gateway),
):
    tracks = await _proxy(gateway.search_tracks(q, limit=limit))
    return {"tracks": [asdict(t) for t in tracks]}


@player_router.get("/playlists")
async def playlists(gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_playlists())


@player_router.post("/playlists")
async def create_playlist(
    req: PlaylistCreateRequest,
    gateway: PlaybackPort = Depends(get_gateway),
):
    playlist_id = await _proxy(
        gateway.create_playlist(req.name, description=req.description, public=req.public)
    )
    return {"id": playlist_id}


@player_router.get("/playlists/{playlist_id}/tracks")
async def playlist_tracks(playlist_id: str, gateway: PlaybackPort = Depends(get_gateway)):
    return await _proxy(gateway.get_playlist_tracks(playlist_id))


@player_router.post("/playlists/{playlist_id}/tracks", response_model=ControlResponse)
async def add_playlist_tracks(
    playlist_id: str,
    req: PlaylistTracksRequest,
    gateway: PlaybackPort = Depends(get_gateway),
):
    await _proxy(gateway.add_tracks_to_playlist(playlist_id, req.uris))
    return ControlResponse(success=True)


@player_router.post("/tracks/{track_id}/like")
async def toggle_like(track_id: str, gateway: PlaybackPort = Depends(get_gateway)):
    liked = await _proxy(gateway.toggle_saved_track(track_id))
    return {"liked": liked}
