"""Spotify Web API client using aiohttp. Implements PlaybackPort."""

import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import aiohttp

from spotify_assistant.config import CONFIG
from spotify_assistant.domain.errors import GatewayAuthError, GatewayError
from spotify_assistant.domain.models import Track

SPOTIFY_API_BASE = "https://api.spotify.com/v1"

MAX_RETRIES = 3
MAX_BACKOFF_SECONDS = 30
# Spotify accepts at most 100 URIs per add-items request
PLAYLIST_CHUNK_SIZE = 100


def _log(msg: str):
    print(f"[spotify] {msg}", file=sys.stderr)


def _backoff(attempt: int, retry_after: Optional[str] = None) -> float:
    if retry_after:
        try:
            return min(float(retry_after), MAX_BACKOFF_SECONDS)
        except ValueError:
            pass
    return min(2 ** attempt, MAX_BACKOFF_SECONDS)


def _error_message(body: str) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip() or "Failed to complete Spotify request"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return err["message"]
        if isinstance(err, str):
            return data.get("error_description") or err
    return "Failed to complete Spotify request"


class SpotifyClient:
    """Async Spotify client bound to one user's bearer token.

    Stateless apart from the token. Idempotent calls are retried with
    backoff on 429, 5xx and connection errors; create_playlist is sent at
    most once; playlist appends are only re-sent after a 429.
    """

    def __init__(self, access_token: Optional[str] = None):
        self._token = access_token if access_token is not None else CONFIG["spotify_access_token"]

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        idempotent: bool = True,
        attempts: int = MAX_RETRIES,
    ) -> Any:
        if not self._token:
            raise GatewayAuthError("Not authenticated with Spotify")

        url = f"{SPOTIFY_API_BASE}{path}"
        headers = {"Authorization": f"Bearer {self._token}"}
        timeout = aiohttp.ClientTimeout(total=CONFIG["http_timeout_seconds"])

        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.request(
                        method, url, headers=headers, params=params, json=json_body
                    ) as resp:
                        body = await resp.text()

                        # 429 means the request was not applied, so any call may be re-sent
                        if resp.status == 429 and not last:
                            delay = _backoff(attempt, resp.headers.get("Retry-After"))
                            _log(f"{method} {path}: rate limited, retrying in {delay}s")
                            await asyncio.sleep(delay)
                            continue
                        if resp.status >= 500 and idempotent and not last:
                            _log(f"{method} {path}: HTTP {resp.status}, retrying")
                            await asyncio.sleep(_backoff(attempt))
                            continue

                        return self._decode(resp.status, body)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if not idempotent or last:
                    raise GatewayError(f"Spotify unreachable: {e}") from e
                _log(f"{method} {path}: {e!r}, retrying")
                await asyncio.sleep(_backoff(attempt))

        raise GatewayError("Max retries exceeded")

    @staticmethod
    def _decode(status: int, body: str) -> Any:
        if status == 401:
            raise GatewayAuthError()
        if status >= 400:
            raise GatewayError(
                f"Spotify API error ({status}): {_error_message(body)}", status=status,
            )
        if status == 204 or not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None

    # -- Playback control --

    async def play(self, uri: Optional[str] = None) -> None:
        body = {"uris": [uri]} if uri else None
        await self._request("PUT", "/me/player/play", json_body=body)

    async def pause(self) -> None:
        await self._request("PUT", "/me/player/pause")

    async def next(self) -> None:
        await self._request("POST", "/me/player/next")

    async def previous(self) -> None:
        await self._request("POST", "/me/player/previous")

    async def seek(self, position_ms: int) -> None:
        await self._request("PUT", "/me/player/seek", params={"position_ms": str(position_ms)})

    async def set_volume(self, volume_percent: int) -> None:
        await self._request(
            "PUT", "/me/player/volume", params={"volume_percent": str(volume_percent)},
        )

    async def shuffle(self, state: bool) -> None:
        await self._request(
            "PUT", "/me/player/shuffle", params={"state": "true" if state else "false"},
        )

    async def repeat(self, state: str) -> None:
        await self._request("PUT", "/me/player/repeat", params={"state": state})

    async def add_to_queue(self, uri: str) -> None:
        await self._request("POST", "/me/player/queue", params={"uri": uri})

    # -- Search & playlists --

    async def search_tracks(self, query: str, limit: int = 20) -> List[Track]:
        limit = max(1, min(50, limit))
        data = await self._request(
            "GET", "/search", params={"type": "track", "q": query, "limit": str(limit)},
        )
        items = ((data or {}).get("tracks") or {}).get("items") or []
        return [Track.from_api(item) for item in items if item]

    async def create_playlist(
        self, name: str, description: str = "", public: bool = False,
    ) -> str:
        data = await self._request(
            "POST",
            "/me/playlists",
            json_body={"name": name, "description": description, "public": public},
            idempotent=False,
            attempts=1,
        )
        if not data or "id" not in data:
            raise GatewayError("Spotify did not return a playlist id")
        return data["id"]

    async def add_tracks_to_playlist(self, playlist_id: str, uris: List[str]) -> None:
        appended = 0
        for start in range(0, len(uris), PLAYLIST_CHUNK_SIZE):
            chunk = uris[start:start + PLAYLIST_CHUNK_SIZE]
            try:
                await self._request(
                    "POST",
                    f"/playlists/{playlist_id}/tracks",
                    json_body={"uris": chunk},
                    idempotent=False,
                )
            except GatewayAuthError:
                raise
            except GatewayError as e:
                if appended:
                    raise GatewayError(
                        f"{e} ({appended} of {len(uris)} tracks appended)", status=e.status,
                    ) from e
                raise
            appended += len(chunk)

    async def toggle_saved_track(self, track_id: str) -> bool:
        """Like or unlike a track. Returns the new liked state."""
        contains = await self._request("GET", "/me/tracks/contains", params={"ids": track_id})
        liked = bool(contains and contains[0])
        await self._request("DELETE" if liked else "PUT", "/me/tracks", params={"ids": track_id})
        return not liked

    # -- Snapshots --

    async def get_player_state(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/me/player")

    async def get_current_track(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/me/player/currently-playing")

    async def get_queue(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/me/player/queue")

    async def get_playlists(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/me/playlists")

    async def get_playlist_tracks(self, playlist_id: str) -> Optional[Dict[str, Any]]:
        return await self._request("GET", f"/playlists/{playlist_id}/tracks")

    async def get_top_tracks(self) -> Optional[Dict[str, Any]]:
        return await self._request(
            "GET", "/me/top/tracks", params={"limit": "10", "time_range": "short_term"},
        )

    async def get_top_artists(self) -> Optional[Dict[str, Any]]:
        return await self._request(
            "GET", "/me/top/artists", params={"limit": "8", "time_range": "short_term"},
        )
