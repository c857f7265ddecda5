"""Outbound ports — interfaces for external system adapters."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from spotify_assistant.domain.models import Track


@runtime_checkable
class LLMPort(Protocol):
    """Interface for LLM execution backends. Free text in, free text out."""

    async def execute(
        self,
        message: str,
        system_prompt: Optional[str] = None,
        session_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str: ...


@runtime_checkable
class PlaybackPort(Protocol):
    """Interface for the music-control API (Playback Gateway).

    Every method raises GatewayError on failure, GatewayAuthError when the
    bearer credential is missing or expired.
    """

    async def play(self, uri: Optional[str] = None) -> None: ...
    async def pause(self) -> None: ...
    async def next(self) -> None: ...
    async def previous(self) -> None: ...
    async def seek(self, position_ms: int) -> None: ...
    async def set_volume(self, volume_percent: int) -> None: ...
    async def shuffle(self, state: bool) -> None: ...
    async def repeat(self, state: str) -> None: ...
    async def add_to_queue(self, uri: str) -> None: ...
    async def search_tracks(self, query: str, limit: int = 20) -> List[Track]: ...
    async def create_playlist(
        self, name: str, description: str = "", public: bool = False,
    ) -> str: ...
    async def add_tracks_to_playlist(self, playlist_id: str, uris: List[str]) -> None: ...
    async def get_player_state(self) -> Optional[Dict[str, Any]]: ...
    async def get_current_track(self) -> Optional[Dict[str, Any]]: ...
    async def get_queue(self) -> Optional[Dict[str, Any]]: ...
    async def get_playlists(self) -> Optional[Dict[str, Any]]: ...
    async def get_playlist_tracks(self, playlist_id: str) -> Optional[Dict[str, Any]]: ...
    async def get_top_tracks(self) -> Optional[Dict[str, Any]]: ...
    async def get_top_artists(self) -> Optional[Dict[str, Any]]: ...
    async def toggle_saved_track(self, track_id: str) -> bool: ...


@runtime_checkable
class StoragePort(Protocol):
    """Interface for persistent storage."""

    def load(self, key: str) -> list: ...
    def save(self, key: str, data: list) -> None: ...
