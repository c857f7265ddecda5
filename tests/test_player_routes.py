"""Unit tests for the Spotify proxy routes."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from httpx import AsyncClient, ASGITransport

from spotify_assistant.adapters.web.deps import get_gateway
from spotify_assistant.adapters.web.server import app
from spotify_assistant.domain.errors import GatewayAuthError, GatewayError
from spotify_assistant.domain.models import Track


@pytest.fixture
def gateway():
    mock = MagicMock()
    for name in (
        "play", "pause", "next", "previous", "seek", "set_volume", "shuffle",
        "repeat", "add_to_queue", "search_tracks", "create_playlist",
        "add_tracks_to_playlist", "get_player_state", "get_current_track",
        "get_queue", "get_playlists", "get_playlist_tracks", "get_top_tracks",
        "get_top_artists", "toggle_saved_track",
    ):
        setattr(mock, name, AsyncMock(return_value=None))
    app.dependency_overrides[get_gateway] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


@pytest.fixture
def transport():
    return ASGITransport(app=app)


class TestControls:
    @pytest.mark.asyncio
    async def test_pause(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/pause")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        gateway.pause.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_play_uri(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            await ac.post("/spotify/play", json={"uri": "spotify:track:1"})
        gateway.play.assert_awaited_once_with("spotify:track:1")

    @pytest.mark.asyncio
    async def test_volume_bounds(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            bad = await ac.post("/spotify/volume", json={"volume_percent": 150})
            ok = await ac.post("/spotify/volume", json={"volume_percent": 20})
        assert bad.status_code == 422
        assert ok.status_code == 200
        gateway.set_volume.assert_awaited_once_with(20)

    @pytest.mark.asyncio
    async def test_repeat_state(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/repeat", json={"state": "forever"})
        assert resp.status_code == 422
        gateway.repeat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_auth_error_is_401(self, gateway, transport):
        gateway.next = AsyncMock(side_effect=GatewayAuthError())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/next")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_upstream_4xx_passed_through(self, gateway, transport):
        gateway.previous = AsyncMock(side_effect=GatewayError("No active device", status=404))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/previous")
        assert resp.status_code == 404
        assert "No active device" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_upstream_5xx_is_502(self, gateway, transport):
        gateway.get_player_state = AsyncMock(side_effect=GatewayError("boom", status=503))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/spotify/player")
        assert resp.status_code == 502


class TestSnapshots:
    @pytest.mark.asyncio
    async def test_player_state_passthrough(self, gateway, transport):
        gateway.get_player_state = AsyncMock(return_value={"is_playing": True})
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/spotify/player")
        assert resp.json() == {"is_playing": True}

    @pytest.mark.asyncio
    async def test_nothing_playing_is_null(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/spotify/current-track")
        assert resp.status_code == 200
        assert resp.json() is None

    @pytest.mark.asyncio
    async def test_search(self, gateway, transport):
        gateway.search_tracks = AsyncMock(return_value=[
            Track(id="t1", uri="spotify:track:t1", name="Song", artists=["Band"]),
        ])
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/spotify/search", params={"q": "Band", "limit": 5})
        assert resp.json()["tracks"][0]["uri"] == "spotify:track:t1"
        gateway.search_tracks.assert_awaited_once_with("Band", limit=5)


class TestLibrary:
    @pytest.mark.asyncio
    async def test_create_playlist(self, gateway, transport):
        gateway.create_playlist = AsyncMock(return_value="pl1")
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/playlists", json={"name": "Mix"})
        assert resp.json() == {"id": "pl1"}

    @pytest.mark.asyncio
    async def test_add_tracks_requires_uris(self, gateway, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/playlists/pl1/tracks", json={"uris": []})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_toggle_like(self, gateway, transport):
        gateway.toggle_saved_track = AsyncMock(return_value=True)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/tracks/t1/like")
        assert resp.json() == {"liked": True}


class TestCredential:
    @pytest.mark.asyncio
    async def test_bearer_header_used(self, transport, monkeypatch):
        monkeypatch.setattr("spotify_assistant.adapters.web.deps.CONFIG", {"spotify_access_token": ""})
        with patch("spotify_assistant.adapters.web.deps.SpotifyClient") as client_cls:
            client_cls.return_value.pause = AsyncMock(return_value=None)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.post("/spotify/pause", headers={"Authorization": "Bearer user-tok"})
        assert resp.status_code == 200
        client_cls.assert_called_once_with("user-tok")

    @pytest.mark.asyncio
    async def test_no_credential_is_401(self, transport, monkeypatch):
        monkeypatch.setattr("spotify_assistant.adapters.web.deps.CONFIG", {"spotify_access_token": ""})
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/spotify/pause")
        assert resp.status_code == 401
