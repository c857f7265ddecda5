"""Spotify Web API adapter."""

from spotify_assistant.adapters.spotify.client import SpotifyClient

__all__ = ["SpotifyClient"]
