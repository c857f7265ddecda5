"""Web adapter: FastAPI routes for chat, sessions and the Spotify proxy."""
