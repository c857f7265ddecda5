"""Storage adapters."""

from spotify_assistant.adapters.storage.json_store import JsonStorage

__all__ = ["JsonStorage"]
