"""Infrastructure: cross-cutting concerns."""

from spotify_assistant.infrastructure.usage import UsageLimitExceeded, UsageTracker

__all__ = ["UsageLimitExceeded", "UsageTracker"]
