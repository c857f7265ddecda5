"""Configuration and shared settings."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

SUPPORTED_AI_PROVIDERS = ("groq", "claude", "codex")
AI_PROVIDER = os.getenv("AI_PROVIDER", "groq").strip().lower()
if AI_PROVIDER not in SUPPORTED_AI_PROVIDERS:
    _stderr_print(f"Unsupported AI_PROVIDER={AI_PROVIDER!r}, falling back to 'groq'")
    AI_PROVIDER = "groq"

MODEL_ALIASES_BY_PROVIDER = {
    "groq": {
        "large": os.getenv("GROQ_MODEL_LARGE", "llama-3.3-70b-versatile"),
        "small": os.getenv("GROQ_MODEL_SMALL", "llama-3.1-8b-instant"),
    },
    "claude": {
        "large": os.getenv("CLAUDE_MODEL_LARGE", "claude-sonnet-4-5-20250929"),
        "small": os.getenv("CLAUDE_MODEL_SMALL", "claude-haiku-4-5-20251001"),
    },
    "codex": {
        "large": os.getenv("CODEX_MODEL_LARGE", "gpt-5.3-codex"),
        "small": os.getenv("CODEX_MODEL_SMALL", "gpt-5.3-codex-mini"),
    },
}

MODEL_ALIASES = MODEL_ALIASES_BY_PROVIDER[AI_PROVIDER]

DEFAULT_MODEL = os.getenv("AI_DEFAULT_MODEL", "large").strip().lower()
if DEFAULT_MODEL not in MODEL_ALIASES:
    _stderr_print(
        f"Unsupported AI_DEFAULT_MODEL={DEFAULT_MODEL!r} for provider={AI_PROVIDER!r}, "
        f"falling back to 'large'"
    )
    DEFAULT_MODEL = "large"

CONFIG = {
    "port": int(os.getenv("PORT", "3000")),
    "ai_provider": AI_PROVIDER,
    "data_dir": os.getenv("DATA_DIR", "data"),
    # Groq (OpenAI-compatible chat completions)
    "groq_api_key": os.getenv("GROQ_API_KEY", ""),
    "groq_temperature": float(os.getenv("GROQ_TEMPERATURE", "0.7")),
    "groq_max_tokens": int(os.getenv("GROQ_MAX_TOKENS", "512")),
    # Spotify: fallback bearer token when the request carries none
    "spotify_access_token": os.getenv("SPOTIFY_ACCESS_TOKEN", ""),
    "http_timeout_seconds": float(os.getenv("HTTP_TIMEOUT_SECONDS", "15")),
    "llm_timeout_seconds": float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
    # Usage limits for LLM calls
    "usage_limits": {
        "max_calls_per_minute": 30,
        "max_calls_per_hour": 300,
        "max_calls_per_day": 2000,
        "min_call_interval_seconds": 0,
        "warning_threshold_pct": 80,
        "paused": False,
    },
}


# ── Typed config ──────────────────────────────────────


@dataclass
class UsageLimitsConfig:
    max_calls_per_minute: int = 30
    max_calls_per_hour: int = 300
    max_calls_per_day: int = 2000
    min_call_interval_seconds: int = 0
    warning_threshold_pct: int = 80
    paused: bool = False


@dataclass
class LLMConfig:
    provider: str = "groq"
    default_model: str = "large"
    groq_api_key: str = ""
    groq_temperature: float = 0.7
    groq_max_tokens: int = 512
    timeout_seconds: float = 60.0


@dataclass
class SpotifyConfig:
    access_token: str = ""
    http_timeout_seconds: float = 15.0


@dataclass
class AppConfig:
    """Typed view over CONFIG."""

    port: int = 3000
    data_dir: str = "data"
    llm: LLMConfig = field(default_factory=LLMConfig)
    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    usage_limits: UsageLimitsConfig = field(default_factory=UsageLimitsConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            data_dir=CONFIG["data_dir"],
            llm=LLMConfig(
                provider=AI_PROVIDER,
                default_model=DEFAULT_MODEL,
                groq_api_key=CONFIG["groq_api_key"],
                groq_temperature=CONFIG["groq_temperature"],
                groq_max_tokens=CONFIG["groq_max_tokens"],
                timeout_seconds=CONFIG["llm_timeout_seconds"],
            ),
            spotify=SpotifyConfig(
                access_token=CONFIG["spotify_access_token"],
                http_timeout_seconds=CONFIG["http_timeout_seconds"],
            ),
            usage_limits=UsageLimitsConfig(**CONFIG["usage_limits"]),
        )
