"""Groq chat-completions adapter over aiohttp. Implements LLMPort."""

import asyncio
import sys
from datetime import datetime
from typing import Optional

import aiohttp

from spotify_assistant.adapters.llm.executor import LLMExecutionError
from spotify_assistant.config import CONFIG, MODEL_ALIASES_BY_PROVIDER
from spotify_assistant.infrastructure.usage import UsageTracker

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqAdapter:
    """One non-streaming chat completion per call. No provider function-calling is used."""

    def __init__(self, usage_tracker: Optional[UsageTracker] = None):
        self.usage_tracker = usage_tracker or UsageTracker()

    @property
    def is_configured(self) -> bool:
        return bool(CONFIG["groq_api_key"])

    async def execute(
        self,
        message: str,
        system_prompt: Optional[str] = None,
        session_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        api_key = CONFIG["groq_api_key"]
        if not api_key:
            raise LLMExecutionError("GROQ_API_KEY not configured.")
        self.usage_tracker.check_limits()

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": message})
        payload = {
            "model": model or MODEL_ALIASES_BY_PROVIDER["groq"]["large"],
            "messages": messages,
            "temperature": CONFIG["groq_temperature"],
            "max_tokens": CONFIG["groq_max_tokens"],
            "top_p": 1,
            "stream": False,
        }
        headers = {"Authorization": f"Bearer {api_key}"}
        timeout = aiohttp.ClientTimeout(total=CONFIG["llm_timeout_seconds"])
        print(f"[{datetime.now().isoformat()}] Executing with Groq ({payload['model']})", file=sys.stderr)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(GROQ_API_URL, headers=headers, json=payload) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        raise LLMExecutionError(f"HTTP {resp.status}: {body[:300]}")
                    data = await resp.json()
        except asyncio.TimeoutError:
            raise LLMExecutionError(f"Timeout ({CONFIG['llm_timeout_seconds']:.0f}s)")
        except aiohttp.ClientError as e:
            raise LLMExecutionError(f"Groq unreachable: {e}") from e

        choices = data.get("choices") or []
        content = ((choices[0].get("message") or {}).get("content") if choices else None) or ""

        print(f"[{datetime.now().isoformat()}] Completed", file=sys.stderr)
        self.usage_tracker.record_call()
        warning = self.usage_tracker.get_warning()
        if warning:
            print(warning, file=sys.stderr)
        return content.strip()
