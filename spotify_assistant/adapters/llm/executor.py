"""Shared plumbing for LLM adapters: subprocess runner and provider factory."""

import asyncio
from typing import Optional, Tuple

from spotify_assistant.config import AI_PROVIDER
from spotify_assistant.ports.outbound import LLMPort


class LLMExecutionError(RuntimeError):
    """A provider call failed (non-zero exit, HTTP error, empty reply, timeout)."""


async def run_cancellable(
    cmd_args, timeout: float,
) -> Tuple[asyncio.subprocess.Process, bytes, bytes]:
    """Run a CLI command; kill it on timeout or cancellation.

    Returns (process, stdout, stderr). Raises asyncio.TimeoutError on timeout.
    """
    proc = await asyncio.create_subprocess_exec(
        *cmd_args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except (asyncio.TimeoutError, asyncio.CancelledError):
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        raise
    return proc, stdout, stderr


def create_executor(provider: Optional[str] = None) -> LLMPort:
    """Create an LLM adapter for the selected provider."""
    from spotify_assistant.adapters.llm.claude_adapter import ClaudeAdapter
    from spotify_assistant.adapters.llm.codex_adapter import CodexAdapter
    from spotify_assistant.adapters.llm.groq_adapter import GroqAdapter

    selected = (provider or AI_PROVIDER).strip().lower()
    if selected == "groq":
        return GroqAdapter()
    if selected == "claude":
        return ClaudeAdapter()
    if selected == "codex":
        return CodexAdapter()
    raise ValueError(f"Unsupported provider: {selected}")
