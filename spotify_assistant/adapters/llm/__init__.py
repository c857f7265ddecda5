"""LLM adapters: Groq HTTP, Claude CLI and Codex CLI."""

from spotify_assistant.adapters.llm.claude_adapter import ClaudeAdapter
from spotify_assistant.adapters.llm.codex_adapter import CodexAdapter
from spotify_assistant.adapters.llm.executor import (
    LLMExecutionError,
    create_executor,
    run_cancellable,
)
from spotify_assistant.adapters.llm.groq_adapter import GroqAdapter

__all__ = [
    "ClaudeAdapter",
    "CodexAdapter",
    "GroqAdapter",
    "LLMExecutionError",
    "create_executor",
    "run_cancellable",
]
