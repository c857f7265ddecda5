"""Claude CLI adapter — implements LLMPort."""

import asyncio
import sys
import uuid
from datetime import datetime
from typing import Optional

from spotify_assistant.adapters.llm.executor import LLMExecutionError, run_cancellable
from spotify_assistant.config import CONFIG
from spotify_assistant.infrastructure.usage import UsageTracker


class ClaudeAdapter:
    """Runs `claude --print` once per chat turn. Stateless: a fresh session id per call."""

    def __init__(self, usage_tracker: Optional[UsageTracker] = None):
        self.usage_tracker = usage_tracker or UsageTracker()

    async def execute(
        self,
        message: str,
        system_prompt: Optional[str] = None,
        session_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        self.usage_tracker.check_limits()
        timeout = CONFIG["llm_timeout_seconds"]
        print(f"[{datetime.now().isoformat()}] Executing with Claude CLI", file=sys.stderr)

        args = [
            "claude", "--print",
            "--session-id", session_id or str(uuid.uuid4()),
            "--output-format", "text",
        ]
        if model:
            args.extend(["--model", model])
        if system_prompt:
            args.extend(["--system-prompt", system_prompt])
        args.append(message)

        try:
            proc, stdout, stderr = await run_cancellable(args, timeout=timeout)
        except asyncio.TimeoutError:
            raise LLMExecutionError(f"Timeout ({timeout:.0f}s)")

        if proc.returncode != 0:
            raise LLMExecutionError(
                f"Exit code {proc.returncode}: {stderr.decode('utf-8', 'replace').strip()}"
            )

        print(f"[{datetime.now().isoformat()}] Completed", file=sys.stderr)
        self.usage_tracker.record_call()
        warning = self.usage_tracker.get_warning()
        if warning:
            print(warning, file=sys.stderr)
        return stdout.decode("utf-8").strip()
