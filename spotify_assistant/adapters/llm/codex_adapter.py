"""Codex CLI adapter — implements LLMPort."""

import asyncio
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from spotify_assistant.adapters.llm.executor import LLMExecutionError, run_cancellable
from spotify_assistant.config import CONFIG
from spotify_assistant.infrastructure.usage import UsageTracker


class CodexAdapter:
    """Runs `codex exec` and reads the last message from its output file."""

    def __init__(self, usage_tracker: Optional[UsageTracker] = None):
        self.usage_tracker = usage_tracker or UsageTracker()

    @staticmethod
    def _compose_prompt(message: str, system_prompt: Optional[str]) -> str:
        # codex exec has no system prompt flag
        if not system_prompt:
            return message
        return (
            "System instructions:\n"
            f"{system_prompt}\n\n"
            "User message:\n"
            f"{message}"
        )

    async def execute(
        self,
        message: str,
        system_prompt: Optional[str] = None,
        session_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        self.usage_tracker.check_limits()
        timeout = CONFIG["llm_timeout_seconds"]

        fd, output_path = tempfile.mkstemp(prefix="codex-last-", suffix=".txt")
        os.close(fd)
        out_file = Path(output_path)

        args = [
            "codex", "exec",
            "--color", "never",
            "--output-last-message", output_path,
        ]
        if model:
            args.extend(["--model", model])
        args.append(self._compose_prompt(message, system_prompt))
        print(f"[{datetime.now().isoformat()}] Executing with Codex CLI", file=sys.stderr)

        try:
            proc, stdout, stderr = await run_cancellable(args, timeout=timeout)
            if proc.returncode != 0:
                err_text = stderr.decode("utf-8").strip() or stdout.decode("utf-8").strip()
                raise LLMExecutionError(f"Exit code {proc.returncode}: {err_text}")

            response = ""
            if out_file.exists():
                response = out_file.read_text(encoding="utf-8").strip()
            if not response:
                response = stdout.decode("utf-8").strip()
            if not response:
                raise LLMExecutionError("Codex returned empty response")
        except asyncio.TimeoutError:
            raise LLMExecutionError(f"Timeout ({timeout:.0f}s)")
        finally:
            out_file.unlink(missing_ok=True)

        print(f"[{datetime.now().isoformat()}] Completed", file=sys.stderr)
        self.usage_tracker.record_call()
        warning = self.usage_tracker.get_warning()
        if warning:
            print(warning, file=sys.stderr)
        return response
