"""Tests for the LLM adapters and provider factory."""

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import aiohttp
import pytest

from spotify_assistant.adapters.llm.claude_adapter import ClaudeAdapter
from spotify_assistant.adapters.llm.codex_adapter import CodexAdapter
from spotify_assistant.adapters.llm.executor import LLMExecutionError, create_executor
from spotify_assistant.adapters.llm.groq_adapter import GROQ_API_URL, GroqAdapter
from spotify_assistant.infrastructure.usage import UsageLimitExceeded, UsageTracker
from spotify_assistant.ports.outbound import LLMPort


def run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


class _FakeProc:
    def __init__(self, returncode=0, stdout=b"", stderr=b""):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr


@pytest.fixture
def tracker(tmp_path):
    return UsageTracker(usage_file=str(tmp_path / "usage.json"), limits={
        "max_calls_per_minute": 999,
        "max_calls_per_hour": 999,
        "max_calls_per_day": 999,
        "min_call_interval_seconds": 0,
        "warning_threshold_pct": 80,
        "paused": False,
    })


@pytest.fixture
def llm_config(monkeypatch):
    config = {
        "groq_api_key": "gsk-test",
        "groq_temperature": 0.7,
        "groq_max_tokens": 512,
        "llm_timeout_seconds": 5,
    }
    for module in ("groq_adapter", "claude_adapter", "codex_adapter"):
        monkeypatch.setattr(f"spotify_assistant.adapters.llm.{module}.CONFIG", config)
    return config


# --- Factory ---


def test_create_executor_rejects_unknown_provider():
    with pytest.raises(ValueError):
        create_executor("unknown-provider")


@pytest.mark.parametrize("provider, cls", [
    ("groq", GroqAdapter),
    ("claude", ClaudeAdapter),
    ("CODEX", CodexAdapter),
])
def test_create_executor_selects_adapter(provider, cls, tmp_path, monkeypatch):
    monkeypatch.setattr("spotify_assistant.infrastructure.usage.CONFIG", {
        "data_dir": str(tmp_path), "usage_limits": {},
    })
    executor = create_executor(provider)
    assert isinstance(executor, cls)
    assert isinstance(executor, LLMPort)


# --- Codex / Claude CLI ---


def test_codex_uses_codex_exec_and_reads_output(monkeypatch, tracker, llm_config):
    captured = {}

    async def fake_create_subprocess_exec(*args, **kwargs):
        captured["args"] = args
        output_path = args[args.index("--output-last-message") + 1]
        Path(output_path).write_text("codex-result", encoding="utf-8")
        return _FakeProc(returncode=0)

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_create_subprocess_exec)

    response = run(CodexAdapter(tracker).execute(
        "pause", system_prompt="system-guidance", model="gpt-5",
    ))

    args = captured["args"]
    assert args[0:2] == ("codex", "exec")
    assert "gpt-5" in args
    assert "System instructions:" in args[-1]
    assert "User message:\npause" in args[-1]
    assert response == "codex-result"
    assert not Path(args[args.index("--output-last-message") + 1]).exists()
    assert tracker.get_status()["calls_today"] == 1


def test_codex_nonzero_exit(monkeypatch, tracker, llm_config):
    async def fake_create_subprocess_exec(*args, **kwargs):
        return _FakeProc(returncode=2, stderr=b"not logged in")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_create_subprocess_exec)
    with pytest.raises(LLMExecutionError, match="not logged in"):
        run(CodexAdapter(tracker).execute("pause"))


def test_claude_passes_system_prompt(monkeypatch, tracker, llm_config):
    captured = {}

    async def fake_create_subprocess_exec(*args, **kwargs):
        captured["args"] = args
        return _FakeProc(returncode=0, stdout=b"  Paused.  \n")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_create_subprocess_exec)
    response = run(ClaudeAdapter(tracker).execute("pause", system_prompt="be brief"))

    args = captured["args"]
    assert args[0:2] == ("claude", "--print")
    assert args[args.index("--system-prompt") + 1] == "be brief"
    assert args[-1] == "pause"
    assert response == "Paused."


def test_claude_timeout(monkeypatch, tracker, llm_config):
    class _SlowProc(_FakeProc):
        async def communicate(self):
            await asyncio.sleep(10)

        def kill(self):
            self.killed = True

    proc = _SlowProc(returncode=None)

    async def fake_create_subprocess_exec(*args, **kwargs):
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_create_subprocess_exec)
    llm_config["llm_timeout_seconds"] = 0.01
    with pytest.raises(LLMExecutionError, match="Timeout"):
        run(ClaudeAdapter(tracker).execute("pause"))
    assert proc.killed is True


def test_usage_limit_blocks_call(monkeypatch, tmp_path, llm_config):
    paused = UsageTracker(usage_file=str(tmp_path / "u.json"), limits={"paused": True})

    async def fail_if_called(*args, **kwargs):
        raise AssertionError("subprocess should not start")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fail_if_called)
    with pytest.raises(UsageLimitExceeded, match="paused"):
        run(ClaudeAdapter(paused).execute("pause"))


# --- Groq HTTP ---


def _mock_groq_session(status, payload):
    captured = {}

    class FakeResponse:
        def __init__(self):
            self.status = status

        async def json(self):
            return payload

        async def text(self):
            return json.dumps(payload)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, *args, **kwargs):
            pass

        def post(self, url, **kwargs):
            captured["url"] = url
            captured.update(kwargs)
            return FakeResponse()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    return FakeSession, captured


class TestGroqAdapter:
    @pytest.mark.asyncio
    async def test_returns_message_content(self, tracker, llm_config):
        session, captured = _mock_groq_session(200, {
            "choices": [{"message": {"content": ' Pausing. {"function": "pausePlayback", "args": {}} '}}],
        })
        with patch("spotify_assistant.adapters.llm.groq_adapter.aiohttp.ClientSession", session):
            text = await GroqAdapter(tracker).execute("pause", system_prompt="sys", model="m")
        assert text == 'Pausing. {"function": "pausePlayback", "args": {}}'
        assert captured["url"] == GROQ_API_URL
        assert captured["headers"]["Authorization"] == "Bearer gsk-test"
        body = captured["json"]
        assert body["model"] == "m"
        assert body["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "pause"},
        ]
        assert body["temperature"] == 0.7
        assert body["stream"] is False

    @pytest.mark.asyncio
    async def test_http_error(self, tracker, llm_config):
        session, _ = _mock_groq_session(500, {"error": "down"})
        with patch("spotify_assistant.adapters.llm.groq_adapter.aiohttp.ClientSession", session):
            with pytest.raises(LLMExecutionError, match="HTTP 500"):
                await GroqAdapter(tracker).execute("pause")
        assert tracker.get_status()["calls_today"] == 0

    @pytest.mark.asyncio
    async def test_unreachable(self, tracker, llm_config):
        class BrokenSession:
            def __init__(self, *args, **kwargs):
                raise aiohttp.ClientConnectionError("dns")

        with patch("spotify_assistant.adapters.llm.groq_adapter.aiohttp.ClientSession", BrokenSession):
            with pytest.raises(LLMExecutionError, match="unreachable"):
                await GroqAdapter(tracker).execute("pause")

    @pytest.mark.asyncio
    async def test_missing_key(self, tracker, llm_config):
        llm_config["groq_api_key"] = ""
        adapter = GroqAdapter(tracker)
        assert adapter.is_configured is False
        with pytest.raises(LLMExecutionError, match="GROQ_API_KEY"):
            await adapter.execute("pause")

    @pytest.mark.asyncio
    async def test_empty_choices(self, tracker, llm_config):
        session, _ = _mock_groq_session(200, {"choices": []})
        with patch("spotify_assistant.adapters.llm.groq_adapter.aiohttp.ClientSession", session):
            assert await GroqAdapter(tracker).execute("pause") == ""
