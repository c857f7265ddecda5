"""Action extraction from LLM response text.

Pure Python, no framework dependencies. The model answers in prose and
embeds zero or more JSON objects, one per action:

    I'll pause that.
    {"function": "pausePlayback", "args": {}}
"""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from spotify_assistant.domain.models import ActionRequest

# Reasoning block some models emit before answering
THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


def _log(msg: str):
    print(f"[extractor] {msg}", file=sys.stderr)


@dataclass
class ExtractionResult:
    narrative: str
    actions: List[ActionRequest] = field(default_factory=list)


def strip_thinking(text: str) -> str:
    """Remove the first <think>...</think> block, delimiters included."""
    return THINK_RE.sub("", text, count=1)


def _match_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for j in range(start, len(text)):
        ch = text[j]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return j + 1
    return None


def normalize_action(obj: Any) -> Optional[ActionRequest]:
    """Canonicalize the encodings the model uses into an ActionRequest.

    Accepted: {"function": k, "args": {...}} (or "params"), {"name": k, "args": {...}},
    and {"name": k, ...fields} where the remaining fields are the args.
    """
    if not isinstance(obj, dict):
        return None

    if "function" in obj:
        kind = obj["function"]
        args = obj.get("args", obj.get("params", {}))
    elif "name" in obj:
        kind = obj["name"]
        if isinstance(obj.get("args"), dict):
            args = obj["args"]
        else:
            args = {k: v for k, v in obj.items() if k != "name"}
    else:
        return None

    if not isinstance(kind, str) or not kind.strip():
        return None
    if args is None:
        args = {}
    return ActionRequest(kind=kind.strip(), args=args)


def extract(text: str) -> ExtractionResult:
    """Split raw model output into narrative text and action requests.

    A balanced span that fails to decode is not consumed: scanning resumes one
    character past its opening brace, so an action wrapped in stray braces is
    still found. Only the first thinking block is stripped; later ones are
    kept verbatim in the narrative.
    """
    body = strip_thinking(text or "")

    actions: List[ActionRequest] = []
    removed: List[Tuple[int, int]] = []
    i = 0
    while True:
        start = body.find("{", i)
        if start < 0:
            break
        end = _match_brace(body, start)
        if end is None:
            i = start + 1
            continue
        candidate = body[start:end]
        try:
            obj = json.loads(candidate)
        except json.JSONDecodeError as e:
            _log(f"skipped unparseable span ({e.msg}): {candidate[:80]!r}")
            i = start + 1
            continue
        removed.append((start, end))
        i = end
        action = normalize_action(obj)
        if action is None:
            _log(f"dropped JSON object without an action name: {candidate[:80]!r}")
            continue
        actions.append(action)

    narrative = body
    for start, end in reversed(removed):
        narrative = narrative[:start] + narrative[end:]
    return ExtractionResult(narrative=narrative.strip(), actions=actions)


def parse_actions(text: str) -> List[ActionRequest]:
    """Extract action requests from LLM response text."""
    return extract(text).actions


def strip_actions(text: str) -> str:
    """Remove the thinking block and all action JSON from text."""
    return extract(text).narrative
