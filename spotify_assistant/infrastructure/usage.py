"""LLM call usage tracking and rate limiting."""

import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from spotify_assistant.config import CONFIG


class UsageLimitExceeded(Exception):
    """Raised when an LLM usage limit is hit. The chat turn fails as ModelUnavailable."""


class UsageTracker:
    """Counts LLM calls in a rolling 24h window and enforces CONFIG["usage_limits"]."""

    def __init__(
        self,
        usage_file: Optional[str] = None,
        limits: Optional[Dict[str, Any]] = None,
    ):
        self.usage_file = Path(usage_file or Path(CONFIG["data_dir"]) / "usage.json")
        self.usage_file.parent.mkdir(parents=True, exist_ok=True)
        self._limits = limits
        self._data = self._load()

    @property
    def limits(self) -> Dict[str, Any]:
        return self._limits if self._limits is not None else CONFIG["usage_limits"]

    def _load(self) -> Dict[str, Any]:
        if self.usage_file.exists():
            try:
                data = json.loads(self.usage_file.read_text(encoding="utf-8"))
                if isinstance(data, dict) and isinstance(data.get("calls"), list):
                    return data
            except (OSError, ValueError) as e:
                print(f"[usage] unreadable usage file, resetting: {e}", file=sys.stderr)
        return {"calls": [], "total_calls": 0}

    def _save(self):
        try:
            self.usage_file.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8",
            )
        except OSError as e:
            print(f"[usage] failed to save usage data: {e}", file=sys.stderr)

    def _calls_since(self, seconds: float) -> int:
        cutoff = (datetime.now() - timedelta(seconds=seconds)).isoformat()
        return sum(1 for ts in self._data["calls"] if ts > cutoff)

    def check_limits(self):
        """Raise UsageLimitExceeded if the next call would break a limit."""
        limits = self.limits

        if limits.get("paused", False):
            raise UsageLimitExceeded("Usage is paused by configuration")

        min_interval = limits.get("min_call_interval_seconds", 0)
        if min_interval and self._data["calls"]:
            last_call = datetime.fromisoformat(self._data["calls"][-1])
            elapsed = (datetime.now() - last_call).total_seconds()
            if elapsed < min_interval:
                raise UsageLimitExceeded(
                    f"Cooldown: {min_interval - elapsed:.1f}s remaining "
                    f"(min interval: {min_interval}s)"
                )

        for window, seconds, key, label in (
            ("minute", 60, "max_calls_per_minute", "Per-minute"),
            ("hour", 3600, "max_calls_per_hour", "Per-hour"),
            ("day", 86400, "max_calls_per_day", "Daily"),
        ):
            used = self._calls_since(seconds)
            if used >= limits[key]:
                raise UsageLimitExceeded(f"{label} limit reached: {used}/{limits[key]}")

    def record_call(self):
        cutoff = (datetime.now() - timedelta(hours=24)).isoformat()
        self._data["calls"] = [ts for ts in self._data["calls"] if ts > cutoff]
        self._data["calls"].append(datetime.now().isoformat())
        self._data["total_calls"] = self._data.get("total_calls", 0) + 1
        self._save()

    def get_warning(self) -> Optional[str]:
        """Warning text once daily usage passes the configured threshold."""
        limits = self.limits
        per_day = self._calls_since(86400)
        threshold = limits["max_calls_per_day"] * limits["warning_threshold_pct"] / 100
        if per_day >= threshold:
            return (
                f"Usage warning: {per_day}/{limits['max_calls_per_day']} "
                f"daily calls used ({per_day * 100 // limits['max_calls_per_day']}%)"
            )
        return None

    def get_status(self) -> Dict[str, Any]:
        limits = self.limits
        return {
            "calls_today": self._calls_since(86400),
            "calls_this_hour": self._calls_since(3600),
            "calls_this_minute": self._calls_since(60),
            "limits": {
                "per_minute": limits["max_calls_per_minute"],
                "per_hour": limits["max_calls_per_hour"],
                "per_day": limits["max_calls_per_day"],
            },
            "paused": limits.get("paused", False),
            "total_calls_all_time": self._data.get("total_calls", 0),
        }
