"""JSON file storage: implements StoragePort for chat sessions."""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional

from spotify_assistant.config import CONFIG


class JsonStorage:
    """One JSON list per key under a data directory. Writes are atomic."""

    def __init__(self, storage_dir: Optional[str] = None):
        self._storage_dir = Path(storage_dir or CONFIG["data_dir"])
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._storage_dir / f"{key}.json"

    def load(self, key: str) -> list:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print(f"[storage] unreadable {path.name}, starting empty: {e}", file=sys.stderr)
            return []
        return raw if isinstance(raw, list) else []

    def save(self, key: str, data: list) -> None:
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
