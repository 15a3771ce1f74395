"""Persisted transport credentials."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Protocol

from loguru import logger


class CredentialStore(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, blob: dict[str, Any]) -> None: ...


class FileCredentialStore:
    """Stores the credential blob as one JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("credentials.load.error path={} error={}", self.path, e)
            return None
        if not isinstance(data, dict):
            logger.error("credentials.load.invalid path={}", self.path)
            return None
        return data

    def save(self, blob: dict[str, Any]) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(blob, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
