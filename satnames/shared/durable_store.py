"""Durable key-value slots that survive a process restart."""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Small JSON-file backed store.

    Every mutation is written through to disk before returning, so a value
    put before the browser redirect is still there when the app starts again.
    """

    STORE_VERSION = 1

    def __init__(self, storage_dir: Path | None = None, filename: str = "state.json"):
        if storage_dir is None:
            storage_dir = Path.home() / ".config" / "satnames"
        self.storage_dir = storage_dir
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.store_file = self.storage_dir / filename
        self._lock = threading.Lock()
        self._slots: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        if not self.store_file.exists():
            self._slots = {}
            return

        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            version = data.get("version", 0)
            if version >= self.STORE_VERSION:
                self._slots = dict(data.get("slots", {}))
            else:
                logger.warning("State file version mismatch, starting fresh")
                self._slots = {}
        except (OSError, ValueError) as e:
            logger.warning("Failed to load state file: %s", e)
            self._slots = {}

    def _save(self) -> None:
        data = {
            "version": self.STORE_VERSION,
            "slots": self._slots,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        tmp_file = self.store_file.with_suffix(".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_file, self.store_file)

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._slots.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._slots[key] = value
            self._save()
        logger.debug("Stored slot %s", key)

    def take(self, key: str) -> Any | None:
        """Read a slot and delete it in one step."""
        with self._lock:
            if key not in self._slots:
                return None
            value = self._slots.pop(key)
            self._save()
        logger.debug("Took slot %s", key)
        return value

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._slots:
                return False
            del self._slots[key]
            self._save()
        return True

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._slots)
