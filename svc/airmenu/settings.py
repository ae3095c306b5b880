from __future__ import annotations
import json
import logging
import os
import threading
from typing import Dict, Optional

from . import config

logger = logging.getLogger(__name__)


class SettingsStore:
    """
    Small string key/value store persisted as a JSON file.

    Holds the API credentials and the last focused metric. Every `set` is
    written through to disk so a crash never loses a credential change.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or config.SETTINGS_FILE
        self._lock = threading.Lock()
        self._values: Dict[str, str] = self._load()

    def _ensure_dirs(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), mode=0o700, exist_ok=True)

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read settings from {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.path}: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self) -> None:
        self._ensure_dirs()
        # holds the client secret: owner read/write only
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(self._values, f, indent=2)
        os.chmod(self.path, 0o600)

    def get(self, key: str) -> str:
        """Return the stored value, or an empty string when unset."""
        with self._lock:
            return self._values.get(key, "")

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._save()
