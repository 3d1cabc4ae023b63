"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

# Environment variables that override a dotted settings key.
ENV_OVERRIDES = {
    "storage.bucket": "BUCKET_NAME",
    "storage.public_url": "BUCKET_PUBLIC_URL",
    "storage.account_id": "R2_ACCOUNT_ID",
    "storage.access_key_id": "R2_ACCESS_KEY_ID",
    "storage.secret_access_key": "R2_SECRET_ACCESS_KEY",
}


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @property
    def base_dir(self) -> Path:
        """Directory holding the settings file; relative paths resolve here."""
        return self._path.resolve().parent

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present.

        A non-empty environment variable listed in `ENV_OVERRIDES` wins over
        the file.
        """
        env_name = ENV_OVERRIDES.get(key)
        if env_name and os.environ.get(env_name):
            return os.environ[env_name]
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def get_path(self, key: str, default: str | None = None) -> Path | None:
        """Return dotted `key` as a path, relative values anchored at `base_dir`."""
        value = self.get(key, default)
        if not value:
            return None
        path = Path(os.path.expanduser(str(value)))
        return path if path.is_absolute() else self.base_dir / path
