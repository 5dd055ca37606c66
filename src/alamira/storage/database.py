from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STORE_FILE = "store.json"


class Database:
    """Durable key-value store kept as one JSON object in the data directory."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._store_path = data_dir / STORE_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def store_path(self) -> Path:
        return self._store_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, Any]:
        if not self._store_path.exists():
            return {}

        try:
            with self._store_path.open("r") as handle:
                data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Invalid JSON in store file: {self._store_path}\n{exc}"
            ) from exc

        if not isinstance(data, dict):
            raise ValueError(f"Store file is not a JSON object: {self._store_path}")
        return data

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        self.ensure_dirs()
        data = self._load()
        data[key] = value

        tmp_path = self._store_path.with_suffix(".tmp")
        with tmp_path.open("w") as handle:
            json.dump(data, handle, indent=2)
        os.replace(tmp_path, self._store_path)
        logger.debug("Stored key '%s' in %s", key, self._store_path)

    def init(self, force: bool = False) -> bool:
        """Create the data directory and an empty store.

        Returns True when a store file was written.
        """
        self.ensure_dirs()
        if self._store_path.exists() and not force:
            return False
        self._store_path.write_text("{}\n")
        return True
