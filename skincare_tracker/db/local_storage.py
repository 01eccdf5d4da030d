"""Device-local key/value storage

Holds string values only (callers serialize). Scoped to this device and
never synced; the reminder list lives here.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from skincare_tracker.exceptions import wrap_external_exception

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Key/value store that lives as long as the process"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value


class FileKeyValueStore:
    """
    Key/value store persisted as one JSON object file

    The whole file is rewritten on every write through a temporary file and
    an atomic rename, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"{self.path} does not contain a JSON object")
        return data

    def read(self, key: str) -> Optional[str]:
        try:
            return self._load().get(key)
        except (OSError, json.JSONDecodeError, TypeError) as e:
            raise wrap_external_exception(e, operation="local_storage_read", context={"key": key})

    def write(self, key: str, value: str) -> None:
        try:
            data = self._load()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            tmp_path.replace(self.path)
        except (OSError, json.JSONDecodeError, TypeError) as e:
            raise wrap_external_exception(e, operation="local_storage_write", context={"key": key})

        logger.debug(f"Persisted key '{key}' to {self.path}")
