"""Key-value persistence backends for the pipeline cache.

WHY: The pipeline cache must survive page reloads, so it needs somewhere
to persist strings. The surrounding application decides where (browser
storage, a shared directory, a database); the cache only needs get, set,
and delete on string values.

HOW: KeyValueStore is the protocol. Two implementations ship here:
  InMemoryStore  — dict guarded by threading.Lock, for tests and single
                   process use
  DirectoryStore — one UTF-8 file per key under a base directory

RULES:
- get() returns None for missing keys (no exception)
- delete() of a missing key is a no-op
- Backend failures raise StoreError; callers decide whether to swallow them
- DirectoryStore keys are percent-encoded, so distinct keys never share a
  file and no key can escape the directory
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class StoreError(OSError):
    """Raised when a persistence backend cannot complete an operation."""


class KeyValueStore(Protocol):
    """String key-value persistence, fallible and best-effort."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Thread-safe in-memory key-value store.

    RULES:
    - All public methods acquire self._lock
    - Values are stored as given (strings)
    """

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class DirectoryStore:
    """Key-value store backed by one file per key.

    WHY: Lets several processes on one machine share cached pipeline
    snapshots without a database.

    HOW: Each key maps to ``<base_dir>/<percent-encoded key>.json``. Writes go to
    a temporary sibling file first and are then renamed over the target,
    so a reader never sees a half-written value.

    RULES:
    - base_dir is created on first write
    - Keys are encoded with quote(key, safe=""); the mapping is one-to-one
    - OSError from the filesystem is re-raised as StoreError
    """

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, key: str) -> Path:
        encoded = quote(key, safe="")
        return self._base_dir / "{}.json".format(encoded)

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError("Failed to read {}: {}".format(path, exc)) from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise StoreError("Failed to write {}: {}".format(path, exc)) from exc

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StoreError("Failed to delete {}: {}".format(path, exc)) from exc
        logger.debug("Deleted cache file %s", path)
