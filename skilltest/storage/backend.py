from __future__ import annotations

"""Key-value backends holding raw JSON text per key.

A backend is deliberately dumb: it stores strings and knows nothing about
documents, validation or backups. ``DurableStore`` layers those on top.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from ..errors import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, *keys: str) -> None: ...

    def keys(self) -> List[str]: ...


class MemoryStore:
    """Process-local store; ``quota_bytes`` caps the summed value sizes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, *, quota_bytes: Optional[int] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaError(f"quota of {self.quota_bytes} bytes exceeded writing {key!r}")
        self._data[key] = value

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileStore:
    """All keys in one JSON object file, rewritten atomically on each change.

    The whole file is re-read on every access so a second process sharing
    the file sees committed writes (last writer wins, no merge).
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"cannot read store file {self.path}: {e}") from e
        try:
            data = json.loads(raw_text)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            self._set_aside(raw_text)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _set_aside(self, raw_text: str) -> None:
        # Keep the unreadable file for inspection and start from an empty store.
        name = f"{self.path.stem}.corrupt-{datetime.now().strftime('%Y%m%d-%H%M%S')}{self.path.suffix}"
        try:
            self.path.with_name(name).write_text(raw_text, encoding="utf-8")
            self.path.unlink()
        except OSError as e:
            raise StorageError(f"store file {self.path} is corrupt and cannot be moved aside: {e}") from e
        logger.error("store file %s was not a JSON object; moved to %s", self.path, name)

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise StorageError(f"cannot write store file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, *keys: str) -> None:
        data = self._load()
        if not any(k in data for k in keys):
            return
        for key in keys:
            data.pop(key, None)
        self._save(data)

    def keys(self) -> List[str]:
        return list(self._load().keys())
