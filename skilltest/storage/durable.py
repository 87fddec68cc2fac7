from __future__ import annotations

"""Validated, backed-up document access over a raw key-value backend.

Every read goes through the key's Pydantic adapter; a document that fails
to parse or validate is replaced by the newest valid copy from its backup
slot. Every write is validated first and leaves a backup slot behind:

    backup_<key> = {"timestamp": ..., "data": <committed value>, "previous": <pre-write value>}

Higher layers never touch the backend directly.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import TypeAdapter

from ..dates import Clock, local_now
from ..errors import StorageError
from .backend import KeyValueStore
from .schema import DOCUMENTS, KEYS, LAST_BACKUP_KEY, BACKUP_PREFIX, BackupSlot, backup_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ANY = TypeAdapter(Any)


class DurableStore:
    def __init__(self, backend: KeyValueStore, *, clock: Clock = local_now) -> None:
        self.backend = backend
        self.clock = clock

    def _adapter(self, key: str) -> TypeAdapter:
        return DOCUMENTS.get(key, _ANY)

    def _get_raw(self, key: str) -> Optional[str]:
        try:
            return self.backend.get(key)
        except StorageError as e:
            logger.error("read of %s failed: %s", key, e)
            return None

    # --- reads ---

    def safe_read(self, key: str, default: T) -> T:
        """Return the validated document for key, a restored backup, or default."""
        raw = self._get_raw(key)
        if raw is None:
            return default
        try:
            return self._adapter(key).validate_json(raw)
        except ValueError as e:
            logger.warning("%s failed validation, trying backup: %s", key, e)
        restored = self._restore(key)
        return default if restored is None else restored

    def _restore(self, key: str) -> Any:
        raw = self._get_raw(backup_key(key))
        if raw is None:
            return None
        try:
            slot = BackupSlot.model_validate_json(raw)
        except ValueError as e:
            logger.error("backup slot for %s is unreadable: %s", key, e)
            return None
        adapter = self._adapter(key)
        for candidate in (slot.data, slot.previous):
            if candidate is None:
                continue
            try:
                value = adapter.validate_python(candidate)
            except ValueError:
                continue
            try:
                self.backend.set(key, json.dumps(candidate, ensure_ascii=False))
            except StorageError as e:
                logger.error("could not promote backup of %s: %s", key, e)
            logger.warning("restored %s from backup taken %s", key, slot.timestamp.isoformat())
            return value
        logger.error("no valid backup for %s; falling back to default", key)
        return None

    def _valid_document(self, key: str, raw: Optional[str]) -> Any:
        """JSON form of raw if it validates for key, else None."""
        if raw is None:
            return None
        try:
            doc = json.loads(raw)
            self._adapter(key).validate_python(doc)
        except ValueError:
            return None
        return doc

    # --- writes ---

    def safe_write(self, key: str, value: Any) -> bool:
        """Validate and commit value under key. Returns False if nothing was written."""
        adapter = self._adapter(key)
        try:
            doc = adapter.dump_python(value, mode="json")
            adapter.validate_python(doc)
            text = json.dumps(doc, ensure_ascii=False)
        except (ValueError, TypeError) as e:
            logger.error("write of %s rejected: %s", key, e)
            return False

        bkey = backup_key(key)
        try:
            old_slot = self.backend.get(bkey)
            current = self.backend.get(key)
        except StorageError as e:
            logger.error("write of %s aborted, store unreadable: %s", key, e)
            return False

        previous = self._valid_document(key, current)
        if previous is None and old_slot is not None:
            # Primary already corrupt: carry the last good value forward.
            try:
                previous = BackupSlot.model_validate_json(old_slot).data
            except ValueError:
                previous = None

        now = self.clock()
        slot = BackupSlot(timestamp=now, data=doc, previous=previous)
        try:
            self.backend.set(bkey, slot.model_dump_json())
            self.backend.set(key, text)
        except StorageError as e:
            logger.error("write of %s failed: %s", key, e)
            self._put_back(bkey, old_slot)
            return False

        try:
            self.backend.set(LAST_BACKUP_KEY, json.dumps(now.isoformat()))
        except StorageError as e:
            logger.warning("could not update backup marker: %s", e)
        logger.debug("saved %s", key)
        return True

    def _put_back(self, key: str, raw: Optional[str]) -> None:
        try:
            if raw is None:
                self.backend.delete(key)
            else:
                self.backend.set(key, raw)
        except StorageError as e:
            logger.error("could not roll back %s: %s", key, e)

    def delete(self, *keys: str, backups: bool = True) -> bool:
        """Remove keys (and their backup slots) in a single backend call."""
        doomed = list(keys)
        if backups:
            doomed += [backup_key(k) for k in keys]
        try:
            self.backend.delete(*doomed)
        except StorageError as e:
            logger.error("delete of %s failed: %s", ", ".join(keys), e)
            return False
        return True

    # --- maintenance views ---

    def last_backup_time(self) -> Optional[datetime]:
        raw = self._get_raw(LAST_BACKUP_KEY)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(json.loads(raw))
        except (ValueError, TypeError):
            return None

    def list_backups(self) -> Dict[str, Optional[datetime]]:
        """Backup slots by primary key; None marks an unreadable slot."""
        out: Dict[str, Optional[datetime]] = {}
        try:
            keys = self.backend.keys()
        except StorageError as e:
            logger.error("cannot list store keys: %s", e)
            return out
        for k in sorted(keys):
            if not k.startswith(BACKUP_PREFIX):
                continue
            raw = self._get_raw(k)
            try:
                out[k[len(BACKUP_PREFIX):]] = BackupSlot.model_validate_json(raw or "").timestamp
            except ValueError:
                out[k[len(BACKUP_PREFIX):]] = None
        return out

    def check_integrity(self, keys: Optional[List[str]] = None) -> Dict[str, str]:
        """Report "ok", "missing" or "corrupt" per primary key without repairing."""
        report: Dict[str, str] = {}
        for key in keys or list(KEYS.values()):
            raw = self._get_raw(key)
            if raw is None:
                report[key] = "missing"
            elif self._valid_document(key, raw) is None:
                report[key] = "corrupt"
            else:
                report[key] = "ok"
        return report
