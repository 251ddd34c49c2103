"""
Preference storage.

The engine only needs get-by-user and replace-by-user. InMemoryStore keeps
records in a dict behind a lock; swap in any key-value backend that
implements PreferenceStore (a Redis-backed one would serialize with
PreferenceRecord.to_dict()).
"""

import threading
from typing import Dict, Optional, Protocol

from notification_prefs.engine.models import PreferenceRecord


class StoreUnavailableError(RuntimeError):
    """The backing store could not be reached. Never treated as 'no record'."""


class PreferenceStore(Protocol):
    def get(self, user_id: str) -> Optional[PreferenceRecord]:
        ...

    def put(self, user_id: str, record: PreferenceRecord) -> None:
        ...


class InMemoryStore:
    def __init__(self):
        self._records: Dict[str, PreferenceRecord] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[PreferenceRecord]:
        with self._lock:
            return self._records.get(user_id)

    def put(self, user_id: str, record: PreferenceRecord) -> None:
        """Replace the whole record for user_id. Records are immutable, so
        readers see either the old or the new one."""
        with self._lock:
            self._records[user_id] = record

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._records.pop(user_id, None) is not None

    def clear(self):
        with self._lock:
            self._records.clear()

    def __contains__(self, user_id) -> bool:
        with self._lock:
            return user_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
