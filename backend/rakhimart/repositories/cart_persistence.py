"""
rakhimart/repositories/cart_persistence.py - Where a cart lives between requests / restarts.

Every backend exposes the same two calls:
- `load() -> dict | None`  : raw persisted record, None when nothing was saved yet
- `save(record: dict)`     : overwrite the record (last write wins)

Validation of the record is the Cart Store's job; backends only move JSON-able dicts.
I/O failures surface as `PersistenceUnavailable`. A file that exists but cannot be decoded
raises `ValueError` (json.JSONDecodeError) so the store can treat it as malformed.
"""
import json
import os
import tempfile
from typing import Any, Dict, Optional

from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exc

from rakhimart.core.errors import PersistenceUnavailable

Record = Dict[str, Any]

# RetryError (deadline hit) is a GoogleAPIError but not a GoogleAPICallError.
_FIRESTORE_ERRORS = (gexc.GoogleAPIError, auth_exc.GoogleAuthError)


class InMemoryCartPersistence:
    """Process-local storage; nothing survives a restart."""

    def __init__(self, record: Optional[Record] = None):
        self._record = json.loads(json.dumps(record)) if record is not None else None

    def load(self) -> Optional[Record]:
        if self._record is None:
            return None
        return json.loads(json.dumps(self._record))

    def save(self, record: Record) -> None:
        self._record = json.loads(json.dumps(record))


class JsonFileCartPersistence:
    """
    One JSON file per cart key, the local-storage equivalent for a single device.
    Writes go to a temp file that is renamed over the target so a crash never leaves half a record.
    """

    def __init__(self, directory: str, key: str = "cart"):
        self.directory = directory
        self.path = os.path.join(directory, f"{key}.json")

    def load(self) -> Optional[Record]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceUnavailable(f"cannot read {self.path}: {exc}") from exc

    def save(self, record: Record) -> None:
        tmp = None
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(record, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
            tmp = None
        except OSError as exc:
            raise PersistenceUnavailable(f"cannot write {self.path}: {exc}") from exc
        finally:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)


class FirestoreCartPersistence:
    """Cart document per owner: `carts/{uid}` (collection name is prefix-aware)."""

    def __init__(self, db, uid: str, collection: str = "carts"):
        self._doc = db.collection(collection).document(uid)

    def load(self) -> Optional[Record]:
        try:
            snap = self._doc.get()
        except _FIRESTORE_ERRORS as exc:
            raise PersistenceUnavailable(str(exc)) from exc
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def save(self, record: Record) -> None:
        try:
            self._doc.set(record)
        except _FIRESTORE_ERRORS as exc:
            raise PersistenceUnavailable(str(exc)) from exc
