"""
Key-value storage backed by the storage_entries table.

Each collection (applications, rules, documents, presets) is one JSON
document under a fixed key, read and written whole.
"""
import json
import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from applitrack.db.models.storage_entry import StorageEntry
from applitrack.db.session import SessionLocal

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    JSON document store keyed by string.

    Args:
        session_factory: Callable returning a new Session (a sessionmaker)
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal

    def get_json(self, key: str, default: Any = None) -> Any:
        """
        Load the JSON document stored under key.

        Returns default when the key is absent or its value is not valid JSON.
        """
        db = self.session_factory()
        try:
            entry = db.get(StorageEntry, key)
            if entry is None:
                return default
            raw = entry.value
        finally:
            db.close()

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(f"Stored value is not valid JSON: key={key}, error={e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Serialize value and store it under key, replacing any previous value."""
        payload = json.dumps(value)
        db = self.session_factory()
        try:
            entry = db.get(StorageEntry, key)
            if entry is None:
                db.add(StorageEntry(key=key, value=payload))
            else:
                entry.value = payload
            db.commit()
            logger.debug(f"Stored key={key}, bytes={len(payload)}")
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to store key={key}: {e}", exc_info=True)
            raise
        finally:
            db.close()

    def delete(self, key: str) -> bool:
        """Remove key. Returns False when it was not present."""
        db = self.session_factory()
        try:
            entry = db.get(StorageEntry, key)
            if entry is None:
                return False
            db.delete(entry)
            db.commit()
            logger.info(f"Storage key deleted: key={key}")
            return True
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete key={key}: {e}", exc_info=True)
            raise
        finally:
            db.close()
