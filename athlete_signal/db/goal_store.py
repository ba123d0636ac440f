"""Key/value store for goals, streaks and the yearly plan."""

import json
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from .database import Database, get_db
from .models import StoreEntry

logger = logging.getLogger(__name__)


class GoalStore:
    """Persist opaque JSON blobs by key.

    Every write replaces whole values inside one transaction, and writes are
    serialized so two callers saving at once cannot interleave.
    """

    _write_lock = threading.Lock()

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def get(self, key: str) -> Optional[Any]:
        with self.db.get_session() as session:
            entry = session.query(StoreEntry).filter_by(key=key).first()
            if entry is None:
                return None
            return json.loads(entry.value)

    def set(self, key: str, value: Optional[Any]) -> None:
        """Store a value; ``None`` removes the key."""
        self.set_many({key: value})

    def set_many(self, values: Dict[str, Optional[Any]]) -> None:
        """Write several keys atomically (all or nothing)."""
        encoded = {key: None if value is None else json.dumps(value) for key, value in values.items()}

        with self._write_lock, self.db.get_session() as session:
            for key, payload in encoded.items():
                entry = session.query(StoreEntry).filter_by(key=key).first()
                if payload is None:
                    if entry is not None:
                        session.delete(entry)
                    continue
                if entry is None:
                    session.add(StoreEntry(key=key, value=payload))
                else:
                    entry.value = payload
                    entry.updated_at = datetime.utcnow()

        logger.debug(f"Stored keys: {', '.join(values)}")
