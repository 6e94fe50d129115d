"""SQLite key-value backend built on the SQLModel engine."""

import logging
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from chatbot.models.storage import StorageEntry
from chatbot.services.storage.base import BaseKeyValueBackend

logger = logging.getLogger(__name__)


class SQLModelBackend(BaseKeyValueBackend):
    """One row per key. Every call runs in its own session, so the last write wins."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_item(self, key: str) -> str | None:
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            if entry:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
            else:
                entry = StorageEntry(key=key, value=value)
            session.add(entry)
            session.commit()

    def remove_item(self, key: str) -> None:
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            if entry:
                session.delete(entry)
                session.commit()
                logger.debug(f"Removed storage key {key}")

    def keys(self) -> list[str]:
        with Session(self.engine) as session:
            return list(session.exec(select(StorageEntry.key)).all())

    def close(self) -> None:
        self.engine.dispose()
