"""Key-value table backing the conversation store."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class StorageEntry(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: str  # JSON text
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
