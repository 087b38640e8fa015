from datetime import datetime, timezone

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =========================
# StorageEntry
# =========================
class StorageEntry(SQLModel, table=True):
    """브라우저 localStorage 역할: key 하나당 JSON blob 하나"""

    __tablename__ = "storage_entry"

    key: str = Field(primary_key=True)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow)
