"""
StorageEntry model - one JSON document per fixed storage key.
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from applitrack.db.base import Base


class StorageEntry(Base):
    """
    Key-value row holding a serialized JSON document.
    
    Keys are fixed identifiers such as "job-applications" or
    "applitrack-status-rules"; the value is the whole collection.
    """
    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # JSON text
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<StorageEntry(key='{self.key}', size={len(self.value or '')})>"
