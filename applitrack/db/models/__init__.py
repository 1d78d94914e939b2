"""
Database models module.

All models must be imported here to be registered with Base.metadata before
table creation.
"""
from applitrack.db.models.storage_entry import StorageEntry

__all__ = [
    "StorageEntry",
]
