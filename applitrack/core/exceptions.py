"""
Exceptions raised by the storage services.

The search, filter, sort and automation functions never raise on well-typed
input; only operations addressing a stored record by id can fail.
"""


class ApplitrackError(Exception):
    """Base class for all library errors."""


class RecordNotFoundError(ApplitrackError):
    """Raised when an id does not match any stored record."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DocumentError(ApplitrackError):
    """Raised when a document upload or attachment is rejected."""
