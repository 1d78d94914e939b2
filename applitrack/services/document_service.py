"""
Document service.

Stores uploaded files (resumes, cover letters, portfolios) as base64 data
URLs and keeps each document's optional link to an application valid.
"""
import base64
import logging
import uuid
from pathlib import PurePath
from typing import Dict, List, Optional

from applitrack.core.constants import DOCUMENT_CATEGORIES, DOCUMENTS_STORAGE_KEY
from applitrack.core.exceptions import DocumentError, RecordNotFoundError
from applitrack.schemas.job import Document
from applitrack.services.date_utils import now_iso, timestamp_or_epoch
from applitrack.services.job_storage import JobStorage
from applitrack.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)


def _newest_first(documents: List[Document]) -> List[Document]:
    return sorted(documents, key=lambda doc: timestamp_or_epoch(doc.upload_date), reverse=True)


class DocumentService:
    """
    Document library with optional per-application links.

    Args:
        store: Key-value store holding the document list
        job_storage: Used to check that linked application ids exist
    """

    def __init__(self, store: KeyValueStore, job_storage: JobStorage):
        self.store = store
        self.job_storage = job_storage

    def _load(self) -> List[Document]:
        documents = []
        for raw in self.store.get_json(DOCUMENTS_STORAGE_KEY, default=[]) or []:
            try:
                documents.append(Document.model_validate(raw))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable document record: {e}")
        return documents

    def _save(self, documents: List[Document]) -> None:
        self.store.set_json(DOCUMENTS_STORAGE_KEY, [doc.to_storage() for doc in documents])

    def _require_job(self, job_id: str) -> None:
        if not self.job_storage.exists(job_id):
            raise DocumentError(f"Cannot link document to unknown application: {job_id}")

    # ============================================
    # Upload and lookup
    # ============================================

    def upload_document(
        self,
        name: str,
        data: bytes,
        type: str,
        job_id: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> Document:
        """
        Validate and store a file.

        Args:
            name: Original file name; its extension must be allowed for type
            data: Raw file bytes
            type: Document type (resume, cover-letter, portfolio, other)
            job_id: Application to link to, if any
            mime_type: Content type, defaults to application/octet-stream

        Raises:
            DocumentError: Unknown type, disallowed extension, oversize file or
                unknown application id
        """
        category = DOCUMENT_CATEGORIES.get(type)
        if category is None:
            raise DocumentError(f"Invalid document type: {type}")

        extension = PurePath(name).suffix.lower()
        if extension not in category["allowed_types"]:
            raise DocumentError(f"File type {extension or '(none)'} not allowed for {category['name']}")

        max_bytes = category["max_size_mb"] * 1024 * 1024
        if len(data) > max_bytes:
            raise DocumentError(f"File size exceeds {category['max_size_mb']}MB limit")

        if job_id is not None:
            self._require_job(job_id)

        mime_type = mime_type or "application/octet-stream"
        encoded = base64.b64encode(data).decode("ascii")
        document = Document(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            name=name,
            type=type,
            file_size=len(data),
            mime_type=mime_type,
            upload_date=now_iso(),
            content=f"data:{mime_type};base64,{encoded}",
            job_id=job_id,
        )

        documents = self._load()
        documents.append(document)
        self._save(documents)

        logger.info(f"Document uploaded: document_id={document.id}, type={type}, size={len(data)}, job_id={job_id}")
        return document

    def get_documents(self, job_id: Optional[str] = None) -> List[Document]:
        """All documents, or those linked to job_id, newest first."""
        documents = self._load()
        if job_id is not None:
            documents = [doc for doc in documents if doc.job_id == job_id]
        return _newest_first(documents)

    def get_documents_by_type(self, type: str, job_id: Optional[str] = None) -> List[Document]:
        return [doc for doc in self.get_documents(job_id) if doc.type == type]

    def get_document(self, document_id: str) -> Document:
        for doc in self._load():
            if doc.id == document_id:
                return doc
        raise RecordNotFoundError("Document", document_id)

    def get_document_bytes(self, document_id: str) -> bytes:
        """Decode a stored document's content back to raw bytes."""
        doc = self.get_document(document_id)
        if not doc.content:
            return b""
        _, _, encoded = doc.content.partition("base64,")
        return base64.b64decode(encoded)

    def search_documents(self, query: str, job_id: Optional[str] = None) -> List[Document]:
        """Case-insensitive substring match on name or type."""
        term = query.lower()
        return [
            doc for doc in self.get_documents(job_id)
            if term in doc.name.lower() or term in doc.type.lower()
        ]

    # ============================================
    # Changes
    # ============================================

    def update_document(self, document_id: str, name: Optional[str] = None, type: Optional[str] = None) -> Document:
        """Rename or re-type a document. Links are changed via attach/detach."""
        documents = self._load()
        for position, doc in enumerate(documents):
            if doc.id == document_id:
                changes = {}
                if name is not None:
                    changes["name"] = name
                if type is not None:
                    changes["type"] = type
                documents[position] = Document.model_validate({**doc.model_dump(), **changes})
                self._save(documents)
                return documents[position]
        raise RecordNotFoundError("Document", document_id)

    def delete_document(self, document_id: str) -> None:
        documents = self._load()
        remaining = [doc for doc in documents if doc.id != document_id]
        if len(remaining) == len(documents):
            raise RecordNotFoundError("Document", document_id)
        self._save(remaining)
        logger.info(f"Document deleted: document_id={document_id}")

    def delete_multiple_documents(self, document_ids: List[str]) -> int:
        """Delete every listed document that exists; returns how many were removed."""
        wanted = set(document_ids)
        documents = self._load()
        remaining = [doc for doc in documents if doc.id not in wanted]
        deleted = len(documents) - len(remaining)
        if deleted:
            self._save(remaining)
        logger.info(f"Documents deleted: requested={len(wanted)}, deleted={deleted}")
        return deleted

    def attach_document_to_job(self, document_id: str, job_id: str) -> Document:
        self._require_job(job_id)
        return self._set_link(document_id, job_id)

    def detach_document_from_job(self, document_id: str) -> Document:
        return self._set_link(document_id, None)

    def detach_documents_for_job(self, job_id: str) -> int:
        """Unlink every document pointing at job_id (call before deleting the application)."""
        documents = self._load()
        count = 0
        for position, doc in enumerate(documents):
            if doc.job_id == job_id:
                documents[position] = doc.model_copy(update={"job_id": None})
                count += 1
        if count:
            self._save(documents)
            logger.info(f"Documents detached: job_id={job_id}, count={count}")
        return count

    def delete_job(self, job_id: str) -> int:
        """
        Hard-delete an application, unlinking its documents first so no
        document is left pointing at a missing record.

        Returns:
            Number of documents unlinked
        """
        if not self.job_storage.exists(job_id):
            raise RecordNotFoundError("Job application", job_id)
        detached = self.detach_documents_for_job(job_id)
        self.job_storage.delete(job_id)
        return detached

    def _set_link(self, document_id: str, job_id: Optional[str]) -> Document:
        documents = self._load()
        for position, doc in enumerate(documents):
            if doc.id == document_id:
                documents[position] = doc.model_copy(update={"job_id": job_id})
                self._save(documents)
                logger.info(f"Document link changed: document_id={document_id}, job_id={job_id}")
                return documents[position]
        raise RecordNotFoundError("Document", document_id)

    # ============================================
    # Statistics
    # ============================================

    def get_storage_stats(self) -> Dict:
        """Totals overall and per type, plus the five most recent uploads."""
        documents = self._load()
        size_by_type: Dict[str, Dict[str, int]] = {}
        for doc in documents:
            bucket = size_by_type.setdefault(doc.type, {"count": 0, "size": 0})
            bucket["count"] += 1
            bucket["size"] += doc.file_size or 0

        return {
            "total_documents": len(documents),
            "total_size": sum(doc.file_size or 0 for doc in documents),
            "size_by_type": size_by_type,
            "recent_uploads": _newest_first(documents)[:5],
        }
