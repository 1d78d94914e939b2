"""
Unit tests for document upload, lookup and application links.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from applitrack.core.exceptions import DocumentError, RecordNotFoundError
from applitrack.db.base import Base
from applitrack.schemas.job import JobCreate
from applitrack.services.document_service import DocumentService
from applitrack.services.job_storage import JobStorage
from applitrack.services.storage_service import KeyValueStore


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PDF_BYTES = b"%PDF-1.4 test resume"


@pytest.fixture(scope="function")
def store():
    """Fresh key-value store for each test."""
    Base.metadata.create_all(bind=test_engine)
    try:
        yield KeyValueStore(TestSessionLocal)
    finally:
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def job_storage(store):
    return JobStorage(store)


@pytest.fixture
def documents(store, job_storage):
    return DocumentService(store, job_storage)


@pytest.fixture
def job(job_storage):
    return job_storage.add(JobCreate(company="Acme", role="Engineer", work_location="NYC", applied_date="2024-01-15"))


# ============================================
# Upload validation
# ============================================

def test_upload_stores_data_url(documents):
    """Test content is kept as a base64 data URL and decodes back."""
    doc = documents.upload_document("resume.pdf", PDF_BYTES, "resume", mime_type="application/pdf")

    assert doc.id.startswith("doc-")
    assert doc.file_size == len(PDF_BYTES)
    assert doc.content.startswith("data:application/pdf;base64,")
    assert doc.job_id is None
    assert documents.get_document_bytes(doc.id) == PDF_BYTES


def test_upload_rejects_unknown_type(documents):
    with pytest.raises(DocumentError):
        documents.upload_document("resume.pdf", PDF_BYTES, "transcript")


def test_upload_rejects_disallowed_extension(documents):
    """Test extensions are checked per document type, case-insensitively."""
    with pytest.raises(DocumentError, match="not allowed"):
        documents.upload_document("photo.png", b"img", "resume")

    doc = documents.upload_document("RESUME.PDF", PDF_BYTES, "resume")
    assert doc.name == "RESUME.PDF"


def test_upload_rejects_oversize_file(documents):
    """Test cover letters are limited to 2MB."""
    too_big = b"x" * (2 * 1024 * 1024 + 1)
    with pytest.raises(DocumentError, match="2MB"):
        documents.upload_document("letter.txt", too_big, "cover-letter")

    exact = b"x" * (2 * 1024 * 1024)
    assert documents.upload_document("letter.txt", exact, "cover-letter").file_size == len(exact)


def test_upload_to_unknown_job_rejected(documents):
    """Test a document cannot point at a missing application."""
    with pytest.raises(DocumentError):
        documents.upload_document("resume.pdf", PDF_BYTES, "resume", job_id="missing")
    assert documents.get_documents() == []


# ============================================
# Lookup
# ============================================

def test_get_documents_by_job_and_type(documents, job):
    """Test lookups narrow by linked application and by type."""
    linked = documents.upload_document("resume.pdf", PDF_BYTES, "resume", job_id=job.id)
    documents.upload_document("letter.txt", b"Dear team", "cover-letter", job_id=job.id)
    documents.upload_document("general.pdf", PDF_BYTES, "resume")

    assert len(documents.get_documents()) == 3
    assert len(documents.get_documents(job.id)) == 2
    assert [doc.id for doc in documents.get_documents_by_type("resume", job.id)] == [linked.id]
    assert len(documents.get_documents_by_type("resume")) == 2


def test_search_documents(documents):
    """Test name or type substring match."""
    documents.upload_document("Acme_Resume.pdf", PDF_BYTES, "resume")
    documents.upload_document("deck.pptx", b"slides", "portfolio")

    assert [doc.name for doc in documents.search_documents("acme")] == ["Acme_Resume.pdf"]
    assert [doc.name for doc in documents.search_documents("PORTFOLIO")] == ["deck.pptx"]


def test_get_unknown_document_raises(documents):
    with pytest.raises(RecordNotFoundError):
        documents.get_document("doc-missing")


# ============================================
# Changes and links
# ============================================

def test_update_document(documents):
    """Test rename and retype."""
    doc = documents.upload_document("resume.pdf", PDF_BYTES, "resume")

    updated = documents.update_document(doc.id, name="resume-final.pdf", type="other")

    assert updated.name == "resume-final.pdf"
    assert updated.type == "other"
    assert documents.get_document(doc.id).name == "resume-final.pdf"


def test_attach_and_detach(documents, job):
    """Test links are validated on attach and cleared on detach."""
    doc = documents.upload_document("resume.pdf", PDF_BYTES, "resume")

    with pytest.raises(DocumentError):
        documents.attach_document_to_job(doc.id, "missing")

    assert documents.attach_document_to_job(doc.id, job.id).job_id == job.id
    assert documents.detach_document_from_job(doc.id).job_id is None


def test_delete_document_and_multiple(documents):
    """Test single and bulk deletion."""
    first = documents.upload_document("a.pdf", PDF_BYTES, "resume")
    second = documents.upload_document("b.pdf", PDF_BYTES, "resume")
    third = documents.upload_document("c.pdf", PDF_BYTES, "resume")

    documents.delete_document(first.id)
    with pytest.raises(RecordNotFoundError):
        documents.delete_document(first.id)

    assert documents.delete_multiple_documents([second.id, third.id, "doc-missing"]) == 2
    assert documents.get_documents() == []


def test_delete_job_unlinks_documents(documents, job_storage, job):
    """Test no document is left pointing at a deleted application."""
    doc = documents.upload_document("resume.pdf", PDF_BYTES, "resume", job_id=job.id)

    assert documents.delete_job(job.id) == 1

    assert job_storage.exists(job.id) is False
    assert documents.get_document(doc.id).job_id is None


def test_delete_unknown_job_raises(documents):
    with pytest.raises(RecordNotFoundError):
        documents.delete_job("missing")


# ============================================
# Statistics
# ============================================

def test_storage_stats(documents):
    """Test totals and per-type breakdown."""
    documents.upload_document("resume.pdf", b"12345", "resume")
    documents.upload_document("letter.txt", b"123", "cover-letter")
    documents.upload_document("cv.docx", b"12", "resume")

    stats = documents.get_storage_stats()

    assert stats["total_documents"] == 3
    assert stats["total_size"] == 10
    assert stats["size_by_type"]["resume"] == {"count": 2, "size": 7}
    assert stats["size_by_type"]["cover-letter"] == {"count": 1, "size": 3}
    assert len(stats["recent_uploads"]) == 3
