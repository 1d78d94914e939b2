"""
Unit tests for logging setup and log sanitization.
"""
import logging
from logging.handlers import RotatingFileHandler

from applitrack.core.logging_config import sanitize_log_data, setup_logging


def test_sanitize_redacts_contact_details():
    """Test personal fields are redacted, others kept."""
    data = {"company": "Acme", "email": "jane@acme.io", "phone": "555-0100", "linkedIn": "in/jane"}

    sanitized = sanitize_log_data(data)

    assert sanitized["company"] == "Acme"
    assert sanitized["email"] == "***REDACTED***"
    assert sanitized["phone"] == "***REDACTED***"
    assert sanitized["linkedIn"] == "***REDACTED***"
    assert data["email"] == "jane@acme.io"


def test_sanitize_recurses_into_nested_records():
    """Test contacts and documents nested in a record are sanitized."""
    data = {
        "id": "1",
        "contacts": [{"name": "Jane", "email": "jane@acme.io"}],
        "documents": [{"name": "resume.pdf", "content": "data:application/pdf;base64,AAAA"}],
        "salaryRange": {"min": "1", "max": "2"},
        "tags": ["a", "b"],
    }

    sanitized = sanitize_log_data(data)

    assert sanitized["contacts"][0] == {"name": "Jane", "email": "***REDACTED***"}
    assert sanitized["documents"][0]["content"] == "***REDACTED***"
    assert sanitized["salaryRange"] == {"min": "1", "max": "2"}
    assert sanitized["tags"] == ["a", "b"]


def test_setup_logging_creates_rotating_file(tmp_path):
    """Test handlers and levels are installed."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(log_level="debug", log_dir=str(tmp_path / "logs"))

        assert root.level == logging.DEBUG
        assert any(isinstance(handler, RotatingFileHandler) for handler in root.handlers)
        assert (tmp_path / "logs").is_dir()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
