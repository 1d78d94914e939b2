"""
Unit tests for record schemas and database setup.
"""
import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from applitrack.db.init_db import init_db
from applitrack.schemas.automation import StatusRuleCreate
from applitrack.schemas.job import JobApplication, JobUpdate


def test_accepts_camel_case_and_snake_case():
    """Test stored (camelCase) and Python (snake_case) spellings both load."""
    stored = JobApplication.model_validate({
        "id": "1", "company": "Acme", "role": "Engineer", "workLocation": "NYC",
        "appliedDate": "2024-01-15", "jobType": "contract",
    })
    direct = JobApplication(id="1", company="Acme", role="Engineer", work_location="NYC",
                            applied_date="2024-01-15", job_type="contract")

    assert stored == direct
    assert stored.to_storage()["jobType"] == "contract"


def test_blank_optional_fields_become_none():
    """Test cleared form fields are treated as unset."""
    job = JobApplication(id="1", company="Acme", role="Engineer", work_location="NYC",
                         applied_date="2024-01-15", priority="", experience_level=" ", interview_date="")

    assert job.priority is None
    assert job.experience_level is None
    assert job.has_interview is False


@pytest.mark.parametrize("field,value", [
    ("status", "ghosted"),
    ("job_type", "gig"),
    ("work_mode", "moon"),
    ("priority", "urgent"),
])
def test_enum_fields_reject_unknown_values(field, value):
    with pytest.raises(ValidationError):
        JobUpdate(**{field: value})


def test_rule_time_delay_must_be_positive():
    with pytest.raises(ValidationError):
        StatusRuleCreate(name="x", from_status="applied", to_status="applied",
                         condition="time_elapsed", time_delay=0)


def test_init_db_creates_storage_table():
    """Test the storage table is created on the given engine."""
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    init_db(bind=engine)

    assert "storage_entries" in inspect(engine).get_table_names()
